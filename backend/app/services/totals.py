"""Invoice totals: subtotal, tax and total plus display formatting.

Everything here is pure. Amounts use Decimal math so identical inputs always
produce identical outputs; provisional form values ("" or "abc") count as 0,
and so do magnitudes no invoice can hold ("1e999999").
"""

from dataclasses import dataclass
from decimal import Context, Decimal, InvalidOperation, localcontext
from typing import Iterable, List, Union

from babel import Locale, UnknownLocaleError
from babel.numbers import format_currency as babel_format_currency

from backend.app.core.errors import ValidationError
from backend.app.schemas.invoice import Invoice, InvoiceColumn, InvoiceItem, InvoiceTotalsRead, RenderedRow

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DEFAULT_LOCALE = "en_US"

# Form values at or above this magnitude count as 0
MAX_INPUT_MAGNITUDE = Decimal("1e15")
# Holds any product or sum of in-range inputs; nothing traps
ARITHMETIC_CONTEXT = Context(prec=60, traps=[])

Number = Union[Decimal, float, int, str, None]


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def to_decimal(value: Number) -> Decimal:
    """Coerce a form value to Decimal, returning 0 for anything non-numeric or out of range."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return ZERO
        try:
            number = Decimal(text)
        except InvalidOperation:
            return ZERO
    if not number.is_finite() or number.copy_abs() >= MAX_INPUT_MAGNITUDE:
        return ZERO
    return number


def _finite(value: Decimal) -> Decimal:
    return value if value.is_finite() else ZERO


def _amount(value: Number) -> Decimal:
    # computed amounts may legitimately exceed the per-field input bound
    if isinstance(value, Decimal):
        return _finite(value)
    return to_decimal(value)


def line_amount(item: InvoiceItem) -> Decimal:
    with localcontext(ARITHMETIC_CONTEXT):
        return _finite(to_decimal(item.quantity) * to_decimal(item.rate))


def compute_subtotal(items: Iterable[InvoiceItem]) -> Decimal:
    with localcontext(ARITHMETIC_CONTEXT):
        return _finite(sum((line_amount(item) for item in items), ZERO))


def compute_tax(subtotal: Decimal, tax_rate: Number) -> Decimal:
    with localcontext(ARITHMETIC_CONTEXT):
        return _finite(_amount(subtotal) * to_decimal(tax_rate) / HUNDRED)


def compute_total(subtotal: Decimal, tax: Decimal) -> Decimal:
    with localcontext(ARITHMETIC_CONTEXT):
        return _finite(_amount(subtotal) + _amount(tax))


def compute_totals(invoice: Invoice) -> InvoiceTotals:
    subtotal = compute_subtotal(invoice.items)
    tax = compute_tax(subtotal, invoice.tax_rate)
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=compute_total(subtotal, tax))


def format_currency(amount: Number, currency_code: str, locale: str = DEFAULT_LOCALE) -> str:
    """Locale-aware money formatting backed by CLDR data."""
    with localcontext(ARITHMETIC_CONTEXT):
        return babel_format_currency(_amount(amount), currency_code.upper(), locale=locale)


def default_columns() -> List[InvoiceColumn]:
    """The required system columns in display order."""
    return [
        InvoiceColumn(id="description", label="Description", type="system-text", required=True),
        InvoiceColumn(id="quantity", label="Quantity", type="system-quantity", required=True),
        InvoiceColumn(id="rate", label="Rate", type="system-rate", required=True),
        InvoiceColumn(id="amount", label="Amount", type="system-amount", required=True),
    ]


def render_cell(item: InvoiceItem, column: InvoiceColumn, currency: str, locale: str = DEFAULT_LOCALE) -> str:
    if column.type == "system-text":
        return item.description
    if column.type == "system-quantity":
        return _plain_number(item.quantity)
    if column.type == "system-rate":
        return format_currency(item.rate, currency, locale)
    if column.type == "system-amount":
        return format_currency(line_amount(item), currency, locale)

    value = item.custom_values.get(column.id)
    if value is None:
        return ""
    return _plain_number(value)


def _plain_number(value: Union[float, str]) -> str:
    # 2.0 -> "2"; text is shown as entered
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def visible_columns(invoice: Invoice) -> List[InvoiceColumn]:
    columns = invoice.columns or default_columns()
    return [column for column in columns if column.visible]


def build_totals_view(invoice: Invoice, locale: str = DEFAULT_LOCALE) -> InvoiceTotalsRead:
    totals = compute_totals(invoice)
    columns = visible_columns(invoice)
    rows = [
        RenderedRow(
            item_id=item.id,
            cells={column.id: render_cell(item, column, invoice.currency, locale) for column in columns},
        )
        for item in invoice.items
    ]
    return InvoiceTotalsRead(
        currency=invoice.currency,
        locale=locale,
        tax_rate=invoice.tax_rate,
        subtotal=totals.subtotal,
        tax=totals.tax,
        total=totals.total,
        formatted_subtotal=format_currency(totals.subtotal, invoice.currency, locale),
        formatted_tax=format_currency(totals.tax, invoice.currency, locale),
        formatted_total=format_currency(totals.total, invoice.currency, locale),
        rows=rows,
    )


def normalize_locale(locale: str | None) -> str:
    """Accept "de-DE" or "de_DE"; reject identifiers CLDR does not know."""
    if not locale:
        return DEFAULT_LOCALE
    try:
        return str(Locale.parse(locale.replace("-", "_")))
    except (ValueError, UnknownLocaleError) as exc:
        raise ValidationError(f"Unsupported locale: {locale}", field="locale") from exc
