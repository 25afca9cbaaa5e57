"""Debounced invoice autosave and the explicit editor state it serves.

Each edit replaces the pending snapshot and restarts the quiet-period timer,
so a burst of edits becomes one write. ``flush()`` saves right away (manual
save, navigating away). A failed save keeps the snapshot and reports
``SaveStatus.ERROR``; retrying is left to the caller.

This is the editor-side API: an embedding client builds a saver around
``store_saver(user_id)`` (or its own HTTP call to ``PUT /invoices/{id}``)
and drives it through ``AppState``. Nothing in the HTTP app schedules saves.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from backend.app.core.settings import get_settings
from backend.app.crud.crud_invoice import invoice_crud
from backend.app.db.session import SessionLocal
from backend.app.schemas.invoice import Invoice

logger = logging.getLogger(__name__)

SaveFn = Callable[[Invoice], None]


class SaveStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


def default_timer_factory(delay: float, callback: Callable[[], None]):
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class DebouncedSaver:
    def __init__(self, save: SaveFn, delay_seconds: Optional[float] = None, timer_factory=default_timer_factory):
        self._save = save
        if delay_seconds is None:
            delay_seconds = get_settings().autosave_delay_seconds
        self.delay_seconds = delay_seconds
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._timer = None
        self._pending: Optional[Invoice] = None
        self.status = SaveStatus.IDLE
        self.last_error: Optional[Exception] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, invoice: Invoice) -> None:
        with self._lock:
            self._pending = invoice
            self._cancel_timer()
            self._timer = self._timer_factory(self.delay_seconds, self.flush)
            self._timer.start()
            self.status = SaveStatus.PENDING

    def flush(self) -> bool:
        """Persist the pending snapshot now. Returns True when nothing is left unsaved."""
        with self._lock:
            self._cancel_timer()
            invoice = self._pending
            if invoice is None:
                return True
            self.status = SaveStatus.SAVING
            try:
                self._save(invoice)
            except Exception as exc:
                self.status = SaveStatus.ERROR
                self.last_error = exc
                logger.warning(
                    "Autosave failed; waiting for manual retry", exc_info=True,
                    extra={"invoice_id": invoice.id, "operation": "autosave"},
                )
                return False
            self._pending = None
            self.status = SaveStatus.SAVED
            self.last_error = None
            return True

    def cancel(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._pending = None
            self.status = SaveStatus.IDLE

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


@dataclass
class AppState:
    """Editor state passed explicitly to whoever needs it."""

    saver: DebouncedSaver
    user_id: Optional[str] = None
    invoice: Optional[Invoice] = None
    invoices: List[Invoice] = field(default_factory=list)

    @classmethod
    def load(cls, saver: DebouncedSaver, user_id: Optional[str], loader: Callable[[], List[Invoice]]) -> "AppState":
        invoices = loader() if user_id else []
        return cls(saver=saver, user_id=user_id, invoice=invoices[0] if invoices else None, invoices=list(invoices))

    def update_invoice(self, **changes) -> Invoice:
        if self.invoice is None:
            raise RuntimeError("No invoice is open")
        self.invoice = self.invoice.model_copy(update=changes)
        if self.user_id:
            self.saver.schedule(self.invoice)
        return self.invoice

    def open(self, invoice: Invoice) -> bool:
        """Switch to another invoice once the current one is saved.

        Returns False and stays on the current invoice when the pending save
        fails, so its unsaved edits are not overwritten by the next schedule.
        """
        if not self.saver.flush():
            return False
        self.invoice = invoice
        return True

    def close(self) -> bool:
        return self.saver.flush()


def store_saver(user_id: str) -> SaveFn:
    """Save function that writes snapshots for ``user_id`` on a fresh session."""

    def save(invoice: Invoice) -> None:
        db = SessionLocal()
        try:
            invoice_crud.upsert(db, invoice=invoice, user_id=user_id)
        finally:
            db.close()

    return save
