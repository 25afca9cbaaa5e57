import pytest

from backend.app.core.settings import get_settings
from backend.app.crud.crud_invoice import invoice_crud
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.schemas.invoice import Invoice
from backend.app.services.autosave import AppState, DebouncedSaver, SaveStatus, store_saver


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


class TimerRecorder:
    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer


@pytest.fixture
def timers():
    return TimerRecorder()


def test_rapid_edits_coalesce_into_one_save(timers):
    saved = []
    saver = DebouncedSaver(saved.append, delay_seconds=3.0, timer_factory=timers)

    for number in ("INV-1", "INV-12", "INV-123"):
        saver.schedule(Invoice(id="inv", invoice_number=number))

    assert saver.status == SaveStatus.PENDING
    assert [timer.cancelled for timer in timers.timers] == [True, True, False]
    assert timers.timers[-1].delay == 3.0

    for timer in timers.timers:
        timer.fire()

    assert [invoice.invoice_number for invoice in saved] == ["INV-123"]
    assert saver.status == SaveStatus.SAVED
    assert not saver.has_pending


def test_flush_saves_immediately_and_cancels_timer(timers):
    saved = []
    saver = DebouncedSaver(saved.append, timer_factory=timers)
    saver.schedule(Invoice(id="inv"))

    assert saver.flush() is True
    assert len(saved) == 1
    assert timers.timers[0].cancelled is True


def test_flush_without_pending_is_noop(timers):
    saved = []
    saver = DebouncedSaver(saved.append, timer_factory=timers)
    assert saver.flush() is True
    assert saved == []
    assert saver.status == SaveStatus.IDLE


def test_failed_save_surfaces_error_and_keeps_snapshot(timers):
    attempts = []

    def flaky_save(invoice):
        attempts.append(invoice)
        if len(attempts) == 1:
            raise ConnectionError("network down")

    saver = DebouncedSaver(flaky_save, timer_factory=timers)
    saver.schedule(Invoice(id="inv"))
    timers.timers[0].fire()

    assert saver.status == SaveStatus.ERROR
    assert isinstance(saver.last_error, ConnectionError)
    assert saver.has_pending
    # no automatic retry was scheduled
    assert len(timers.timers) == 1

    assert saver.flush() is True
    assert saver.status == SaveStatus.SAVED
    assert saver.last_error is None
    assert len(attempts) == 2


def test_cancel_drops_pending_save(timers):
    saved = []
    saver = DebouncedSaver(saved.append, timer_factory=timers)
    saver.schedule(Invoice(id="inv"))
    saver.cancel()
    timers.timers[0].fire()
    assert saved == []
    assert saver.status == SaveStatus.IDLE


def test_app_state_loads_and_schedules_saves(timers):
    saved = []
    saver = DebouncedSaver(saved.append, timer_factory=timers)
    state = AppState.load(saver, "owner", loader=lambda: [Invoice(id="inv", tax_rate=5)])

    assert state.invoice.id == "inv"
    updated = state.update_invoice(tax_rate=10)
    assert updated.tax_rate == 10
    assert saver.has_pending

    assert state.close() is True
    assert saved[0].tax_rate == 10


def test_app_state_without_user_does_not_persist(timers):
    saved = []
    saver = DebouncedSaver(saved.append, timer_factory=timers)
    state = AppState.load(saver, None, loader=lambda: pytest.fail("loader must not run"))
    state.open(Invoice(id="local"))
    state.update_invoice(notes="draft")
    assert not saver.has_pending
    assert saved == []


def test_update_without_open_invoice_raises(timers):
    state = AppState(saver=DebouncedSaver(lambda invoice: None, timer_factory=timers))
    with pytest.raises(RuntimeError):
        state.update_invoice(notes="x")


def test_open_keeps_current_invoice_when_its_save_fails(timers):
    saved = []
    failing = [True]

    def save(invoice):
        if failing[0]:
            raise ConnectionError("network down")
        saved.append((invoice.id, invoice.notes))

    saver = DebouncedSaver(save, timer_factory=timers)
    state = AppState(saver=saver, user_id="owner", invoice=Invoice(id="A"))
    state.update_invoice(notes="important edit")

    assert state.open(Invoice(id="B")) is False
    assert state.invoice.id == "A"
    assert saver.status == SaveStatus.ERROR

    failing[0] = False
    assert state.open(Invoice(id="B")) is True
    state.update_invoice(notes="b edit")
    assert state.close() is True
    assert saved == [("A", "important edit"), ("B", "b edit")]


def test_delay_defaults_to_configured_value(timers, monkeypatch):
    monkeypatch.setattr(get_settings(), "autosave_delay_seconds", 0.5)
    saver = DebouncedSaver(lambda invoice: None, timer_factory=timers)
    saver.schedule(Invoice(id="inv"))
    assert saver.delay_seconds == 0.5
    assert timers.timers[0].delay == 0.5


@pytest.fixture
def database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def test_store_saver_persists_latest_snapshot(timers, database):
    saver = DebouncedSaver(store_saver("owner"), timer_factory=timers)
    state = AppState(saver=saver, user_id="owner", invoice=Invoice(id="inv-auto"))
    state.update_invoice(invoice_number="INV-9")
    state.update_invoice(notes="Thanks")
    assert state.close() is True

    db = SessionLocal()
    try:
        record = invoice_crud.get(db, invoice_id="inv-auto", user_id="owner")
        assert record.invoice_number == "INV-9"
        assert record.invoice_data["notes"] == "Thanks"
    finally:
        db.close()
