from datetime import timedelta

from paylink.checkout.core.session import SessionManager
from paylink.checkout.services.orchestrator import CheckoutOrchestrator
from paylink.checkout.services.tokenizers import SimulatedTokenizer


def _orchestrator(slug="abc"):
    return CheckoutOrchestrator(slug, client=None, tokenizer=SimulatedTokenizer())


def test_create_and_get_session():
    manager = SessionManager()
    session = manager.create_session(_orchestrator())

    assert session.slug == "abc"
    assert manager.get_session(session.session_id) is session
    assert manager.get_session("missing") is None


def test_delete_session():
    manager = SessionManager()
    session = manager.create_session(_orchestrator())

    assert manager.delete_session(session.session_id) is True
    assert manager.delete_session(session.session_id) is False
    assert manager.get_session(session.session_id) is None


def test_cleanup_removes_only_stale_sessions():
    manager = SessionManager()
    stale = manager.create_session(_orchestrator("old"))
    fresh = manager.create_session(_orchestrator("new"))
    stale.updated_at -= timedelta(hours=25)

    assert manager.cleanup_old_sessions(max_age_hours=24) == 1
    assert manager.get_session(stale.session_id) is None
    assert manager.get_session(fresh.session_id) is fresh


def test_touch_keeps_session_alive():
    manager = SessionManager()
    session = manager.create_session(_orchestrator())
    session.updated_at -= timedelta(hours=25)
    session.touch()

    assert manager.cleanup_old_sessions() == 0
