import pytest

from photostudio.core.errors import InvalidTransitionError
from photostudio.session.store import SessionStore

from conftest import FakeClock

def test_get_or_create_reuses_known_ids():
    store = SessionStore(ttl_seconds=60, clock=FakeClock())
    a = store.get_or_create(None)
    assert store.get_or_create(a.id) is a
    assert store.get_or_create("unknown").id != a.id
    assert len(store) == 2

def test_idle_sessions_are_evicted():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    a = store.get_or_create(None)
    clock.advance(61)
    b = store.get_or_create(a.id)
    assert b.id != a.id
    assert store.get(a.id) is None

def test_failed_transition_leaves_session_untouched():
    store = SessionStore(ttl_seconds=60, clock=FakeClock())
    a = store.get_or_create(None)

    def bad(s):
        raise InvalidTransitionError("nope")

    with pytest.raises(InvalidTransitionError):
        store.update(a.id, bad)
    assert store.get(a.id) is a
