"""Tests for the in-memory session store."""

import pytest

from fitsmart.exceptions import SessionNotFoundError
from fitsmart.services.flow_controller import CapturingInput, FlowController, SelectingPersona
from fitsmart.services.session_store import SessionStore


@pytest.fixture
def store(mock_gateway, settings):
    return SessionStore(factory=lambda: FlowController(mock_gateway, settings=settings), max_size=3)


class TestSessionStore:
    """Session lifecycle."""

    def test_create_and_get(self, store):
        session_id, controller = store.create()

        assert store.get(session_id) is controller
        assert isinstance(controller.stage, CapturingInput)
        assert store.created_at(session_id) is not None
        assert len(store) == 1

    def test_sessions_are_independent(self, store):
        first_id, first = store.create()
        second_id, second = store.create()
        assert first_id != second_id
        assert first is not second

    def test_unknown_session(self, store):
        with pytest.raises(SessionNotFoundError) as exc_info:
            store.get("missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_resets_controller(self, store, text_input):
        session_id, controller = store.create()
        await controller.capture_input(text_input)
        assert isinstance(controller.stage, SelectingPersona)

        store.delete(session_id)

        assert isinstance(controller.stage, CapturingInput)
        with pytest.raises(SessionNotFoundError):
            store.get(session_id)

    def test_delete_unknown(self, store):
        with pytest.raises(SessionNotFoundError):
            store.delete("missing")

    def test_oldest_session_is_evicted(self, store):
        ids = [store.create()[0] for _ in range(3)]

        newest_id, _ = store.create()

        assert len(store) == 3
        with pytest.raises(SessionNotFoundError):
            store.get(ids[0])
        store.get(ids[1])
        store.get(newest_id)

    def test_clear(self, store):
        store.create()
        store.create()
        store.clear()
        assert len(store) == 0
