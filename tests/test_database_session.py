from __future__ import annotations

import pytest

import app.core.database as database_module
from app.core.database import get_db_session, run_after_commit


class RecordingSession:
    def __init__(self, calls: list[str]) -> None:
        self.calls = calls
        self.info: dict = {}

    async def __aenter__(self) -> RecordingSession:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.calls.append("close")

    async def commit(self) -> None:
        self.calls.append("commit")

    async def rollback(self) -> None:
        self.calls.append("rollback")


@pytest.fixture
def calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    recorded: list[str] = []
    monkeypatch.setattr(database_module, "SessionLocal", lambda: RecordingSession(recorded))
    return recorded


@pytest.mark.asyncio
async def test_after_commit_callbacks_run_once_committed(calls: list[str]) -> None:
    dependency = get_db_session()
    session = await dependency.__anext__()

    async def _callback() -> None:
        calls.append("callback")

    run_after_commit(session, _callback)
    with pytest.raises(StopAsyncIteration):
        await dependency.__anext__()

    assert calls == ["commit", "callback", "close"]


@pytest.mark.asyncio
async def test_after_commit_callbacks_dropped_on_rollback(calls: list[str]) -> None:
    dependency = get_db_session()
    session = await dependency.__anext__()

    async def _callback() -> None:
        calls.append("callback")

    run_after_commit(session, _callback)
    with pytest.raises(RuntimeError):
        await dependency.athrow(RuntimeError("request failed"))

    assert calls == ["rollback", "close"]
    assert session.info == {}
