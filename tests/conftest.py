from collections.abc import Callable
from pathlib import Path

import pytest

from waplug.context import AppContext
from tests.fakes import FakeConnection, make_ctx as build_ctx


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def make_ctx(tmp_path: Path, fake_connection: FakeConnection) -> Callable[..., AppContext]:
    def _factory(**kwargs) -> AppContext:
        kwargs.setdefault("connection", fake_connection)
        return build_ctx(tmp_path, **kwargs)

    return _factory
