from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from helpers import FakeTornApi


@pytest.fixture
def make_client() -> Callable[[FakeTornApi], httpx.AsyncClient]:
    def _make(api: FakeTornApi) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(api.handler))

    return _make
