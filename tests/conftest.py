"""Global pytest configuration."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncGenerator

import aiohttp
import pytest

from pslcache.constants import DEFAULT_LIST_URL


@pytest.fixture(scope="session")
def event_loop() -> AsyncGenerator[asyncio.AbstractEventLoop, None]:
    """Provide a shared event loop for async tests and fixtures."""

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        yield loop
    finally:
        loop.close()


def _get_loop(request: pytest.FixtureRequest) -> asyncio.AbstractEventLoop:
    try:
        loop = request.getfixturevalue("event_loop")
    except pytest.FixtureLookupError:
        loop = asyncio.new_event_loop()
    if loop.is_closed():
        loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    return loop


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):  # type: ignore[override]
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        testargs = {
            name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
        }
        loop = testargs.get("event_loop") or asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        loop.run_until_complete(pyfuncitem.obj(**testargs))
        return True
    return None


@pytest.hookimpl(tryfirst=True)
def pytest_fixture_setup(fixturedef, request):  # type: ignore[override]
    func = fixturedef.func
    if inspect.iscoroutinefunction(func):
        loop = _get_loop(request)
        kwargs = {arg: request.getfixturevalue(arg) for arg in fixturedef.argnames}
        return loop.run_until_complete(func(**kwargs))

    if inspect.isasyncgenfunction(func):
        loop = _get_loop(request)
        kwargs = {arg: request.getfixturevalue(arg) for arg in fixturedef.argnames}
        agen = func(**kwargs)
        value = loop.run_until_complete(agen.__anext__())

        def finalize() -> None:
            try:
                loop.run_until_complete(agen.__anext__())
            except StopAsyncIteration:
                pass

        request.addfinalizer(finalize)
        return value

    return None


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as requiring asyncio support")


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep the default snapshot path and PSL_* settings away from the real environment."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("USERPROFILE", raising=False)
    for name in ("PSL_TTS", "PSL_TTL", "PSL_CACHE_PATH", "PSL_URL", "PSL_FETCH_TIMEOUT", "PSL_CONFIG_FILE"):
        monkeypatch.delenv(name, raising=False)
    return home


class _FakeContent:
    def __init__(self, chunks: list[bytes], error: Exception | None = None):
        self._chunks = chunks
        self._error = error

    async def iter_chunked(self, n):
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


class _FakeResponse:
    def __init__(self, status: int, content: _FakeContent):
        self.status = status
        self.content = content

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeSession:
    def __init__(self, server: "FakeListServer"):
        self._server = server

    def get(self, url, **kwargs):
        return self._server.respond(url)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeListServer:
    """Stands in for the remote list; tests change ``body``/``status``/errors between calls."""

    def __init__(self):
        self.body: str | bytes = "com\nuk\nco.uk\n"
        self.status = 200
        self.chunk_size = 7
        self.connect_error: Exception | None = None
        self.stream_error: Exception | None = None
        self.calls: list[str] = []
        self.on_respond = None

    def respond(self, url: str) -> _FakeResponse:
        self.calls.append(url)
        if self.on_respond is not None:
            self.on_respond()
        if self.connect_error is not None:
            raise self.connect_error
        raw = self.body.encode("utf-8") if isinstance(self.body, str) else self.body
        chunks = [raw[i : i + self.chunk_size] for i in range(0, len(raw), self.chunk_size)]
        return _FakeResponse(self.status, _FakeContent(chunks, self.stream_error))

    def fail_stream(self) -> None:
        self.stream_error = aiohttp.ClientPayloadError("connection reset mid-body")


@pytest.fixture
def psl_server(monkeypatch) -> FakeListServer:
    server = FakeListServer()

    def fake_client_session(*args, **kwargs):
        return _FakeSession(server)

    monkeypatch.setattr(aiohttp, "ClientSession", fake_client_session)
    return server


@pytest.fixture
def list_url() -> str:
    return DEFAULT_LIST_URL
