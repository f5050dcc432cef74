"""Property tests for the HTTP error boundary.

Uses hypothesis to verify:
- A ValueError message is returned verbatim in a 400 body
- Any other failure yields the generic 500 body, whatever its message
- Every error body has exactly the four documented keys
"""

from fastapi import FastAPI
from hypothesis import given, settings, strategies as st
from starlette.testclient import TestClient

from chempionat_bot.api.errors import INTERNAL_ERROR_MESSAGE, install_exception_handlers

ERROR_KEYS = {"timestamp", "status", "error", "message"}


class _Failure(Exception):
    pass


def _make_client() -> tuple[FastAPI, TestClient]:
    app = FastAPI()
    install_exception_handlers(app)
    app.state.message = ""

    @app.get("/bad-argument")
    async def bad_argument() -> None:
        raise ValueError(app.state.message)

    @app.get("/crash")
    async def crash() -> None:
        raise _Failure(app.state.message)

    return app, TestClient(app, raise_server_exceptions=False)


_app, _client = _make_client()

messages = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)),
    max_size=200,
)


@settings(max_examples=50, deadline=None)
@given(message=messages)
def test_argument_error_message_returned_verbatim(message):
    """400 bodies carry the ValueError message unchanged."""
    _app.state.message = message
    resp = _client.get("/bad-argument")

    assert resp.status_code == 400
    body = resp.json()
    assert set(body) == ERROR_KEYS
    assert body["status"] == 400
    assert body["message"] == message


@settings(max_examples=50, deadline=None)
@given(message=messages)
def test_internal_error_detail_never_leaks(message):
    """500 bodies always carry the generic message."""
    _app.state.message = message
    resp = _client.get("/crash")

    assert resp.status_code == 500
    body = resp.json()
    assert set(body) == ERROR_KEYS
    assert body["error"] == "Internal Server Error"
    assert body["message"] == INTERNAL_ERROR_MESSAGE
