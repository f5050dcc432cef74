"""Test AppContext init/teardown, wiring and the FastAPI lifespan."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from starlette.testclient import TestClient
from telegram.error import InvalidToken

from chempionat_bot.api.app import TRACE_HEADER, create_app
from chempionat_bot.core.enums import Dispatch, Profile
from chempionat_bot.domain.events import UserStarted
from chempionat_bot.main import build_context, create_application


@pytest.fixture
def prod_context(prod_settings, telegram_bot):
    """Context for a real profile with the Telegram application faked."""
    return build_context(prod_settings, bot=telegram_bot)


class TestBuildContext:
    def test_wires_listener_on_bus(self, test_settings):
        context = build_context(test_settings)
        subs = context.event_bus._handlers[UserStarted]
        assert len(subs) == 1
        assert subs[0].dispatch is Dispatch.ASYNC

    def test_bot_is_not_built_under_test_profile(self, test_settings):
        context = build_context(test_settings)
        assert context.bot._application is None

    def test_pool_size_from_settings(self, test_settings):
        test_settings.notifications.workers = 5
        context = build_context(test_settings)
        assert context.event_bus._worker_count == 5


class TestContextLifecycle:
    async def test_start_and_stop_under_test_profile(self, test_settings, alice):
        context = build_context(test_settings)

        await context.start()
        assert context.started
        assert context.event_bus.running
        await context.publish(UserStarted(user=alice))
        await context.stop()

        assert not context.started
        assert not context.event_bus.running
        assert context.event_bus.messages_processed == 1
        assert context.bot._application is None

    async def test_start_registers_bot(self, prod_context, fake_application):
        await prod_context.start()
        fake_application.initialize.assert_awaited_once()
        fake_application.start.assert_awaited_once()

        await prod_context.stop()
        fake_application.shutdown.assert_awaited_once()

    async def test_start_twice_is_idempotent(self, prod_context, fake_application):
        await prod_context.start()
        await prod_context.start()
        fake_application.initialize.assert_awaited_once()
        await prod_context.stop()

    async def test_registration_failure_aborts_start(
        self, prod_context, fake_application,
    ):
        error = InvalidToken("Unauthorized")
        fake_application.initialize.side_effect = error

        with pytest.raises(InvalidToken) as excinfo:
            await prod_context.start()

        assert excinfo.value is error
        assert not prod_context.started
        assert not prod_context.event_bus.running


class TestLifespan:
    async def test_lifespan_propagates_registration_failure(
        self, prod_context, fake_application,
    ):
        fake_application.initialize.side_effect = InvalidToken("Unauthorized")
        app = create_app(prod_context)

        with pytest.raises(InvalidToken):
            async with app.router.lifespan_context(app):
                pass

    async def test_lifespan_starts_and_stops_context(self, test_settings):
        context = build_context(test_settings)
        app = create_app(context)

        async with app.router.lifespan_context(app):
            assert context.started
        assert not context.started

    def test_health_and_trace_header(self, test_settings):
        app = create_app(build_context(test_settings))
        with TestClient(app) as client:
            resp = client.get("/health", headers={TRACE_HEADER: "trace-123"})
            assert resp.status_code == 200
            assert resp.json() == {"status": "ok"}
            assert resp.headers[TRACE_HEADER] == "trace-123"

            generated = client.get("/health").headers[TRACE_HEADER]
            assert generated and generated != "trace-123"

    def test_trace_header_on_internal_error(self, test_settings):
        app = create_app(build_context(test_settings))

        @app.get("/boom")
        async def boom() -> None:
            raise RuntimeError("boom")

        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/boom", headers={TRACE_HEADER: "trace-500"})

        assert resp.status_code == 500
        assert resp.headers[TRACE_HEADER] == "trace-500"

    def test_registration_hook_never_called_under_test_profile(
        self, test_settings,
    ):
        context = build_context(test_settings)
        context.registrar.register_bot = AsyncMock()
        with TestClient(create_app(context)):
            pass
        context.registrar.register_bot.assert_not_awaited()


class TestCreateApplication:
    def test_test_profile_without_token(self, monkeypatch):
        monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
        monkeypatch.setattr("chempionat_bot.main.setup_logging", lambda **kw: None)

        app = create_application(overrides={"profile": "test"})

        assert app.state.context.settings.profile == Profile.TEST
