"""Unit tests for structured logging."""

import logging
from unittest.mock import MagicMock, patch
from uuid import uuid4

import structlog

from taskhive.core.context import create_context, request_context
from taskhive.core.logging import (
    LogContext,
    add_environment_info,
    add_request_context,
    drop_color_message_key,
    get_logger,
    log_request_end,
    setup_logging,
)
from taskhive.core.types import Role


class TestAddRequestContext:
    """Tests for add_request_context processor."""

    def test_adds_identity_when_available(self):
        ctx = create_context(user_id=uuid4(), tenant_id=uuid4(), role=Role.TENANT_ADMIN)

        with request_context(ctx):
            result = add_request_context(None, "info", {})

        assert result["request_id"] == str(ctx.request_id)
        assert result["tenant_id"] == str(ctx.tenant_id)
        assert result["user_id"] == str(ctx.user_id)
        assert result["role"] == "tenant_admin"

    def test_explicit_keys_win(self):
        ctx = create_context(user_id=uuid4(), tenant_id=uuid4(), role=Role.USER)

        with request_context(ctx):
            result = add_request_context(None, "info", {"tenant_id": "explicit"})

        assert result["tenant_id"] == "explicit"

    def test_no_context_available(self):
        result = add_request_context(None, "info", {"message": "test"})

        assert result == {"message": "test"}


class TestProcessors:
    def test_adds_environment(self):
        mock_settings = MagicMock()
        mock_settings.ENVIRONMENT = "production"

        with patch("taskhive.core.logging.get_settings", return_value=mock_settings):
            result = add_environment_info(None, "info", {})

        assert result["environment"] == "production"

    def test_drops_color_message(self):
        result = drop_color_message_key(None, "info", {"message": "test", "color_message": "colored"})

        assert result == {"message": "test"}


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_custom_level(self):
        setup_logging(log_level="DEBUG", json_format=False)

        assert logging.getLogger().level == logging.DEBUG

    def test_json_format(self, capsys):
        setup_logging(log_level="INFO", json_format=True)

        get_logger("taskhive.test").info("json_event", answer=42)

        out = capsys.readouterr().out
        assert '"event": "json_event"' in out
        assert '"answer": 42' in out

    def test_sqlalchemy_quiet(self):
        setup_logging(log_level="DEBUG")

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestLogContext:
    def test_binds_and_unbinds(self):
        structlog.contextvars.clear_contextvars()

        with LogContext(operation="register_tenant", subdomain="acme"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["operation"] == "register_tenant"

        assert "operation" not in structlog.contextvars.get_contextvars()


class TestLogRequestEnd:
    def test_fields(self):
        logger = MagicMock()

        log_request_end(logger, "GET", "/api/projects", 200, 12.3456, request_id="abc")

        logger.info.assert_called_once_with(
            "request_completed",
            http_method="GET",
            http_path="/api/projects",
            http_status=200,
            duration_ms=12.35,
            request_id="abc",
        )
