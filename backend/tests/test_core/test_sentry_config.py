"""Tests for Sentry configuration."""

import os
from typing import Any
from unittest.mock import patch

import pytest

from core.sentry_config import (
    _before_send,
    _before_send_transaction,
    _traces_sampler,
    init_sentry,
)


class TestBeforeSend:
    """PII and credential scrubbing."""

    def test_keeps_only_user_id(self) -> None:
        event: Any = {
            "user": {"id": 42, "email": "levin@example.com", "username": "levin"}
        }

        result = _before_send(event, {})

        assert result["user"] == {"id": 42}

    def test_filters_credentials(self) -> None:
        event: Any = {
            "request": {
                "cookies": {"access_token": "secret"},
                "headers": {
                    "Authorization": "Bearer secret",
                    "Cookie": "access_token=secret",
                    "Referer": "http://localhost:3000/",
                },
            }
        }

        result = _before_send(event, {})

        assert "cookies" not in result["request"]
        assert result["request"]["headers"]["Authorization"] == "[Filtered]"
        assert result["request"]["headers"]["Cookie"] == "[Filtered]"
        assert result["request"]["headers"]["Referer"] == "http://localhost:3000/"

    def test_event_without_user_or_request(self) -> None:
        event: Any = {"message": "hello"}
        assert _before_send(event, {}) == {"message": "hello"}


class TestTransactionsAndSampling:
    """Health checks are never traced; admin and auth are sampled more."""

    @pytest.mark.parametrize("name", ["/health", "GET /health", "/api/health"])
    def test_health_transactions_dropped(self, name: str) -> None:
        event: Any = {"transaction": name}
        assert _before_send_transaction(event, {}) is None

    def test_other_transactions_kept(self) -> None:
        event: Any = {"transaction": "/api/questions"}
        assert _before_send_transaction(event, {}) is event

    @pytest.mark.parametrize(
        "path,rate",
        [
            ("/health", 0.0),
            ("/api/admin/reports", 0.5),
            ("/api/auth/register", 0.5),
            ("/api/questions", 0.2),
        ],
    )
    def test_sample_rates(self, path: str, rate: float) -> None:
        assert _traces_sampler({"asgi_scope": {"path": path}}) == rate

    def test_parent_decision_respected(self) -> None:
        context = {"parent_sampled": True, "asgi_scope": {"path": "/health"}}
        assert _traces_sampler(context) == 1.0


class TestInitSentry:
    """Sentry only starts when a DSN is configured."""

    def test_no_dsn_no_init(self) -> None:
        with patch("sentry_sdk.init") as mock_init:
            with patch.dict(os.environ, {}, clear=True):
                init_sentry()
        mock_init.assert_not_called()

    def test_dsn_initializes_with_environment(self) -> None:
        env = {
            "SENTRY_DSN": "https://key@o0.ingest.sentry.io/0",
            "ENVIRONMENT": "production",
        }
        with patch("sentry_sdk.init") as mock_init:
            with patch.dict(os.environ, env):
                init_sentry()

        kwargs = mock_init.call_args.kwargs
        assert kwargs["dsn"] == env["SENTRY_DSN"]
        assert kwargs["environment"] == "production"
        assert kwargs["send_default_pii"] is False
