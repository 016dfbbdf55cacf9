"""Unit tests for AuditConfig."""

from __future__ import annotations

import pytest

from archivebot.audit import AuditConfig
from archivebot.audit.config import DEFAULT_MESSAGE_HEADERS


class TestAuditConfigDefaults:
    """Tests for default values and validation."""

    def test_defaults(self) -> None:
        """Defaults match the documented thresholds."""
        config = AuditConfig(notification_channel_id="C0123")
        assert config.stale_after_seconds == 1_209_600
        assert config.small_channel_threshold == 3
        assert config.history_lookback == 10
        assert config.page_size == 1000
        assert config.ignore_prefixes == ()
        assert config.message_headers == DEFAULT_MESSAGE_HEADERS
        assert config.run_timeout_s is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            pytest.param({"notification_channel_id": " "}, id="blank-channel"),
            pytest.param(
                {"notification_channel_id": "C1", "message_headers": ()},
                id="no-headers",
            ),
            pytest.param(
                {"notification_channel_id": "C1", "history_lookback": 0},
                id="zero-lookback",
            ),
            pytest.param(
                {"notification_channel_id": "C1", "max_concurrency": 0},
                id="zero-concurrency",
            ),
            pytest.param(
                {"notification_channel_id": "C1", "page_size": 1001},
                id="page-too-large",
            ),
            pytest.param(
                {
                    "notification_channel_id": "C1",
                    "secondary_channel_id": "C2",
                    "secondary_message_headers": (),
                },
                id="secondary-without-headers",
            ),
        ],
    )
    def test_rejects_invalid_values(self, kwargs: dict[str, object]) -> None:
        """Values the audit cannot run with are rejected."""
        with pytest.raises(ValueError):  # noqa: PT011
            AuditConfig(**kwargs)  # type: ignore[arg-type]


class TestAuditConfigFromEnv:
    """Tests for AuditConfig.from_env."""

    def test_requires_notification_channel(self) -> None:
        """The report destination is mandatory."""
        with pytest.raises(ValueError, match="ARCHIVEBOT_NOTIFICATION_CHANNEL_ID"):
            AuditConfig.from_env()

    def test_reads_all_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Every variable maps to its field."""
        monkeypatch.setenv("ARCHIVEBOT_NOTIFICATION_CHANNEL_ID", "C0123")
        monkeypatch.setenv("ARCHIVEBOT_IGNORE_PREFIXES", "-, ext-,,")
        monkeypatch.setenv("ARCHIVEBOT_STALE_AFTER_DAYS", "30")
        monkeypatch.setenv("ARCHIVEBOT_SMALL_CHANNEL_THRESHOLD", "0")
        monkeypatch.setenv("ARCHIVEBOT_HISTORY_LOOKBACK", "25")
        monkeypatch.setenv("ARCHIVEBOT_MESSAGE_HEADERS", "Tidy up!|Look here")
        monkeypatch.setenv("ARCHIVEBOT_MAX_CONCURRENCY", "4")
        monkeypatch.setenv("ARCHIVEBOT_PAGE_SIZE", "200")
        monkeypatch.setenv("ARCHIVEBOT_RUN_TIMEOUT_S", "90.5")
        monkeypatch.setenv("ARCHIVEBOT_SECONDARY_CHANNEL_ID", "C0456")

        config = AuditConfig.from_env()

        assert config.notification_channel_id == "C0123"
        assert config.ignore_prefixes == ("-", "ext-")
        assert config.stale_after_seconds == 30 * 24 * 60 * 60
        assert config.small_channel_threshold == 0
        assert config.history_lookback == 25
        assert config.message_headers == ("Tidy up!", "Look here")
        assert config.max_concurrency == 4
        assert config.page_size == 200
        assert config.run_timeout_s == pytest.approx(90.5)
        assert config.secondary_channel_id == "C0456"
        assert config.secondary_message_headers, "default pointer headers apply"

    @pytest.mark.parametrize(
        ("name", "value", "fragment"),
        [
            ("ARCHIVEBOT_STALE_AFTER_DAYS", "soon", "must be an integer"),
            ("ARCHIVEBOT_HISTORY_LOOKBACK", "0", "must be at least 1"),
            ("ARCHIVEBOT_SMALL_CHANNEL_THRESHOLD", "-1", "must be at least 0"),
            ("ARCHIVEBOT_RUN_TIMEOUT_S", "-5", "must be positive"),
            ("ARCHIVEBOT_RUN_TIMEOUT_S", "never", "number of seconds"),
        ],
    )
    def test_invalid_numbers_name_the_variable(
        self,
        monkeypatch: pytest.MonkeyPatch,
        name: str,
        value: str,
        fragment: str,
    ) -> None:
        """Validation errors mention the offending variable."""
        monkeypatch.setenv("ARCHIVEBOT_NOTIFICATION_CHANNEL_ID", "C0123")
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError, match=name) as excinfo:
            AuditConfig.from_env()
        assert fragment in str(excinfo.value)
