"""Unit tests for channel classification."""

from __future__ import annotations

import pytest

from archivebot.audit import classify
from tests.unit.audit_test_helpers import DAY, NOW, channel, make_config, message

_FOURTEEN_DAYS = 1_209_600


class TestMembershipAdjustment:
    """Tests for the effective member count."""

    @pytest.mark.parametrize(
        ("is_member", "expected"),
        [pytest.param(True, 4, id="member"), pytest.param(False, 5, id="not-member")],
    )
    def test_bot_is_not_counted(self, is_member: bool, expected: int) -> None:  # noqa: FBT001
        """The bot does not count itself as a community member."""
        verdict = classify(
            channel("C1", members=5), is_member, None, make_config(), now=NOW
        )
        assert verdict.effective_member_count == expected

    @pytest.mark.parametrize(
        ("members", "is_small"),
        [(3, True), (4, False), (0, True)],
    )
    def test_small_threshold_is_inclusive(
        self,
        members: int,
        is_small: bool,  # noqa: FBT001
    ) -> None:
        """Channels at the threshold are small."""
        verdict = classify(
            channel("C1", members=members),
            False,  # noqa: FBT003
            None,
            make_config(small_channel_threshold=3),
            now=NOW,
        )
        assert verdict.is_small is is_small


class TestStaleness:
    """Tests for the staleness rule."""

    @pytest.mark.parametrize(
        ("age", "is_stale"),
        [
            pytest.param(_FOURTEEN_DAYS + 1, True, id="one-second-past"),
            pytest.param(_FOURTEEN_DAYS, False, id="exactly-threshold"),
            pytest.param(_FOURTEEN_DAYS - 1, False, id="one-second-before"),
        ],
    )
    def test_boundary_is_strict(self, age: int, is_stale: bool) -> None:  # noqa: FBT001
        """Staleness requires an age strictly greater than the threshold."""
        verdict = classify(
            channel("C1", members=20),
            True,  # noqa: FBT003
            message(NOW - age),
            make_config(stale_after_seconds=_FOURTEEN_DAYS),
            now=NOW,
        )
        assert verdict.is_stale is is_stale

    def test_no_data_is_not_stale(self) -> None:
        """A channel with no message is not automatically stale."""
        verdict = classify(
            channel("C1", members=20),
            True,  # noqa: FBT003
            None,
            make_config(),
            now=NOW,
        )
        assert verdict.last_relevant_timestamp == 0
        assert not verdict.has_activity
        assert not verdict.is_stale
        assert not verdict.is_reportable

    def test_irrelevant_fallback_keeps_timestamp(self) -> None:
        """A fallback message still provides the last activity time."""
        verdict = classify(
            channel("C1", members=20),
            True,  # noqa: FBT003
            message(NOW - 30 * DAY, subtype="channel_join"),
            make_config(),
            now=NOW,
        )
        assert verdict.last_relevant_timestamp == NOW - 30 * DAY
        assert verdict.last_message_relevant is False
        assert verdict.is_stale


class TestReportable:
    """Tests for the reportable rule."""

    def test_ignored_channels_are_never_reportable(self) -> None:
        """Ignore prefixes override staleness and smallness."""
        verdict = classify(
            channel("C1", name="-secret", members=1),
            True,  # noqa: FBT003
            message(NOW - 90 * DAY),
            make_config(ignore_prefixes=("-", "ext-")),
            now=NOW,
        )
        assert verdict.is_ignored
        assert verdict.is_stale
        assert verdict.is_small
        assert not verdict.is_reportable

    def test_active_large_channel_is_not_reportable(self) -> None:
        """Busy, well-populated channels stay out of the report."""
        verdict = classify(
            channel("C1", members=50),
            True,  # noqa: FBT003
            message(NOW - DAY),
            make_config(),
            now=NOW,
        )
        assert not verdict.is_reportable

    def test_private_flag_is_carried(self) -> None:
        """The private facet reaches the report builder."""
        verdict = classify(
            channel("G1", members=2, is_private=True),
            False,  # noqa: FBT003
            None,
            make_config(),
            now=NOW,
        )
        assert verdict.is_private
        assert verdict.is_reportable
