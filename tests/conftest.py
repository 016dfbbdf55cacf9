"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Hide host Slack and archivebot settings from every test."""
    for name in list(os.environ):
        if name.startswith("ARCHIVEBOT_") or name == "SLACK_BOT_TOKEN":
            monkeypatch.delenv(name, raising=False)
