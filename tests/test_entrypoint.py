"""
tests/test_entrypoint.py — Entry Point Helper Tests
====================================================
"""

from __future__ import annotations

import logging

import pytest

from snitch.bot.__main__ import parse_log_level


class TestParseLogLevel:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("DEBUG", logging.DEBUG),
            ("warning", logging.WARNING),
            (" error ", logging.ERROR),
            (None, logging.INFO),
            ("", logging.INFO),
        ],
    )
    def test_known_levels(self, value, expected):
        assert parse_log_level(value) == expected

    @pytest.mark.parametrize("value", ["verbose", "INF0", "10"])
    def test_unknown_levels_return_none(self, value):
        assert parse_log_level(value) is None
