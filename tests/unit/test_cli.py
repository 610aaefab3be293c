"""Tests for the CLI module."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from pricefeed.cli import cli
from pricefeed.core.config import Interval
from pricefeed.core.exceptions import TransportFailure, UnknownTimezone
from pricefeed.feeds.models import PricePoint


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("PRICEFEED_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def key_file(tmp_path):
    path = tmp_path / "alpha_vantage.key"
    path.write_text("FILEKEY\n")
    return str(path)


@pytest.fixture
def sample_points():
    return [
        PricePoint(
            open=190.12,
            high=191.0,
            low=189.5,
            close=190.8,
            volume=1_000_000,
            timestamp=datetime(2024, 3, 10, 13, 30, tzinfo=timezone.utc),
        ),
    ]


# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------


class TestCliGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "update" in result.output

    def test_update_help(self, runner):
        result = runner.invoke(cli, ["update", "--help"])
        assert result.exit_code == 0
        assert "--api-key-file" in result.output


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


class TestUpdateCommand:
    def test_json_output(self, runner, key_file, sample_points):
        with patch(
            "pricefeed.feeds.AlphaVantageDataFeed.update",
            new=AsyncMock(return_value=sample_points),
        ) as mock_update:
            result = runner.invoke(
                cli, ["update", "ibm", "--api-key-file", key_file, "--format", "json"]
            )

        assert result.exit_code == 0, result.output
        mock_update.assert_awaited_once_with("IBM")
        payload = json.loads(result.stdout)
        assert payload["symbol"] == "IBM"
        assert payload["prices"][0]["open"] == 190.12
        assert payload["prices"][0]["volume"] == 1_000_000

    def test_table_output(self, runner, key_file, sample_points):
        with patch(
            "pricefeed.feeds.AlphaVantageDataFeed.update",
            new=AsyncMock(return_value=sample_points),
        ):
            result = runner.invoke(cli, ["update", "IBM", "-k", key_file])

        assert result.exit_code == 0, result.output
        assert "1 price points for IBM" in result.output

    def test_key_file_passed_to_feed(self, runner, key_file):
        with patch("pricefeed.feeds.AlphaVantageDataFeed") as feed_cls:
            feed_cls.return_value.update = AsyncMock(return_value=[])
            result = runner.invoke(cli, ["update", "IBM", "-k", key_file, "-f", "json"])

        assert result.exit_code == 0, result.output
        args, kwargs = feed_cls.call_args
        assert args[0] == "FILEKEY"

    def test_interval_override(self, runner, key_file):
        with patch("pricefeed.feeds.AlphaVantageDataFeed") as feed_cls:
            feed_cls.return_value.update = AsyncMock(return_value=[])
            result = runner.invoke(
                cli, ["update", "IBM", "-k", key_file, "--interval", "15min", "-f", "json"]
            )

        assert result.exit_code == 0, result.output
        _, kwargs = feed_cls.call_args
        assert kwargs["config"].interval == Interval.FIFTEEN_MINUTES

    def test_key_from_environment(self, runner, monkeypatch):
        monkeypatch.setenv("PRICEFEED_ALPHA_VANTAGE__API_KEY", "ENVKEY")
        with patch("pricefeed.feeds.AlphaVantageDataFeed") as feed_cls:
            feed_cls.return_value.update = AsyncMock(return_value=[])
            result = runner.invoke(cli, ["update", "IBM", "-f", "json"])

        assert result.exit_code == 0, result.output
        assert feed_cls.call_args.args[0] == "ENVKEY"

    def test_missing_key_exits_1(self, runner):
        result = runner.invoke(cli, ["update", "IBM"])
        assert result.exit_code == 1
        assert "No Alpha Vantage API key" in result.output

    def test_feed_error_exits_1(self, runner, key_file):
        with patch(
            "pricefeed.feeds.AlphaVantageDataFeed.update",
            new=AsyncMock(side_effect=TransportFailure("HTTP 503 from Alpha Vantage for IBM")),
        ):
            result = runner.invoke(cli, ["update", "IBM", "-k", key_file])

        assert result.exit_code == 1
        assert "HTTP 503" in result.output

    def test_decode_error_exits_1(self, runner, key_file):
        with patch(
            "pricefeed.feeds.AlphaVantageDataFeed.update",
            new=AsyncMock(side_effect=UnknownTimezone("Unknown time zone: 'Not/AZone'")),
        ):
            result = runner.invoke(cli, ["update", "IBM", "-k", key_file])

        assert result.exit_code == 1
        assert "Not/AZone" in result.output

    def test_blank_symbol_rejected(self, runner, key_file):
        result = runner.invoke(cli, ["update", "  ", "-k", key_file])
        assert result.exit_code == 2

    def test_unknown_interval_rejected(self, runner, key_file):
        result = runner.invoke(cli, ["update", "IBM", "-k", key_file, "--interval", "2min"])
        assert result.exit_code == 2
