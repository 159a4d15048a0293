import logging

import pytest

from clubrank.utils import sentry


@pytest.fixture
def sentry_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(sentry.sentry_sdk, "init", lambda **kwargs: calls.append(kwargs))
    for key in (
        "SENTRY_DSN",
        "SENTRY_ENVIRONMENT",
        "SENTRY_TRACES_SAMPLE_RATE",
        "SENTRY_PROFILES_SAMPLE_RATE",
    ):
        monkeypatch.delenv(key, raising=False)
    return calls


def test_skips_without_dsn(sentry_calls, caplog):
    with caplog.at_level(logging.INFO):
        assert sentry.init_sentry() is False
    assert sentry_calls == []
    assert "skipping Sentry initialization" in caplog.text


def test_initializes_with_dsn(sentry_calls, monkeypatch):
    monkeypatch.setenv("SENTRY_DSN", "https://key@example.invalid/1")
    monkeypatch.setenv("SENTRY_ENVIRONMENT", " staging ")
    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "0.25")

    assert sentry.init_sentry() is True
    assert len(sentry_calls) == 1
    kwargs = sentry_calls[0]
    assert kwargs["dsn"] == "https://key@example.invalid/1"
    assert kwargs["environment"] == "staging"
    assert kwargs["traces_sample_rate"] == 0.25
    assert kwargs["profiles_sample_rate"] == 0.0


@pytest.mark.parametrize("raw", ["fast", "-1"])
def test_bad_sample_rates_fall_back(raw, monkeypatch, caplog):
    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", raw)
    with caplog.at_level(logging.WARNING):
        assert sentry._parse_sample_rate("SENTRY_TRACES_SAMPLE_RATE", default=0.1) == 0.1
    assert "SENTRY_TRACES_SAMPLE_RATE" in caplog.text
