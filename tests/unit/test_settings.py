import pytest

from bedrockping.config.settings import get_settings


def test_defaults(monkeypatch):
    for name in ("BEDROCK_HOST", "BEDROCK_PORT", "BEDROCK_TIMEOUT_S", "BEDROCK_RESEND_S", "BEDROCK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    s = get_settings()
    assert (s.host, s.port, s.timeout_s, s.resend_s, s.log_level) == ("127.0.0.1", 19132, 5.0, 0.15, "WARNING")


def test_from_environment(monkeypatch):
    monkeypatch.setenv("BEDROCK_HOST", "mc.example.net")
    monkeypatch.setenv("BEDROCK_PORT", "19133")
    monkeypatch.setenv("BEDROCK_TIMEOUT_S", "1.5")
    monkeypatch.setenv("BEDROCK_RESEND_S", "0")
    monkeypatch.setenv("BEDROCK_LOG_LEVEL", "debug")
    s = get_settings()
    assert (s.host, s.port, s.timeout_s, s.resend_s, s.log_level) == ("mc.example.net", 19133, 1.5, None, "DEBUG")


def test_unknown_log_level(monkeypatch):
    monkeypatch.setenv("BEDROCK_LOG_LEVEL", "loud")
    with pytest.raises(ValueError, match="unknown log level"):
        get_settings()
