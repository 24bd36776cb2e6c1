import json
import logging

from interest_connect.obs import logging as obs_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("interest_connect.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_and_redacts_sensitive_fields():
    formatter = obs_logging.JSONLogFormatter()
    payload = json.loads(
        formatter.format(_record(user_id="u1", email="ada@example.com", new_password="secret", tags=list(range(20))))
    )

    assert payload["msg"] == "hello world"
    assert payload["level"] == "info"
    assert payload["logger"] == "interest_connect.test"
    assert payload["user_id"] == "u1"
    assert payload["email"] == "[redacted]"
    assert payload["new_password"] == "[redacted]"
    assert len(payload["tags"]) == 11


def test_formatter_includes_bound_request_context():
    formatter = obs_logging.JSONLogFormatter()
    tokens = obs_logging.bind_context(request_id="req-1", route="/api/users/profile")
    try:
        payload = json.loads(formatter.format(_record()))
        assert obs_logging.current_request_id() == "req-1"
    finally:
        obs_logging.reset_context(tokens)

    assert payload["request_id"] == "req-1"
    assert payload["route"] == "/api/users/profile"
    assert obs_logging.current_request_id() is None


def test_sampling_filter_keeps_warnings(monkeypatch):
    from interest_connect.settings import settings

    monkeypatch.setattr(settings, "obs_log_sampling_rate_info", 0.0)
    sampler = obs_logging.InfoSamplingFilter()
    assert sampler.filter(_record()) is False
    warning = _record()
    warning.levelno = logging.WARNING
    assert sampler.filter(warning) is True


def test_bound_context_nests_and_masks_nested_secrets():
    formatter = obs_logging.JSONLogFormatter()
    outer = obs_logging.bind_context(request_id="req-2", ip="10.0.0.5")
    inner = obs_logging.bind_context(user_id="u7", route=None)
    try:
        payload = json.loads(formatter.format(_record(change={"name": "Ada", "password": "pw", "body": "hi"})))
    finally:
        obs_logging.reset_context(inner)
        obs_logging.reset_context(outer)

    assert payload["request_id"] == "req-2"
    assert payload["ip"] == "10.0.0.5"
    assert payload["user_id"] == "u7"
    assert "route" not in payload
    assert payload["change"] == {"name": "Ada", "password": "[redacted]", "body": "[redacted]"}


def test_formatter_clips_long_text():
    formatter = obs_logging.JSONLogFormatter()
    payload = json.loads(formatter.format(_record(note="x" * 1000)))
    assert payload["note"] == "x" * 256 + "…"
