from datetime import timedelta
import logging

import pytest
from pydantic import ValidationError

from app.core.config import PLACEHOLDER_SECRET, Settings, token_settings, validate_settings
from app.core.logging import ContextFilter, LogContext, get_logger
from utils.time_utils import parse_duration
from utils.validation_utils import is_password_within_limit, normalize_email, sanitize_input


@pytest.mark.parametrize(
    "value, expected",
    [
        ("30s", timedelta(seconds=30)),
        ("15m", timedelta(minutes=15)),
        ("1h", timedelta(hours=1)),
        ("14d", timedelta(days=14)),
        ("2w", timedelta(weeks=2)),
        ("3600", timedelta(seconds=3600)),
        (" 1H ", timedelta(hours=1)),
        (90, timedelta(seconds=90)),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "abc", "1y", "-5m", "0h", 0])
def test_parse_duration_rejects(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def _settings(**overrides):
    return Settings(_env_file=None, **overrides)


def test_token_settings_parses_ttls():
    config = token_settings(_settings(JWT_SECRET="s" * 40, JWT_ACCESS_TOKEN_EXPIRES_IN="15m"))

    assert config.secret == "s" * 40
    assert config.access_ttl == timedelta(minutes=15)
    assert config.refresh_ttl == timedelta(days=14)
    assert config.reset_ttl < config.verify_ttl


def test_token_config_is_immutable():
    config = token_settings(_settings())

    with pytest.raises(AttributeError):
        config.secret = "other"


def test_invalid_ttl_is_rejected():
    with pytest.raises(ValidationError):
        _settings(JWT_REFRESH_TOKEN_EXPIRES_IN="fortnight")


def test_placeholder_secret_rejected_in_production():
    with pytest.raises(ValidationError):
        _settings(ENVIRONMENT="production", JWT_SECRET=PLACEHOLDER_SECRET)


def test_validate_settings_admin_pair():
    with pytest.raises(ValueError, match="ADMIN_EMAIL"):
        validate_settings(_settings(ADMIN_EMAIL="admin@medmail.com"))

    assert validate_settings(_settings(ADMIN_EMAIL="admin@medmail.com", ADMIN_PASSWORD="x" * 12))


def test_validate_settings_rejects_admin_password_over_bcrypt_limit():
    with pytest.raises(ValueError, match="72 bytes"):
        validate_settings(_settings(ADMIN_EMAIL="admin@medmail.com", ADMIN_PASSWORD="x" * 73))


def test_validate_settings_production_requires_smtp():
    config = _settings(ENVIRONMENT="production", JWT_SECRET="p" * 40)

    with pytest.raises(ValueError, match="SMTP_HOST"):
        validate_settings(config)


def test_validation_helpers():
    assert normalize_email("  Jane@MedMail.COM ") == "jane@medmail.com"
    assert sanitize_input("   ") is None
    assert sanitize_input("  Pixel 8 ") == "Pixel 8"
    assert is_password_within_limit("x" * 72)
    assert not is_password_within_limit("é" * 37)


def test_log_context_attaches_fields_without_clobbering_extra():
    records = []

    class Capture(logging.Handler):
        def emit(self, record):
            records.append(record)

    handler = Capture()
    handler.addFilter(ContextFilter())
    logger = get_logger("tests.context")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        with LogContext(user_id="u1", device="Pixel 8"):
            logger.info("inside", extra={"user_id": "u2"})
        logger.info("outside")
    finally:
        logger.removeHandler(handler)

    assert records[0].user_id == "u2"
    assert records[0].device == "Pixel 8"
    assert not hasattr(records[1], "device")
