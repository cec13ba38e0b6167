import smtplib

import pytest

from app.core.config import Settings
from app.core.exceptions import ExternalServiceError
from app.services.email_service import EmailService
from app.services.email_templates import render_template
from utils import constants

from conftest import run

PARAMS = {"brand_name": "Zero To MRCS", "frontend_url": "https://app.mrcs.test/"}


def _service(**overrides):
    return EmailService(Settings(_env_file=None, **overrides))


def test_verify_template_links_to_frontend_with_token():
    rendered = render_template(constants.TEMPLATE_VERIFY_EMAIL, {**PARAMS, "email": "jane@medmail.com", "token": "abc"})

    assert rendered.subject == "Verify your email for Zero To MRCS"
    assert "https://app.mrcs.test/verify-email?email=jane%40medmail.com&amp;token=abc" in rendered.html
    assert "https://app.mrcs.test/verify-email?email=jane%40medmail.com&token=abc" in rendered.text


def test_reset_template():
    rendered = render_template(constants.TEMPLATE_RESET_PASSWORD, {**PARAMS, "email": "jane@medmail.com", "token": "t"})

    assert "reset-password?" in rendered.text
    assert "Reset Password" in rendered.html


def test_welcome_template_escapes_name():
    rendered = render_template(constants.TEMPLATE_WELCOME, {**PARAMS, "first_name": "<Jane>"})

    assert "Welcome, &lt;Jane&gt;" in rendered.html
    assert "<Jane>" not in rendered.html


def test_unknown_template():
    with pytest.raises(ValueError):
        render_template("marketing", PARAMS)


def test_unconfigured_service_drops_mail():
    service = _service(SMTP_HOST=None)

    assert not service.is_configured()
    run(service.send_template(constants.TEMPLATE_WELCOME, to="jane@medmail.com", first_name="Jane"))
    assert run(service.test_connection()) is False


def test_smtp_failure_becomes_external_service_error(monkeypatch):
    service = _service(SMTP_HOST="smtp.mrcs.test", SMTP_USER="mailer", SMTP_PASS="secret")

    def refuse(msg):
        raise smtplib.SMTPConnectError(421, "try later")

    monkeypatch.setattr(service, "_deliver", refuse)

    with pytest.raises(ExternalServiceError):
        run(service.send_template(constants.TEMPLATE_VERIFY_EMAIL, to="jane@medmail.com", email="jane@medmail.com", token="t"))


def test_delivery_builds_multipart_message(monkeypatch):
    service = _service(SMTP_HOST="smtp.mrcs.test", EMAIL_FROM="no-reply@mrcs.test")
    delivered = []
    monkeypatch.setattr(service, "_deliver", delivered.append)

    run(service.send_template(constants.TEMPLATE_WELCOME, to="jane@medmail.com", subject="Hi", first_name="Jane"))

    msg = delivered[0]
    assert msg["To"] == "jane@medmail.com"
    assert msg["From"] == "no-reply@mrcs.test"
    assert msg["Subject"] == "Hi"
    assert msg.is_multipart()
