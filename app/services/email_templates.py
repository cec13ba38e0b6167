"""
app/services/email_templates.py

Purpose: Transactional email templates

- verify-email, reset-password, welcome
- Shared branded HTML layout with a call-to-action link
"""

from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

from utils.constants import TEMPLATE_RESET_PASSWORD, TEMPLATE_VERIFY_EMAIL, TEMPLATE_WELCOME


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _frontend_link(frontend_url: str, path: str, **query: str) -> str:
    base = frontend_url.rstrip("/")
    if query:
        return f"{base}/{path}?{urlencode(query)}"
    return f"{base}/{path}" if path else base


def render_layout(
    *,
    title: str,
    body_html: str,
    brand_name: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    brand_color: str = "#635bff",
) -> str:
    cta = ""
    if cta_url and cta_label:
        cta = (
            f'<p style="margin-top:24px"><a href="{escape(cta_url)}" '
            f'style="display:inline-block;background:{brand_color};color:#ffffff;'
            f'text-decoration:none;padding:12px 18px;border-radius:10px;font-weight:600">'
            f"{escape(cta_label)}</a></p>"
            f'<p style="color:#64748b;font-size:13px;margin-top:16px">'
            f"If the button does not work, paste this URL into your browser:<br/>"
            f"<span>{escape(cta_url)}</span></p>"
        )

    return f"""<!doctype html>
<html>
  <head>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <meta http-equiv="Content-Type" content="text/html; charset=UTF-8" />
    <title>{escape(title)}</title>
  </head>
  <body style="background-color:#f6f9fc;margin:0;padding:0;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Helvetica,Arial,sans-serif;color:#0f172a">
    <div style="max-width:640px;margin:0 auto;padding:24px">
      <div style="background:#ffffff;border:1px solid #eef2f7;border-radius:12px;overflow:hidden">
        <div style="padding:20px 24px;border-bottom:1px solid #eef2f7;font-weight:700">{escape(brand_name)}</div>
        <div style="padding:24px;line-height:1.6">
          {body_html}
          {cta}
        </div>
      </div>
      <div style="text-align:center;padding:18px 12px;color:#94a3b8;font-size:12px">
        &copy; {datetime.now().year} {escape(brand_name)}. All rights reserved.
      </div>
    </div>
  </body>
</html>"""


def verify_email_template(params: Dict[str, Any]) -> RenderedEmail:
    brand = params["brand_name"]
    url = _frontend_link(
        params["frontend_url"], "verify-email",
        email=str(params.get("email", "")), token=str(params.get("token", "")),
    )
    body = (
        '<h2 style="margin:0 0 8px">Verify your email</h2>'
        f"<p>Thanks for signing up for {escape(brand)}. "
        "Please verify your email address to activate your account.</p>"
    )
    return RenderedEmail(
        subject=f"Verify your email for {brand}",
        html=render_layout(title="Verify your email", body_html=body, brand_name=brand,
                           cta_url=url, cta_label="Verify Email"),
        text=f"Verify your email for {brand}: {url}",
    )


def reset_password_template(params: Dict[str, Any]) -> RenderedEmail:
    brand = params["brand_name"]
    url = _frontend_link(
        params["frontend_url"], "reset-password",
        email=str(params.get("email", "")), token=str(params.get("token", "")),
    )
    body = (
        '<h2 style="margin:0 0 8px">Reset your password</h2>'
        "<p>We received a request to reset your password. "
        "Click below to choose a new password.</p>"
    )
    return RenderedEmail(
        subject=f"Reset your {brand} password",
        html=render_layout(title="Reset your password", body_html=body, brand_name=brand,
                           cta_url=url, cta_label="Reset Password"),
        text=f"Reset your {brand} password: {url}",
    )


def welcome_template(params: Dict[str, Any]) -> RenderedEmail:
    brand = params["brand_name"]
    first_name = str(params.get("first_name") or "").strip()
    greeting = f"Welcome, {first_name}" if first_name else "Welcome"
    url = _frontend_link(params["frontend_url"], "")
    body = (
        f'<h2 style="margin:0 0 8px">{escape(greeting)}</h2>'
        "<p>Your email is verified and your account is all set. "
        "We're excited to have you on board.</p>"
    )
    return RenderedEmail(
        subject=f"Welcome to {brand}",
        html=render_layout(title="Welcome aboard", body_html=body, brand_name=brand,
                           cta_url=url, cta_label="Go to Dashboard"),
        text=f"{greeting}! Your {brand} account is ready: {url}",
    )


TEMPLATES: Dict[str, Callable[[Dict[str, Any]], RenderedEmail]] = {
    TEMPLATE_VERIFY_EMAIL: verify_email_template,
    TEMPLATE_RESET_PASSWORD: reset_password_template,
    TEMPLATE_WELCOME: welcome_template,
}


def render_template(key: str, params: Dict[str, Any]) -> RenderedEmail:
    """
    Raises:
        ValueError: If no template is registered under `key`
    """
    template = TEMPLATES.get(key)
    if template is None:
        raise ValueError(f"Email template not registered: {key}")
    return template(params)
