"""
Transactional email templates.

Inline CSS only. Each template function returns (subject, html_body, text_body).
"""

from __future__ import annotations

from html import escape

ACCENT = "#2563EB"
TEXT_PRIMARY = "#111827"
TEXT_SECONDARY = "#6B7280"
BG = "#F9FAFB"


def _base_layout(content: str, app_name: str = "CertPrep") -> str:
    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{app_name}</title>
</head>
<body style="margin: 0; padding: 32px 16px; background-color: {BG}; font-family: -apple-system, 'Segoe UI', Roboto, sans-serif;">
    <div style="max-width: 560px; margin: 0 auto; background: #FFFFFF; border-radius: 8px; padding: 32px;">
        <h1 style="font-size: 20px; color: {ACCENT}; margin: 0 0 24px;">{app_name}</h1>
        {content}
        <p style="color: {TEXT_SECONDARY}; font-size: 12px; margin-top: 32px;">
            If you didn't expect this email, you can safely ignore it.
        </p>
    </div>
</body>
</html>"""


def password_reset(reset_url: str, first_name: str | None, ttl_minutes: int = 60) -> tuple[str, str, str]:
    """Password reset link email."""
    greeting = f"Hi {escape(first_name)}," if first_name else "Hi,"
    subject = "Reset your CertPrep password"
    html_body = _base_layout(f"""\
<p style="color: {TEXT_PRIMARY}; font-size: 16px;">{greeting}</p>
<p style="color: {TEXT_PRIMARY}; font-size: 16px;">
    We received a request to reset your password. The link below is valid for {ttl_minutes} minutes.
</p>
<p style="margin: 28px 0;">
    <a href="{escape(reset_url)}" style="background: {ACCENT}; color: #FFFFFF; padding: 12px 24px; border-radius: 6px; text-decoration: none;">Reset password</a>
</p>""")
    text_body = (
        f"{greeting}\n\n"
        f"We received a request to reset your password. This link is valid for {ttl_minutes} minutes:\n\n"
        f"{reset_url}\n\n"
        "If you didn't request this, you can ignore this email."
    )
    return subject, html_body, text_body
