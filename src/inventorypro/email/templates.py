"""
Email templates for InventoryPro subscription messages.

All templates use inline CSS for maximum email client compatibility.

Each template function returns (subject, html_body, text_body).
"""

from __future__ import annotations

from datetime import datetime
from html import escape

from inventorypro.subscriptions.tiers import ReminderTier

# Color constants
BG_PAGE = "#F4F5F7"
BG_CARD = "#FFFFFF"
BG_SURFACE = "#F8F9FA"
GREEN = "#4CAF50"
RED = "#D93025"
TEXT_PRIMARY = "#333333"
TEXT_SECONDARY = "#555555"
TEXT_MUTED = "#777777"
BORDER = "#E0E0E0"

REMINDER_SUBJECTS: dict[ReminderTier, str] = {
    ReminderTier.SEVEN_DAY: "Your InventoryPro Subscription Expires in 7 Days",
    ReminderTier.THREE_DAY: "Reminder: Your InventoryPro Subscription Expires in 3 Days",
    ReminderTier.ONE_DAY: "Urgent: Your InventoryPro Subscription Expires Tomorrow",
}

# (headline, call to action) per tier, escalating urgency
_REMINDER_COPY: dict[ReminderTier, tuple[str, str]] = {
    ReminderTier.SEVEN_DAY: (
        "Your subscription will expire soon.",
        "To ensure uninterrupted access to all features, please renew your subscription.",
    ),
    ReminderTier.THREE_DAY: (
        "Your subscription is expiring very soon.",
        "To avoid any interruption in service, please renew your subscription as soon as possible.",
    ),
    ReminderTier.ONE_DAY: (
        "Your subscription expires tomorrow!",
        "To maintain access to all features, please renew your subscription immediately.",
    ),
}


def _base_layout(content: str, app_name: str = "InventoryPro") -> str:
    """Wrap content in the base email layout."""
    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{app_name}</title>
</head>
<body style="margin: 0; padding: 0; background-color: {BG_PAGE}; font-family: Arial, sans-serif;">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="background-color: {BG_PAGE};">
        <tr>
            <td align="center" style="padding: 32px 16px;">
                <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="600" style="max-width: 600px; width: 100%;">
                    <tr>
                        <td style="background-color: {BG_CARD}; border: 1px solid {BORDER}; border-radius: 5px; padding: 24px;">
                            <h2 style="color: {TEXT_PRIMARY}; margin: 0 0 16px 0;">{app_name}</h2>
                            {content}
                        </td>
                    </tr>
                    <tr>
                        <td align="center" style="padding-top: 20px;">
                            <p style="color: {TEXT_MUTED}; font-size: 12px; line-height: 1.5; margin: 0;">
                                This is an automated message. Please do not reply to this email.
                            </p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>"""


def _button(url: str, label: str) -> str:
    """Render a green CTA button."""
    return f"""\
<div style="margin: 25px 0;">
    <a href="{url}" target="_blank" style="background-color: {GREEN}; color: #FFFFFF; padding: 10px 20px; text-decoration: none; border-radius: 4px; display: inline-block;">
        {label}
    </a>
</div>"""


def _format_date(value: datetime) -> str:
    return value.strftime("%B %d, %Y")


def subscription_reminder(
    name: str | None,
    tier: ReminderTier,
    days_remaining: int,
    expiration_date: datetime,
    renew_url: str,
) -> tuple[str, str, str]:
    """
    Tiered pre-expiry reminder.

    Raises:
        ValueError: If ``tier`` is ``ReminderTier.NONE``.

    Returns:
        (subject, html_body, text_body)
    """
    if tier not in REMINDER_SUBJECTS:
        msg = f"No reminder template for tier {tier.value}"
        raise ValueError(msg)

    display_name = escape(name or "there")
    subject = REMINDER_SUBJECTS[tier]
    headline, call_to_action = _REMINDER_COPY[tier]
    formatted_date = _format_date(expiration_date)
    days = max(days_remaining, 0)
    day_word = "day" if days == 1 else "days"

    content = f"""\
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">Dear {display_name},</p>
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">
    <strong style="color: {TEXT_PRIMARY};">{headline}</strong>
    Your InventoryPro subscription will expire in {days} {day_word} on {formatted_date}.
</p>
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">{call_to_action}</p>
<div style="margin: 25px 0; padding: 15px; background-color: {BG_SURFACE}; border-radius: 4px;">
    <p style="margin: 0; font-weight: bold;">Subscription Details:</p>
    <p style="margin: 5px 0;">Expiration Date: {formatted_date}</p>
    <p style="margin: 5px 0;">Days Remaining: {days}</p>
</div>
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">
    To renew your subscription, simply log in to your account and visit the Subscription page.
</p>
{_button(renew_url, "Renew Subscription")}
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">Thank you for using InventoryPro!</p>"""
    html_body = _base_layout(content)
    text_body = (
        f"Dear {name or 'there'},\n\n"
        f"{headline} Your InventoryPro subscription will expire in "
        f"{days} {day_word} on {formatted_date}.\n\n"
        f"{call_to_action}\n\n"
        f"Renew here: {renew_url}\n\n"
        f"-- The InventoryPro Team"
    )
    return subject, html_body, text_body


def subscription_expired(name: str | None, renew_url: str) -> tuple[str, str, str]:
    """
    Sent once when a subscription transitions to expired.

    Returns:
        (subject, html_body, text_body)
    """
    display_name = escape(name or "there")
    subject = "Your InventoryPro Subscription Has Expired"
    content = f"""\
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">Dear {display_name},</p>
<p style="color: {RED}; font-size: 15px; font-weight: bold; line-height: 1.6;">
    Your InventoryPro subscription has expired.
</p>
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">
    To continue using all features, please renew your subscription.
</p>
{_button(renew_url, "Renew Subscription")}"""
    html_body = _base_layout(content)
    text_body = (
        f"Dear {name or 'there'},\n\n"
        f"Your InventoryPro subscription has expired. To continue using all features, "
        f"please renew your subscription:\n\n{renew_url}\n\n"
        f"-- The InventoryPro Team"
    )
    return subject, html_body, text_body


def subscription_renewed(name: str | None, new_end_date: datetime) -> tuple[str, str, str]:
    """
    Renewal confirmation.

    Returns:
        (subject, html_body, text_body)
    """
    display_name = escape(name or "there")
    formatted_date = _format_date(new_end_date)
    subject = "Your InventoryPro Subscription Has Been Renewed"
    content = f"""\
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">Dear {display_name},</p>
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">
    Your InventoryPro subscription has been successfully renewed.
    Your new subscription end date is <strong style="color: {TEXT_PRIMARY};">{formatted_date}</strong>.
</p>
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6;">Thank you for your continued support!</p>"""
    html_body = _base_layout(content)
    text_body = (
        f"Dear {name or 'there'},\n\n"
        f"Your InventoryPro subscription has been successfully renewed. "
        f"Your new subscription end date is {formatted_date}.\n\n"
        f"Thank you for your continued support!\n\n"
        f"-- The InventoryPro Team"
    )
    return subject, html_body, text_body
