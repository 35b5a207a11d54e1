"""Plain-text templates for transactional email.

Each builder returns ``(subject, body)``.
"""

from datetime import datetime
from typing import Any

SIGNATURE = """
--
Pizza Ordering System
Questions? Write to {support_email}"""


def _money(amount) -> str:
    return f"₹{float(amount):.2f}"


def welcome_email(name: str, verification_url: str, support_email: str) -> tuple[str, str]:
    """Welcome a new user and ask them to verify their address."""
    subject = "Welcome to Pizza Ordering System!"
    body = f"""Hi {name},

Thanks for signing up. Please confirm your email address to start ordering:

{verification_url}
""" + SIGNATURE.format(support_email=support_email)
    return subject, body


def order_confirmation_email(
    name: str,
    order_id: str,
    total_amount,
    items: list[dict[str, Any]],
    estimated_delivery: datetime | None,
    tracking_url: str,
    support_email: str,
) -> tuple[str, str]:
    """Confirm a paid order."""
    lines = []
    for item in items:
        names = ", ".join(ing["name"] for ing in item["ingredients"])
        lines.append(f"  {item['quantity']} x {item['size']} ({names}) - {_money(item['item_price'])}")
    eta = estimated_delivery.strftime("%H:%M") if estimated_delivery else "within 45 minutes"

    subject = f"Order Confirmation - {order_id}"
    body = f"""Hi {name},

Your payment was received and order {order_id} is confirmed.

{chr(10).join(lines)}

Total: {_money(total_amount)}
Estimated delivery: {eta}

Track your order: {tracking_url}
""" + SIGNATURE.format(support_email=support_email)
    return subject, body


def order_status_email(
    name: str,
    order_id: str,
    status_display: str,
    status_message: str,
    tracking_url: str,
    support_email: str,
) -> tuple[str, str]:
    """Notify the customer of a status change."""
    subject = f"Order Update - {order_id}: {status_display}"
    body = f"""Hi {name},

Your order {order_id} is now: {status_display}

{status_message}

Track your order: {tracking_url}
""" + SIGNATURE.format(support_email=support_email)
    return subject, body


def order_delivered_email(
    name: str,
    order_id: str,
    delivered_at: datetime,
    total_amount,
    rating_url: str,
    support_email: str,
) -> tuple[str, str]:
    """Delivery notice with a rating request."""
    subject = f"Order Delivered - {order_id} - How was your experience?"
    body = f"""Hi {name},

Your order {order_id} ({_money(total_amount)}) was delivered at {delivered_at:%Y-%m-%d %H:%M}.

Enjoy your pizza! We'd love to hear how it was:
{rating_url}
""" + SIGNATURE.format(support_email=support_email)
    return subject, body


def stock_alert_email(
    low_stock_items: list[dict[str, Any]],
    out_of_stock_items: list[dict[str, Any]],
    timestamp: datetime,
    dashboard_url: str,
) -> tuple[str, str]:
    """Inventory alert for administrators."""
    subject = (
        f"Inventory Alert - {len(out_of_stock_items)} Out of Stock, "
        f"{len(low_stock_items)} Low Stock"
    )
    sections = [f"Pizza Ordering System - Inventory Alert\nTime: {timestamp:%Y-%m-%d %H:%M} UTC"]

    for title, entries in (
        ("OUT OF STOCK ITEMS", out_of_stock_items),
        ("LOW STOCK ITEMS", low_stock_items),
    ):
        if not entries:
            continue
        rows = [f"{title} ({len(entries)}):", "=" * 40]
        for entry in entries:
            rows.append(f"- {entry['type'].value}: {entry['name']} ({entry['category'] or '-'})")
            rows.append(f"  Stock: {entry['stock']} | Threshold: {entry['threshold']}")
        sections.append("\n".join(rows))

    sections.append(f"Please update inventory levels in the admin dashboard:\n{dashboard_url}")
    return subject, "\n\n".join(sections) + "\n"


def password_reset_email(name: str, reset_url: str, support_email: str) -> tuple[str, str]:
    """Password reset link, valid for one hour."""
    subject = "Password Reset Request - Pizza Ordering System"
    body = f"""Hi {name},

We received a request to reset your password. Use this link within 1 hour:

{reset_url}

If you didn't ask for this, you can ignore this email.
""" + SIGNATURE.format(support_email=support_email)
    return subject, body
