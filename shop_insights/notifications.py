from datetime import date, datetime, tzinfo
from typing import Optional, Sequence

from . import settings
from .schemas import Notification, NotificationType, StockItem
from .utils import local_date, resolve_now


def is_near_expiry(expiry_date: Optional[date], today: date, days: int = settings.EXPIRY_WARNING_DAYS) -> bool:
    """True when the expiry date is today or within the next `days` calendar days."""
    if expiry_date is None:
        return False
    return 0 <= (expiry_date - today).days <= days


def generate_notifications(
    stock: Sequence[StockItem],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[Notification]:
    """
    Builds the stock alerts shown in the notification centre: low stock,
    near expiry and out of stock. Results are ordered by notification type.
    """
    today = local_date(resolve_now(now, tz), tz)
    notifications: list[Notification] = []

    for item in stock:
        if 0 < item.quantity < settings.RESTOCK_THRESHOLD:
            notifications.append(
                Notification(
                    id=f"low-{item.id}",
                    type=NotificationType.LOW_STOCK,
                    message=f"{item.item_name} is low on stock. Only {item.quantity} left.",
                    item_id=item.id,
                    item_name=item.item_name,
                )
            )

    for item in stock:
        if is_near_expiry(item.expiry_date, today):
            notifications.append(
                Notification(
                    id=f"expiry-{item.id}",
                    type=NotificationType.NEAR_EXPIRY,
                    message=f"{item.item_name} is expiring soon on {item.expiry_date.isoformat()}.",
                    item_id=item.id,
                    item_name=item.item_name,
                )
            )

    for item in stock:
        if item.quantity == 0:
            notifications.append(
                Notification(
                    id=f"out-of-stock-{item.id}",
                    type=NotificationType.OUT_OF_STOCK,
                    message=f"{item.item_name} is now out of stock.",
                    item_id=item.id,
                    item_name=item.item_name,
                )
            )

    # sorted() is stable, so items keep stock order within each type
    return sorted(notifications, key=lambda n: n.type.value)
