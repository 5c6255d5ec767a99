"""
Delivery date calculation for the bakery order system

Weekdays are numbered 0-6 starting from Sunday.
"""
from datetime import date, datetime, timedelta
from typing import List, NamedTuple, Optional
from zoneinfo import ZoneInfo

from bakery.config import settings

SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)

# Orders close this many days before delivery
DELIVERY_LEAD_DAYS = 2


class DeliveryDateInfo(NamedTuple):
    delivery_date: date
    deadline_date: date
    days_left: int


class DeliveryOption(NamedTuple):
    value: str
    label: str
    delivery_date: date
    date_string: str
    deadline: str
    days_left: int

    @property
    def available(self) -> bool:
        return self.days_left > 0


# (value, label, delivery weekday, deadline weekday, deadline label)
DELIVERY_SCHEDULE = (
    ("tuesday", "יום שלישי", TUESDAY, SUNDAY, "יום ראשון"),
    ("friday", "יום שישי", FRIDAY, WEDNESDAY, "יום רביעי"),
)


def today_local() -> date:
    """Current date in the shop's timezone"""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


def weekday_index(day: date) -> int:
    """Sunday-based weekday index (Sunday=0 ... Saturday=6)"""
    return day.isoweekday() % 7


def get_next_delivery_date(target_day: int, today: Optional[date] = None) -> date:
    """Next date strictly after today falling on ``target_day`` (0-6)"""
    if not 0 <= target_day <= 6:
        raise ValueError("weekday must be between 0 and 6")
    today = today or today_local()
    days_until = target_day - weekday_index(today)
    if days_until <= 0:
        days_until += 7
    return today + timedelta(days=days_until)


def get_next_delivery_day(today: Optional[date] = None) -> date:
    """Nearest upcoming Tuesday or Friday delivery, for the dashboard"""
    today = today or today_local()
    return min(get_next_delivery_date(TUESDAY, today), get_next_delivery_date(FRIDAY, today))


def calculate_next_delivery_date(
    delivery_day: int,
    deadline_day: int,
    today: Optional[date] = None,
) -> DeliveryDateInfo:
    """
    Next delivery date for a deadline weekday
    
    The deadline is the first date on or after today falling on
    ``deadline_day``; delivery is two days later. ``delivery_day`` names the
    option and is not used in the arithmetic.
    
    Args:
        delivery_day: Delivery weekday (0-6)
        deadline_day: Last weekday to order for this delivery (0-6)
        today: Override for the current date
    
    Returns:
        Delivery date, deadline date and days left until the deadline
    """
    if not 0 <= deadline_day <= 6 or not 0 <= delivery_day <= 6:
        raise ValueError("weekday must be between 0 and 6")
    
    today = today or today_local()
    days_until_deadline = deadline_day - weekday_index(today)
    if days_until_deadline < 0:
        days_until_deadline += 7
    
    deadline_date = today + timedelta(days=days_until_deadline)
    delivery_date = deadline_date + timedelta(days=DELIVERY_LEAD_DAYS)
    # Whole dates, so the ceiling of the delta is the delta itself
    days_left = (deadline_date - today).days
    
    return DeliveryDateInfo(delivery_date, deadline_date, days_left)


def get_delivery_options(today: Optional[date] = None) -> List[DeliveryOption]:
    """Delivery options offered on the storefront, recomputed per call"""
    options = []
    for value, label, delivery_day, deadline_day, deadline_label in DELIVERY_SCHEDULE:
        info = calculate_next_delivery_date(delivery_day, deadline_day, today)
        options.append(DeliveryOption(
            value=value,
            label=label,
            delivery_date=info.delivery_date,
            date_string=format_date_he(info.delivery_date),
            deadline=f"הזמנה עד {deadline_label} ({format_date_he(info.deadline_date, with_year=False)})",
            days_left=info.days_left,
        ))
    return options


def is_delivery_date_past(delivery_date: date, today: Optional[date] = None) -> bool:
    return delivery_date < (today or today_local())


def format_date_he(value: date, with_year: bool = True) -> str:
    """he-IL numeric date, e.g. 20.10.2026"""
    if with_year:
        return f"{value.day}.{value.month}.{value.year}"
    return f"{value.day}.{value.month}"
