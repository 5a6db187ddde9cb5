"""
Display helpers for the expense list and the add form.

These hold no business rules. They turn records into text and colours,
and tidy what the user types into the date field.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Optional, Union

import structlog

from expense_tracker.models.expense import ExpenseCategory, parse_expense_date


logger = structlog.get_logger(__name__)


CATEGORY_ICONS = {
    ExpenseCategory.FOOD.value: "restaurant",
    ExpenseCategory.TRANSPORT.value: "car",
    ExpenseCategory.SHOPPING.value: "bag",
    ExpenseCategory.ENTERTAINMENT.value: "game-controller",
    ExpenseCategory.HEALTH.value: "medical",
    ExpenseCategory.BILLS.value: "receipt",
    ExpenseCategory.EDUCATION.value: "school",
    ExpenseCategory.OTHER.value: "ellipsis-horizontal",
}
DEFAULT_ICON = "cash"

CATEGORY_COLORS = {
    ExpenseCategory.FOOD.value: "#F59E0B",
    ExpenseCategory.TRANSPORT.value: "#3B82F6",
    ExpenseCategory.SHOPPING.value: "#EF4444",
    ExpenseCategory.ENTERTAINMENT.value: "#8B5CF6",
    ExpenseCategory.HEALTH.value: "#10B981",
    ExpenseCategory.BILLS.value: "#F97316",
    ExpenseCategory.EDUCATION.value: "#06B6D4",
    ExpenseCategory.OTHER.value: "#6B7280",
}
DEFAULT_COLOR = "#4F46E5"

# Emoji stand-ins for the icon names, for text-only renderers
ICON_EMOJI = {
    "restaurant": "🍽️",
    "car": "🚗",
    "bag": "🛍️",
    "game-controller": "🎮",
    "medical": "🩺",
    "receipt": "🧾",
    "school": "🎓",
    "ellipsis-horizontal": "⋯",
    "cash": "💵",
}

_DATE_INPUT = re.compile(r"^(\d{0,2})(\d{0,2})(\d{0,4})$")


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, DEFAULT_ICON)


def category_color(category: str) -> str:
    return CATEGORY_COLORS.get(category, DEFAULT_COLOR)


def category_emoji(category: str) -> str:
    return ICON_EMOJI[category_icon(category)]


def format_amount(amount: Union[Decimal, float, int], symbol: str = "$") -> str:
    """Format an amount with two decimals, e.g. $1,234.50."""
    return f"{symbol}{Decimal(str(amount)):,.2f}"


def format_date(value: str, today: Optional[date] = None) -> str:
    """
    Format a user-entered date for the list, e.g. "Mar 15".

    The year is appended when it differs from the current one.
    Unparseable input is returned unchanged and a warning is logged,
    so a malformed date is visible in the logs instead of passing silently.
    """
    parsed = parse_expense_date(value)
    if parsed is None:
        logger.warning("unparseable_expense_date", value=value)
        return value

    today = today or date.today()
    text = f"{parsed.strftime('%b')} {parsed.day}"
    if parsed.year != today.year:
        text = f"{text}, {parsed.year}"
    return text


def auto_format_date_input(text: str) -> str:
    """
    Group typed digits as MM/DD/YYYY.

    Non-digits are dropped, so "03152024" and "03/15/2024" both become
    "03/15/2024". More than eight digits leaves the input untouched.
    """
    digits = re.sub(r"\D", "", text)
    match = _DATE_INPUT.match(digits)
    if not match:
        return text

    month, day, year = match.groups()
    formatted = month
    if day:
        formatted += "/" + day
    if year:
        formatted += "/" + year
    return formatted


def today_input_date(today: Optional[date] = None) -> str:
    """Today's date in the form's MM/DD/YYYY format."""
    today = today or date.today()
    return today.strftime("%m/%d/%Y")
