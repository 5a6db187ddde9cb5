"""Display helpers package."""

from expense_tracker.presentation.formatting import (
    CATEGORY_COLORS,
    CATEGORY_ICONS,
    DEFAULT_COLOR,
    DEFAULT_ICON,
    auto_format_date_input,
    category_color,
    category_emoji,
    category_icon,
    format_amount,
    format_date,
    today_input_date,
)

__all__ = [
    "CATEGORY_COLORS",
    "CATEGORY_ICONS",
    "DEFAULT_COLOR",
    "DEFAULT_ICON",
    "auto_format_date_input",
    "category_color",
    "category_emoji",
    "category_icon",
    "format_amount",
    "format_date",
    "today_input_date",
]
