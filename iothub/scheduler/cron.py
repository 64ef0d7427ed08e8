"""
Minute/hour cron subset.

Expressions use cron field order (minute hour day-of-month month
day-of-week) but only minute and hour are matched. Each of those is `*`
or an exact integer. Trailing fields are optional and must be `*`, so
an accepted expression never carries a constraint the matcher ignores.
Ranges, steps and lists (`*/5`, `1-5`, `1,2`) are not supported.

Matching is at minute granularity: a minute that the trigger skips is
never made up later.
"""

from datetime import datetime
from typing import NamedTuple, Optional

from ..utils.clock import as_utc
from ..utils.exceptions import ValidationError

WILDCARD = "*"
MIN_FIELDS = 2
MAX_FIELDS = 5
MAX_CRON_FIELD_LENGTH = 10


class CronSpec(NamedTuple):
    """Parsed expression. None means wildcard."""
    minute: Optional[int]
    hour: Optional[int]


def _parse_field(value: str, upper: int, label: str) -> Optional[int]:
    if value == WILDCARD:
        return None
    if not (value.isascii() and value.isdigit()):
        raise ValidationError(f"Cron {label} must be '*' or a number, got '{value}'.")
    number = int(value)
    if number > upper:
        raise ValidationError(f"Cron {label} must be between 0 and {upper}, got {number}.")
    return number


def parse_cron(expression: str) -> CronSpec:
    """Parse and validate an expression. Raises ValidationError."""
    if not isinstance(expression, str) or not expression.strip():
        raise ValidationError("Cron expression is required.")
    fields = expression.split()
    if not MIN_FIELDS <= len(fields) <= MAX_FIELDS:
        raise ValidationError(
            "Cron expression must have a minute and an hour field (e.g. '0 10 * * *')."
        )
    if any(len(f) > MAX_CRON_FIELD_LENGTH for f in fields):
        raise ValidationError(
            f"Cron fields cannot exceed {MAX_CRON_FIELD_LENGTH} characters."
        )
    if any(f != WILDCARD for f in fields[MIN_FIELDS:]):
        raise ValidationError(
            "Only minute and hour can be set; day-of-month, month and day-of-week must be '*'."
        )
    return CronSpec(
        minute=_parse_field(fields[0], 59, "minute"),
        hour=_parse_field(fields[1], 23, "hour"),
    )


def validate_cron_expression(expression: str) -> str:
    """Return the expression with whitespace normalized, or raise ValidationError."""
    parse_cron(expression)
    return " ".join(expression.split())


def is_due(expression: str, now_utc: datetime) -> bool:
    """True when both minute and hour match now_utc. Unparseable expressions are never due."""
    try:
        spec = parse_cron(expression)
    except ValidationError:
        return False
    now = as_utc(now_utc)
    minute_match = spec.minute is None or spec.minute == now.minute
    hour_match = spec.hour is None or spec.hour == now.hour
    return minute_match and hour_match
