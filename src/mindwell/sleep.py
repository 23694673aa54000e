"""Cálculo de duración de sueño con cruce de medianoche."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

# Any fixed day works; only the difference between the two instants matters.
_REFERENCE_DAY = date(2024, 1, 1)

_CLOCK_FORMATS: tuple[str, ...] = (
    "%H:%M",
    "%I:%M%p",
    "%I%p",
)


def sleep_duration(bedtime: time, wake_time: time) -> float:
    """Hours slept between bedtime and wake time.

    Both clock times are placed on the same reference day. When the wake time
    is not later than the bedtime it is moved to the next day, so a
    23:00 -> 07:00 night yields 8.0 and equal times yield 24.0.

    Args:
        bedtime: Time of day the user went to bed.
        wake_time: Time of day the user woke up.

    Returns:
        Elapsed hours rounded half-up to one decimal place.
    """
    bed = datetime.combine(_REFERENCE_DAY, bedtime)
    wake = datetime.combine(_REFERENCE_DAY, wake_time)
    if wake <= bed:
        wake += timedelta(days=1)
    hours = (wake - bed).total_seconds() / 3600
    return _round_one_decimal(hours)


def parse_clock(value: str) -> time:
    """Parse '23:00', '7:30am', '7 pm' style clock times.

    Raises:
        ValueError: If the text is not a recognised time of day.
    """
    text = value.strip().lower().replace(" ", "")
    if not text:
        raise ValueError("empty time value")
    for fmt in _CLOCK_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.time().replace(second=0, microsecond=0)
    raise ValueError(f"Could not parse time of day: {value!r}")


def _round_one_decimal(value: float) -> float:
    # float round() is banker's rounding on exact halves; keep half-up.
    quantized = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(quantized)
