"""
Time normalization and booking windows.

Start and end values reach the booking core in whatever shape the UI or the
store produced them: "14:00", "14:00:00", "2:00 pm", "2025-02-01T14:00:00+00:00",
a bare "14", or (for the end value only) a duration label such as "1.5h".
Everything here reduces those to minutes since midnight so overlap checks are
plain integer comparisons.

String shapes are interpreted in exactly one place, parse_end_value(), which
returns either a ClockTime or a Duration. Nothing downstream re-parses strings.
"""
import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from app.core.exceptions import InvalidTimeError
from app.core.logger import logger

MINUTES_PER_DAY = 24 * 60

DURATION_LABELS = {
    "1h": 60,
    "1.5h": 90,
    "2h": 120,
    "3h": 180,
}

_EMBEDDED_TIME_RE = re.compile(r"t(\d{2}):(\d{2})")
_AMPM_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?\s*(am|pm)$")
_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?$")
_HOUR_RE = re.compile(r"^\d+$")
_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*h")


@dataclass(frozen=True)
class ClockTime:
    minutes: int


@dataclass(frozen=True)
class Duration:
    minutes: int


EndValue = Union[ClockTime, Duration]


@dataclass(frozen=True)
class BookingWindow:
    """Half-open [start, end) interval in minutes since midnight."""

    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "BookingWindow") -> bool:
        # Touching endpoints do not overlap
        return self.start < other.end and self.end > other.start

    def is_bookable(self) -> bool:
        """True when the window is non-empty and ends on the same day."""
        return 0 <= self.start < self.end < MINUTES_PER_DAY


def _checked(hour: int, minute: int, value: Any) -> int:
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise InvalidTimeError(value)
    return hour * 60 + minute


def to_minutes(value: Any) -> int:
    """
    Convert a time value to minutes since midnight (0-1439).

    Accepted shapes, first match wins:
      1. an embedded 'T' followed by HH:MM (timestamps; date and offset ignored)
      2. anything datetime.fromisoformat() accepts, e.g. "2025-02-01 21:00:00"
      3. HH:MM[:SS] am|pm
      4. HH:MM[:SS]
      5. a bare hour, e.g. "10"

    Raises InvalidTimeError for anything else. Values are never clamped.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidTimeError(value)

    text = value.strip()
    normalized = text.lower()

    match = _EMBEDDED_TIME_RE.search(normalized)
    if match:
        return _checked(int(match.group(1)), int(match.group(2)), value)

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is not None:
        # Wall-clock time as written; bookings are facility-local
        return parsed.hour * 60 + parsed.minute

    match = _AMPM_RE.match(normalized)
    if match:
        hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3)
        if not 1 <= hour <= 12:
            raise InvalidTimeError(value)
        if period == "pm" and hour != 12:
            hour += 12
        if period == "am" and hour == 12:
            hour = 0
        return _checked(hour, minute, value)

    match = _CLOCK_RE.match(normalized)
    if match:
        return _checked(int(match.group(1)), int(match.group(2)), value)

    if _HOUR_RE.match(normalized):
        return _checked(int(normalized), 0, value)

    raise InvalidTimeError(value)


def parse_end_value(value: Any) -> EndValue:
    """
    Classify the second half of a booking request as a duration or a clock time.

    Known labels ("1h", "1.5h", "2h", "3h") and any "<number>h" form are
    durations; everything else must normalize as a clock time.
    """
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in DURATION_LABELS:
            return Duration(DURATION_LABELS[normalized])
        match = _DURATION_RE.match(normalized)
        if match:
            return Duration(int(round(float(match.group(1)) * 60)))
    return ClockTime(to_minutes(value))


def parse_duration(value: Any) -> int:
    """Minutes for a duration label; raises InvalidTimeError for clock times."""
    parsed = parse_end_value(value)
    if not isinstance(parsed, Duration):
        raise InvalidTimeError(value)
    return parsed.minutes


def resolve_window(
    start: Any,
    end_or_duration: Any,
    default_duration: Optional[int] = None,
) -> BookingWindow:
    """
    Build a BookingWindow from a start time and an end time or duration label.

    An invalid start raises InvalidTimeError. An end value that cannot be
    resolved falls back to default_duration minutes (60 unless configured).
    """
    start_minutes = to_minutes(start)

    try:
        end_value = parse_end_value(end_or_duration)
    except InvalidTimeError:
        fallback = default_duration if default_duration is not None else 60
        logger.debug(f"End value {end_or_duration!r} unresolved, assuming {fallback} minutes")
        end_value = Duration(fallback)

    if isinstance(end_value, Duration):
        return BookingWindow(start_minutes, start_minutes + end_value.minutes)
    return BookingWindow(start_minutes, end_value.minutes)


def format_minutes(minutes: int) -> str:
    """Render minutes since midnight as HH:MM."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def slots_needed(duration_minutes: int, slot_minutes: int) -> int:
    """Number of consecutive grid slots a duration occupies."""
    return max(1, math.ceil(duration_minutes / slot_minutes))
