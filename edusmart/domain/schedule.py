import re
from dataclasses import dataclass
from datetime import date, timedelta

_TIME_RANGE = re.compile(r"(\d{1,2}:\d{2})\s*-\s*(\d{1,2}:\d{2})")

# day tokens 2..7 are Monday..Saturday; calendar weekdays count Sunday as 0
_DAY_TOKENS = {"2": 1, "3": 2, "4": 3, "5": 4, "6": 5, "7": 6}
_SUNDAY_TOKENS = ("CN", "SUN", "8")


@dataclass(frozen=True)
class Schedule:
    days: frozenset[int]
    start: str
    end: str

    def occurs_on(self, day: date) -> bool:
        # date.weekday() is Monday=0
        return (day.weekday() + 1) % 7 in self.days

    def to_calendar_event(
        self,
        title: str,
        start_date: date | None = None,
        end_date: date | None = None,
        **extra,
    ) -> dict:
        end_recur = (end_date + timedelta(days=1)).isoformat() if end_date else None
        return {
            "title": title,
            "daysOfWeek": sorted(self.days),
            "startTime": f"{self.start}:00",
            "endTime": f"{self.end}:00",
            "startRecur": start_date.isoformat() if start_date else None,
            "endRecur": end_recur,
            **extra,
        }


def parse_schedule(text) -> Schedule | None:
    """Parse "<days> (<HH:MM>-<HH:MM>)"; None when the string is unusable."""
    if not text or not isinstance(text, str):
        return None
    day_part, sep, time_part = text.partition("(")
    if not sep:
        return None
    match = _TIME_RANGE.search(time_part)
    if not match:
        return None

    day_part = day_part.upper().strip()
    days = {weekday for token, weekday in _DAY_TOKENS.items() if token in day_part}
    if any(token in day_part for token in _SUNDAY_TOKENS):
        days.add(0)
    return Schedule(days=frozenset(days), start=match.group(1), end=match.group(2))
