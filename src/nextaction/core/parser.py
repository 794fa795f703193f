"""Quick-add parser: free text to structured task fields - no I/O dependencies.

Each stage claims its tokens from the working title before the next stage
runs, so e.g. a context word is never re-read as part of a date phrase.
"""

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, NamedTuple

CONTEXT_WORDS = (
    "home",
    "work",
    "personal",
    "computer",
    "phone",
    "office",
    "errands",
    "shopping",
    "calls",
    "email",
)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_WEEKDAY_ALT = "|".join(WEEKDAYS)

CONTEXT_PATTERN = re.compile(r"@(\w+)|\b(" + "|".join(CONTEXT_WORDS) + r")\b", re.IGNORECASE)
ENERGY_PATTERN = re.compile(r"\b(high|medium|low)\s*energy\b", re.IGNORECASE)
TIME_PATTERN = re.compile(r"\b(\d+)\s*(minutes?|min|hours?|hrs?|h)\b", re.IGNORECASE)
RECURRENCE_PATTERN = re.compile(
    r"\b(daily|weekly|monthly|yearly|every\s+day|every\s+week|every\s+month|every\s+year|recurring)\b",
    re.IGNORECASE,
)
PRIORITY_PATTERN = re.compile(r"\b(urgent|asap|important|priority|critical)\b", re.IGNORECASE)

TODAY_PATTERN = re.compile(r"\btoday\b", re.IGNORECASE)
TOMORROW_PATTERN = re.compile(r"\btomorrow\b", re.IGNORECASE)
NEXT_WEEK_PATTERN = re.compile(r"\bnext\s+week\b", re.IGNORECASE)
IN_DAYS_PATTERN = re.compile(r"\bin\s+(\d+)\s+days?\b", re.IGNORECASE)
IN_WEEKS_PATTERN = re.compile(r"\bin\s+(\d+)\s+weeks?\b", re.IGNORECASE)
ON_DATE_PATTERN = re.compile(
    r"\bon\s+(\d{1,2})[/-](\d{1,2})(?:[/-](\d{4}|\d{2}))?(?![/-]?\d)\b", re.IGNORECASE
)
# Group 1 is set when the weekday belongs to NEXT_WEEKDAY_PATTERN.
WEEKDAY_PATTERN = re.compile(r"\b(next\s+)?(" + _WEEKDAY_ALT + r")\b", re.IGNORECASE)
NEXT_WEEKDAY_PATTERN = re.compile(r"\bnext\s+(" + _WEEKDAY_ALT + r")\b", re.IGNORECASE)

# Removal order: longer phrases first so no orphan "next" is left behind.
_DATE_CLEANUP_PATTERNS = (
    NEXT_WEEKDAY_PATTERN,
    NEXT_WEEK_PATTERN,
    TODAY_PATTERN,
    TOMORROW_PATTERN,
    IN_DAYS_PATTERN,
    IN_WEEKS_PATTERN,
    ON_DATE_PATTERN,
    WEEKDAY_PATTERN,
)

EXAMPLES = (
    "Call John @work tomorrow high energy",
    "Team meeting @computer weekly",
    "Pay bills @home monthly",
    "Quick email check 15min low energy",
    "Gym workout @personal daily",
    "Review project @computer in 3 days",
    "Client meeting next tuesday 2hrs urgent",
)


@dataclass
class ParsedTask:
    """Structured fields pulled out of one line of quick-add text."""

    title: str = ""
    contexts: list[str] = field(default_factory=list)
    energy: str = ""
    time: int = 0
    recurrence: str = ""
    due_date: date | None = None
    priority: bool = False

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "contexts": list(self.contexts),
            "energy": self.energy,
            "time": self.time,
            "recurrence": self.recurrence,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "priority": self.priority,
        }


class Stage(NamedTuple):
    """One extraction step: pull a value out, then strip its text."""

    name: str
    extract: Callable[[str, date], object]
    remove: Callable[[str, object], str]


# ============== Extractors ==============


def extract_contexts(text: str, as_of: date | None = None) -> list[str]:
    contexts: list[str] = []
    for match in CONTEXT_PATTERN.finditer(text):
        ctx = "@" + (match.group(1) or match.group(2)).lower()
        if ctx not in contexts:
            contexts.append(ctx)
    return contexts


def remove_contexts(text: str, contexts: list[str]) -> str:
    for ctx in contexts:
        text = re.sub(r"@?\b" + re.escape(ctx[1:]) + r"\b", "", text, flags=re.IGNORECASE)
    return text


def extract_energy(text: str, as_of: date | None = None) -> str:
    match = ENERGY_PATTERN.search(text)
    return match.group(1).lower() if match else ""


def extract_time(text: str, as_of: date | None = None) -> int:
    """Time estimate in minutes; hours are converted."""
    match = TIME_PATTERN.search(text)
    if not match:
        return 0
    try:
        amount = int(match.group(1))
    except ValueError:
        return 0
    if match.group(2).lower().startswith("h"):
        return amount * 60
    return amount


def canonical_recurrence(token: str) -> str:
    """'every week' -> 'weekly'. 'recurring' has no interval and maps to ''."""
    token = token.lower()
    if token in ("daily", "weekly", "monthly", "yearly"):
        return token
    if "day" in token:
        return "daily"
    if "week" in token:
        return "weekly"
    if "month" in token:
        return "monthly"
    if "year" in token:
        return "yearly"
    return ""


def extract_recurrence(text: str, as_of: date | None = None) -> str:
    for match in RECURRENCE_PATTERN.finditer(text):
        recurrence = canonical_recurrence(match.group(1))
        if recurrence:
            return recurrence
    return ""


def extract_priority(text: str, as_of: date | None = None) -> bool:
    return PRIORITY_PATTERN.search(text) is not None


def next_weekday(name: str, as_of: date, extra_days: int = 0) -> date:
    """Next occurrence of a weekday, always 1-7 days out (today rolls a week)."""
    target = WEEKDAYS.index(name.lower())
    days_until = (target - as_of.weekday()) % 7 or 7
    return as_of + timedelta(days=days_until + extra_days)


def _offset(as_of: date, amount: str, unit_days: int = 1) -> date | None:
    """as_of + amount * unit_days, or None when that is not a representable date."""
    try:
        return as_of + timedelta(days=int(amount) * unit_days)
    except (OverflowError, ValueError):
        return None


def _on_date(match: re.Match, as_of: date) -> date | None:
    month, day = int(match.group(1)), int(match.group(2))
    year = as_of.year
    if match.group(3):
        year = int(match.group(3))
        if year < 100:
            year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def extract_due_date(text: str, as_of: date | None = None) -> date | None:
    """First matching date phrase wins, in fixed precedence order."""
    as_of = as_of or date.today()

    if TODAY_PATTERN.search(text):
        return as_of
    if TOMORROW_PATTERN.search(text):
        return as_of + timedelta(days=1)
    if NEXT_WEEK_PATTERN.search(text):
        return as_of + timedelta(days=7)

    match = IN_DAYS_PATTERN.search(text)
    if match:
        in_days = _offset(as_of, match.group(1))
        if in_days:
            return in_days

    match = IN_WEEKS_PATTERN.search(text)
    if match:
        in_weeks = _offset(as_of, match.group(1), 7)
        if in_weeks:
            return in_weeks

    match = ON_DATE_PATTERN.search(text)
    if match:
        on_date = _on_date(match, as_of)
        if on_date:
            return on_date

    for match in WEEKDAY_PATTERN.finditer(text):
        if not match.group(1):
            return next_weekday(match.group(2), as_of)

    match = NEXT_WEEKDAY_PATTERN.search(text)
    if match:
        return next_weekday(match.group(1), as_of, extra_days=7)

    return None


def remove_dates(text: str, due_date: date | None) -> str:
    if due_date is None:
        return text
    for pattern in _DATE_CLEANUP_PATTERNS:
        text = pattern.sub("", text)
    return text


def clean_title(title: str) -> str:
    title = re.sub(r"\s+", " ", title)
    title = re.sub(r"\s*[,:\-]+\s*$", "", title)
    return title.strip()


STAGES: tuple[Stage, ...] = (
    Stage("contexts", extract_contexts, remove_contexts),
    Stage("energy", extract_energy, lambda text, _: ENERGY_PATTERN.sub("", text, count=1)),
    Stage("time", extract_time, lambda text, _: TIME_PATTERN.sub("", text, count=1)),
    Stage("recurrence", extract_recurrence, lambda text, _: RECURRENCE_PATTERN.sub("", text)),
    Stage("priority", extract_priority, lambda text, _: PRIORITY_PATTERN.sub("", text, count=1)),
    Stage("due_date", extract_due_date, remove_dates),
)


def parse(text: str, as_of: date | None = None) -> ParsedTask:
    """
    Parse one line of quick-add text.

    Pure function - never raises on odd input; anything unmatched keeps its
    default (empty string, 0, None or False).
    """
    as_of = as_of or date.today()
    values: dict[str, object] = {}
    remaining = text or ""

    for stage in STAGES:
        value = stage.extract(remaining, as_of)
        remaining = stage.remove(remaining, value)
        values[stage.name] = value

    return ParsedTask(title=clean_title(remaining), **values)
