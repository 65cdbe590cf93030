# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Instructional-day resolution over layered schedule rules.

A date is checked against an ordered list of layers. The first layer that
has an opinion decides:

1. Holiday: any holiday range containing the date closes school.
2. Schedule override: a time-boxed weekday set (class-scoped overrides
   before institution-wide ones).
3. Class schedule: the class's own weekday set, if it has one.
4. Session default: the academic session's weekday set.

When no layer decides, the date is a school day. Resolution is pure: it
reads a ScheduleConfig snapshot and never mutates it.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from src.models.enums import Weekday
from src.utils.datetime import iter_dates


def parse_weekdays(values: Iterable[str] | None) -> frozenset[Weekday]:
    """Convert stored day names to a Weekday set.

    Matching is case-insensitive; unknown names are ignored.
    """
    if not values:
        return frozenset()
    by_name = {day.value.lower(): day for day in Weekday}
    return frozenset(
        by_name[value.strip().lower()]
        for value in values
        if isinstance(value, str) and value.strip().lower() in by_name
    )


def serialize_weekdays(days: Iterable[Weekday]) -> list[str]:
    """Weekday set to stored day names, Monday first."""
    order = list(Weekday)
    return [day.value for day in sorted(set(days), key=order.index)]


def _describe(days: frozenset[Weekday]) -> str:
    return ", ".join(serialize_weekdays(days)) or "no days"


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""

    start: date
    end: date

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True)
class HolidayRule:
    id: str
    title: str
    dates: DateRange


@dataclass(frozen=True)
class OverrideRule:
    """Time-boxed weekday set; ``class_id`` None applies institution-wide."""

    id: str
    title: str
    dates: DateRange
    school_days: frozenset[Weekday]
    class_id: str | None = None


@dataclass(frozen=True)
class SessionRule:
    id: str
    name: str
    dates: DateRange
    school_days: frozenset[Weekday]


@dataclass(frozen=True)
class ScheduleConfig:
    """Everything needed to resolve dates for one class."""

    class_id: str
    holidays: tuple[HolidayRule, ...] = ()
    overrides: tuple[OverrideRule, ...] = ()
    class_days: frozenset[Weekday] = field(default_factory=frozenset)
    sessions: tuple[SessionRule, ...] = ()


@dataclass(frozen=True)
class DayResolution:
    """Decision for one date.

    Attributes:
        valid: Whether the date is a school day.
        reason: Why it is not, when it is not.
        decided_by: Name of the layer that decided.
        school_days: Weekday set of the deciding layer, if it has one.
    """

    valid: bool
    decided_by: str
    reason: str | None = None
    school_days: frozenset[Weekday] | None = None


class DayRule(Protocol):
    """One layer of the calendar."""

    name: str

    def resolve(self, config: ScheduleConfig, day: date) -> DayResolution | None:
        """Decide the date, or return None to defer to the next layer."""
        ...


class HolidayLayer:
    name = "holiday"

    def resolve(self, config: ScheduleConfig, day: date) -> DayResolution | None:
        for holiday in config.holidays:
            if holiday.dates.contains(day):
                return DayResolution(valid=False, decided_by=self.name, reason=holiday.title)
        return None


class ScheduleOverrideLayer:
    name = "schedule_override"

    def resolve(self, config: ScheduleConfig, day: date) -> DayResolution | None:
        for override in ordered_overrides(config.overrides, config.class_id):
            if not override.dates.contains(day):
                continue
            valid = Weekday.of(day) in override.school_days
            reason = None
            if not valid:
                reason = (
                    f"{override.title}: school days are {_describe(override.school_days)}"
                )
            return DayResolution(
                valid=valid,
                decided_by=self.name,
                reason=reason,
                school_days=override.school_days,
            )
        return None


class ClassScheduleLayer:
    name = "class_schedule"

    def resolve(self, config: ScheduleConfig, day: date) -> DayResolution | None:
        if not config.class_days:
            return None
        valid = Weekday.of(day) in config.class_days
        return DayResolution(
            valid=valid,
            decided_by=self.name,
            reason=None if valid else f"Class meets on {_describe(config.class_days)}",
            school_days=config.class_days,
        )


class SessionDefaultLayer:
    name = "session_default"

    def resolve(self, config: ScheduleConfig, day: date) -> DayResolution | None:
        session = session_for(config.sessions, day)
        if session is None or not session.school_days:
            return None
        valid = Weekday.of(day) in session.school_days
        return DayResolution(
            valid=valid,
            decided_by=self.name,
            reason=None if valid else f"School days are {_describe(session.school_days)}",
            school_days=session.school_days,
        )


def ordered_overrides(
    overrides: Iterable[OverrideRule],
    class_id: str,
) -> list[OverrideRule]:
    """Overrides applicable to the class, most specific first.

    Class-scoped overrides precede institution-wide ones; within a scope,
    earlier start dates come first.
    """
    applicable = [o for o in overrides if o.class_id is None or o.class_id == class_id]
    return sorted(
        applicable,
        key=lambda o: (o.class_id is None, o.dates.start, o.id),
    )


def session_for(sessions: Sequence[SessionRule], day: date) -> SessionRule | None:
    """The session containing the date, else the latest-starting session."""
    for session in sessions:
        if session.dates.contains(day):
            return session
    if not sessions:
        return None
    return max(sessions, key=lambda s: (s.dates.start, s.id))


DEFAULT_LAYERS: tuple[DayRule, ...] = (
    HolidayLayer(),
    ScheduleOverrideLayer(),
    ClassScheduleLayer(),
    SessionDefaultLayer(),
)

UNCONSTRAINED = "unconstrained"


class CalendarResolver:
    """Resolve instructional days by querying layers in order.

    Example:
        >>> resolver = CalendarResolver()
        >>> resolver.resolve(config, date(2025, 4, 1)).valid
        False
    """

    def __init__(self, layers: Sequence[DayRule] | None = None) -> None:
        self.layers = tuple(layers) if layers is not None else DEFAULT_LAYERS

    def resolve(self, config: ScheduleConfig, day: date) -> DayResolution:
        """Decide whether ``day`` is a school day for the configured class."""
        for layer in self.layers:
            resolution = layer.resolve(config, day)
            if resolution is not None:
                return resolution
        return DayResolution(valid=True, decided_by=UNCONSTRAINED)

    def count(self, config: ScheduleConfig, start: date, end: date) -> int:
        """Number of school days in the inclusive range."""
        return sum(1 for day in iter_dates(start, end) if self.resolve(config, day).valid)
