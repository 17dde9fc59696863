"""Recurring session generation.

A template session carries a recurrence pattern; materialization turns it
into concrete, dated, non-recurring sessions that attendees check into.

Pattern format (case-insensitive):
    DAILY                      every day
    WEEKLY / WEEKLY:SUNDAY     every week on the template's weekday / on Sunday
    MONTHLY / MONTHLY:15       every month on the template's day / on the 15th
    MONTHLY:LAST               last day of every month
    CUSTOM:SUNDAY,WEDNESDAY    every Sunday and Wednesday

Materialization is idempotent: a date that already has an instance with the
same organization and name is skipped, so overlapping runs never duplicate.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import FrozenSet, List, Optional

from sqlalchemy.exc import IntegrityError

from attendance.core.clock import Clock, SystemClock
from attendance.core.constants import DEFAULT_DAYS_AHEAD
from attendance.core.exceptions import InvalidRecurrencePattern, SessionNotFound
from attendance.core.logging_config import get_logger
from attendance.db.models import AttendanceSession
from attendance.repositories import SessionRepository
from attendance.schemas.recurrence import MaterializationReport

logger = get_logger(__name__)

DAILY = "DAILY"
WEEKLY = "WEEKLY"
MONTHLY = "MONTHLY"
CUSTOM = "CUSTOM"

# Indexed like date.weekday()
WEEKDAYS = {
    name: index
    for index, name in enumerate(
        ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")
    )
}


@dataclass(frozen=True)
class RecurrenceRule:
    kind: str
    weekdays: FrozenSet[int] = frozenset()  # date.weekday() values, Monday == 0
    day_of_month: Optional[int] = None
    last_day: bool = False


def _parse_weekday(pattern: str, name: str) -> int:
    try:
        return WEEKDAYS[name.strip()]
    except KeyError:
        raise InvalidRecurrencePattern(pattern, f"unknown day name {name.strip()!r}")


def parse_recurrence_pattern(pattern: Optional[str]) -> RecurrenceRule:
    """
    Parse a recurrence pattern string.

    Raises:
        InvalidRecurrencePattern: if the pattern does not follow the grammar
    """
    if not pattern or not pattern.strip():
        raise InvalidRecurrencePattern(pattern, "pattern is empty")

    kind, _, argument = pattern.strip().upper().partition(":")
    kind = kind.strip()
    argument = argument.strip()

    if kind == DAILY:
        if argument:
            raise InvalidRecurrencePattern(pattern, "DAILY takes no argument")
        return RecurrenceRule(DAILY)

    if kind == WEEKLY:
        if not argument:
            return RecurrenceRule(WEEKLY)
        return RecurrenceRule(WEEKLY, weekdays=frozenset([_parse_weekday(pattern, argument)]))

    if kind == MONTHLY:
        if not argument:
            return RecurrenceRule(MONTHLY)
        if argument == "LAST":
            return RecurrenceRule(MONTHLY, last_day=True)
        if not argument.isdigit() or not 1 <= int(argument) <= 31:
            raise InvalidRecurrencePattern(pattern, "day of month must be 1-31 or LAST")
        return RecurrenceRule(MONTHLY, day_of_month=int(argument))

    if kind == CUSTOM:
        names = [name for name in argument.split(",") if name.strip()]
        if not names:
            raise InvalidRecurrencePattern(pattern, "CUSTOM needs at least one day name")
        return RecurrenceRule(CUSTOM, weekdays=frozenset(_parse_weekday(pattern, name) for name in names))

    raise InvalidRecurrencePattern(pattern, f"unknown recurrence type {kind!r}")


def _month_starts(window_start: date, window_end: date):
    month = window_start.replace(day=1)
    while month <= window_end:
        yield month
        if month.month == 12:
            month = month.replace(year=month.year + 1, month=1)
        else:
            month = month.replace(month=month.month + 1)


def occurrence_dates(rule: RecurrenceRule, window_start: date, window_end: date, anchor: date) -> List[date]:
    """
    Expand a rule into the dates it produces within [window_start, window_end].

    Args:
        rule: Parsed recurrence rule
        window_start: First date to consider (inclusive)
        window_end: Last date to consider (inclusive)
        anchor: The template's own date; supplies the weekday or day of month
            when the pattern does not name one

    Returns:
        Matching dates in ascending order
    """
    if window_end < window_start:
        return []

    if rule.kind == DAILY:
        return [window_start + timedelta(days=offset) for offset in range((window_end - window_start).days + 1)]

    if rule.kind == WEEKLY:
        weekday = next(iter(rule.weekdays)) if rule.weekdays else anchor.weekday()
        current = window_start + timedelta(days=(weekday - window_start.weekday()) % 7)
        dates = []
        while current <= window_end:
            dates.append(current)
            current += timedelta(weeks=1)
        return dates

    if rule.kind == MONTHLY:
        dates = []
        for month in _month_starts(window_start, window_end):
            days_in_month = calendar.monthrange(month.year, month.month)[1]
            if rule.last_day:
                day = days_in_month
            else:
                day = rule.day_of_month or anchor.day
                if day > days_in_month:
                    # e.g. the 31st in February: no session that month
                    logger.debug("recurrence_day_missing", day=day, month=month.isoformat())
                    continue
            candidate = month.replace(day=day)
            if window_start <= candidate <= window_end:
                dates.append(candidate)
        return dates

    if rule.kind == CUSTOM:
        return [
            day
            for day in occurrence_dates(RecurrenceRule(DAILY), window_start, window_end, anchor)
            if day.weekday() in rule.weekdays
        ]

    raise InvalidRecurrencePattern(rule.kind, "unknown recurrence type")


def _shift_to(day: date, moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None:
        return None
    return datetime.combine(day, moment.time())


def instance_from(template: AttendanceSession, day: date) -> AttendanceSession:
    """
    Build a new, unsaved, non-recurring session for ``day`` from a template.

    Check-in window bounds keep the template's time of day on the new date.
    """
    return AttendanceSession(
        organization_id=template.organization_id,
        fellowship_id=template.fellowship_id,
        session_name=template.session_name,
        session_date=day,
        session_time=template.session_time,
        service_type=template.service_type,
        notes=template.notes,
        is_completed=False,
        check_in_opens_at=_shift_to(day, template.check_in_opens_at),
        check_in_closes_at=_shift_to(day, template.check_in_closes_at),
        allow_late_checkin=template.allow_late_checkin,
        late_cutoff_minutes=template.late_cutoff_minutes,
        max_capacity=template.max_capacity,
        geofence_latitude=template.geofence_latitude,
        geofence_longitude=template.geofence_longitude,
        geofence_radius_meters=template.geofence_radius_meters,
        recurrence_pattern=None,
        recurrence_end_date=None,
        template_id=template.id,
    )


class RecurrenceMaterializer:
    """Expands recurring templates into dated session instances."""

    def __init__(
        self,
        sessions: SessionRepository,
        clock: Optional[Clock] = None,
        days_ahead: int = DEFAULT_DAYS_AHEAD,
    ):
        self.sessions = sessions
        self.clock = clock or SystemClock()
        self.days_ahead = days_ahead

    def materialize(self, template: AttendanceSession, window_start: date, window_end: date) -> int:
        """
        Create the instances a template is missing within a date window.

        Returns:
            Number of sessions created

        Raises:
            ValueError: if the session is not a template
            InvalidRecurrencePattern: if the template's pattern cannot be parsed
        """
        if not template.is_template:
            raise ValueError(f"Session is not a recurring template: {template.id}")

        rule = parse_recurrence_pattern(template.recurrence_pattern)

        if template.recurrence_end_date is not None and template.recurrence_end_date < window_end:
            window_end = template.recurrence_end_date

        created = 0
        for day in occurrence_dates(rule, window_start, window_end, template.session_date):
            if self.sessions.exists_instance_on_date(template.organization_id, day, template.session_name):
                continue

            try:
                self.sessions.save(instance_from(template, day))
            except IntegrityError:
                # A concurrent run created this instance between our check and insert
                logger.info("recurring_instance_exists", template_id=template.id, session_date=day.isoformat())
                continue

            created += 1
            logger.debug("recurring_instance_created", template_id=template.id, session_date=day.isoformat())

        return created

    def run_daily(self) -> MaterializationReport:
        """Generate instances from today through ``days_ahead`` for every template."""
        today = self.clock.today()
        window_end = today + timedelta(days=self.days_ahead)
        report = MaterializationReport()

        logger.info("recurring_generation_started", window_start=today.isoformat(), window_end=window_end.isoformat())

        templates = self.sessions.find_templates()
        report.templates = len(templates)

        for template in templates:
            try:
                generated = self.materialize(template, today, window_end)
            except Exception as exc:
                report.failed += 1
                report.failures[template.id] = str(exc)
                logger.error(
                    "recurring_template_failed",
                    template_id=template.id,
                    error=str(exc),
                    exception_type=type(exc).__name__,
                )
                continue

            report.created += generated
            logger.info(
                "recurring_template_processed",
                template_id=template.id,
                session_name=template.session_name,
                generated=generated,
            )

        logger.info(
            "recurring_generation_completed",
            templates=report.templates,
            created=report.created,
            failed=report.failed,
        )
        return report

    def run_now(self, template_id: int, days_ahead: int = DEFAULT_DAYS_AHEAD) -> int:
        """
        Generate instances for one template on demand.

        Raises:
            SessionNotFound: if no session has this id
            ValueError: if the session is not a recurring template or days_ahead is negative
        """
        if days_ahead < 0:
            raise ValueError("days_ahead cannot be negative")

        template = self.sessions.find_by_id(template_id)
        if template is None:
            raise SessionNotFound(template_id)

        today = self.clock.today()
        generated = self.materialize(template, today, today + timedelta(days=days_ahead))
        logger.info("recurring_manual_generation", template_id=template_id, days_ahead=days_ahead, generated=generated)
        return generated
