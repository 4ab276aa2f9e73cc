"""
Counseling Records - Query Views

Stateless derivations over store snapshots: list search/filtering, dashboard
follow-ups and category counts, per-person statistics, calendar events,
report aggregation and the admin per-counselor breakdown. Input order is preserved unless a sort is stated.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence

from counseltrack.records.models import (
    Student, Contact, ContactType, InteractionReason, Interaction, InteractionType
)

NO_REASON_LABEL = "No reason specified"


class DateRange(str, Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


DATE_RANGE_DAYS = {
    DateRange.TODAY: 0,
    DateRange.WEEK: 7,
    DateRange.MONTH: 30,
}


@dataclass
class FollowUpItem:
    interaction: Interaction
    past_due: bool


@dataclass
class PersonStats:
    total_interactions: int = 0
    total_minutes: int = 0
    has_follow_up: bool = False


@dataclass
class ReportSummary:
    total_interactions: int = 0
    total_time: int = 0
    average_duration: int = 0
    student_count: int = 0
    contact_count: int = 0
    categories: Dict[str, int] = field(default_factory=dict)


@dataclass
class CounselorPerformance:
    counselor_id: str
    total_interactions: int = 0
    student_interactions: int = 0
    contact_interactions: int = 0
    total_time: int = 0
    average_duration: int = 0


@dataclass
class CalendarEvent:
    id: str
    title: str
    start: str
    end: str
    type: InteractionType
    person_name: str
    follow_up_needed: bool


def _matches(term: str, *values: Optional[str]) -> bool:
    return any(value and term in value.lower() for value in values)


def _reason_index(reasons: Sequence[InteractionReason]) -> Dict[str, InteractionReason]:
    return {reason.id: reason for reason in reasons}


def search_students(students: Sequence[Student], term: Optional[str]) -> List[Student]:
    """Case-insensitive substring search over name, grade and notes"""
    if not term:
        return list(students)
    needle = term.lower()
    return [
        student for student in students
        if _matches(needle, student.first_name, student.last_name, student.grade, student.notes)
    ]


def search_contacts(
    contacts: Sequence[Contact],
    term: Optional[str],
    contact_type: Optional[ContactType] = None,
) -> List[Contact]:
    """Case-insensitive substring search plus an optional exact type filter"""
    needle = term.lower() if term else None
    results = []
    for contact in contacts:
        if contact_type is not None and contact.type != contact_type:
            continue
        if needle and not _matches(
            needle,
            contact.first_name, contact.last_name, contact.relation,
            contact.email, contact.phone, contact.notes,
        ):
            continue
        results.append(contact)
    return results


def interaction_categories(
    interaction: Interaction, reason_index: Dict[str, InteractionReason]
) -> List[str]:
    """Distinct categories of an interaction's resolvable reasons, in order"""
    categories: List[str] = []
    for reason_id in interaction.reason_ids:
        reason = reason_index.get(reason_id)
        if reason and reason.category not in categories:
            categories.append(reason.category)
    return categories


def date_range_start(date_range: DateRange, today: date) -> Optional[date]:
    if date_range == DateRange.ALL:
        return None
    return today - timedelta(days=DATE_RANGE_DAYS[date_range])


def filter_interactions(
    interactions: Sequence[Interaction],
    reasons: Sequence[InteractionReason],
    search: Optional[str] = None,
    interaction_type: Optional[InteractionType] = None,
    date_range: DateRange = DateRange.ALL,
    category: Optional[str] = None,
    follow_up_only: bool = False,
    today: Optional[date] = None,
) -> List[Interaction]:
    """Apply the interaction list's combinable filters

    date_range is measured back from `today` (defaults to the current date),
    and an interaction matches a category when any of its reasons does.
    """
    today = today or date.today()
    since = date_range_start(date_range, today)
    needle = search.lower() if search else None
    reason_index = _reason_index(reasons) if category else {}

    results = []
    for interaction in interactions:
        if needle and not _matches(needle, interaction.person_name, interaction.notes):
            continue
        if interaction_type is not None and interaction.type != interaction_type:
            continue
        if since is not None and interaction.date < since:
            continue
        if category and category not in interaction_categories(interaction, reason_index):
            continue
        if follow_up_only and not interaction.follow_up_needed:
            continue
        results.append(interaction)
    return results


def recent_interactions(interactions: Sequence[Interaction], limit: int = 5) -> List[Interaction]:
    """The first `limit` interactions in store order (most recent first)"""
    return list(interactions[:limit])


def is_past_due(interaction: Interaction, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return interaction.follow_up_date is not None and interaction.follow_up_date < today


def upcoming_follow_ups(
    interactions: Sequence[Interaction],
    today: Optional[date] = None,
    limit: int = 5,
) -> List[FollowUpItem]:
    today = today or date.today()
    pending = [
        interaction for interaction in interactions
        if interaction.follow_up_needed and interaction.follow_up_date is not None
    ]
    pending.sort(key=lambda interaction: interaction.follow_up_date)
    return [
        FollowUpItem(interaction=interaction, past_due=is_past_due(interaction, today))
        for interaction in pending[:limit]
    ]


def category_counts(
    interactions: Sequence[Interaction], reasons: Sequence[InteractionReason]
) -> Dict[str, int]:
    """Interactions per reason category

    An interaction adds one to each distinct category among its reasons.
    Orphaned reason ids are ignored.
    """
    reason_index = _reason_index(reasons)
    counts: Dict[str, int] = {}
    for interaction in interactions:
        for category in interaction_categories(interaction, reason_index):
            counts[category] = counts.get(category, 0) + 1
    return counts


def person_interactions(
    interactions: Sequence[Interaction], person_id: str, person_type: InteractionType
) -> List[Interaction]:
    """One person's interaction history, newest date first"""
    history = [
        interaction for interaction in interactions
        if interaction.type == person_type and interaction.person_id == person_id
    ]
    history.sort(key=lambda interaction: interaction.date, reverse=True)
    return history


def person_stats(
    interactions: Sequence[Interaction], person_id: str, person_type: InteractionType
) -> PersonStats:
    stats = PersonStats()
    for interaction in interactions:
        if interaction.type != person_type or interaction.person_id != person_id:
            continue
        stats.total_interactions += 1
        stats.total_minutes += interaction.duration
        stats.has_follow_up = stats.has_follow_up or interaction.follow_up_needed
    return stats


def describe_reasons(
    reason_ids: Sequence[str], reasons: Sequence[InteractionReason]
) -> List[str]:
    """Display labels for reason ids, skipping ones that no longer exist"""
    reason_index = _reason_index(reasons)
    labels = [reason_index[reason_id].label for reason_id in reason_ids if reason_id in reason_index]
    return labels or [NO_REASON_LABEL]


def interactions_in_range(
    interactions: Sequence[Interaction],
    start_date: date,
    end_date: date,
    person_id: Optional[str] = None,
    interaction_type: Optional[InteractionType] = None,
    counselor_id: Optional[str] = None,
) -> List[Interaction]:
    """Interactions dated within [start_date, end_date], both inclusive"""
    return [
        interaction for interaction in interactions
        if start_date <= interaction.date <= end_date
        and (person_id is None or interaction.person_id == person_id)
        and (interaction_type is None or interaction.type == interaction_type)
        and (counselor_id is None or interaction.counselor_id == counselor_id)
    ]


def report_summary(
    interactions: Sequence[Interaction],
    reasons: Sequence[InteractionReason],
    start_date: date,
    end_date: date,
    person_id: Optional[str] = None,
    interaction_type: Optional[InteractionType] = None,
    counselor_id: Optional[str] = None,
) -> ReportSummary:
    selected = interactions_in_range(
        interactions, start_date, end_date,
        person_id=person_id, interaction_type=interaction_type, counselor_id=counselor_id,
    )
    total = len(selected)
    total_time = sum(interaction.duration for interaction in selected)
    students = {i.person_id for i in selected if i.type == InteractionType.STUDENT}
    contacts = {i.person_id for i in selected if i.type == InteractionType.CONTACT}
    return ReportSummary(
        total_interactions=total,
        total_time=total_time,
        average_duration=round(total_time / total) if total else 0,
        student_count=len(students),
        contact_count=len(contacts),
        categories=category_counts(selected, reasons),
    )


def time_distribution(interactions: Sequence[Interaction]) -> Dict[date, int]:
    """Minutes per day, with every day between the first and last date present"""
    minutes: Dict[date, int] = {}
    if not interactions:
        return minutes
    dates = sorted({interaction.date for interaction in interactions})
    day = dates[0]
    while day <= dates[-1]:
        minutes[day] = 0
        day += timedelta(days=1)
    for interaction in interactions:
        minutes[interaction.date] += interaction.duration
    return minutes


def calendar_events(interactions: Sequence[Interaction]) -> List[CalendarEvent]:
    return [
        CalendarEvent(
            id=interaction.id,
            title=f"{interaction.person_name} - {interaction.type.value}",
            start=f"{interaction.date.isoformat()}T{interaction.start_time}",
            end=f"{interaction.date.isoformat()}T{interaction.end_time}",
            type=interaction.type,
            person_name=interaction.person_name,
            follow_up_needed=interaction.follow_up_needed,
        )
        for interaction in interactions
    ]


def counselor_performance(
    interactions: Sequence[Interaction], counselor_ids: Sequence[str]
) -> List[CounselorPerformance]:
    """One row per counselor, in the given order, with zeros for the idle ones"""
    rows = {counselor_id: CounselorPerformance(counselor_id=counselor_id) for counselor_id in counselor_ids}
    for interaction in interactions:
        row = rows.get(interaction.counselor_id or "")
        if row is None:
            continue
        row.total_interactions += 1
        row.total_time += interaction.duration
        if interaction.type == InteractionType.STUDENT:
            row.student_interactions += 1
        else:
            row.contact_interactions += 1
    for row in rows.values():
        row.average_duration = round(row.total_time / row.total_interactions) if row.total_interactions else 0
    return list(rows.values())
