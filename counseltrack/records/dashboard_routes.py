"""
Counseling Records - Dashboard, Calendar and Report Routes

PROTECTED ENDPOINTS - JWT authentication required
Admins get the report variant with a Counselor column and counselor filter,
plus the per-counselor performance breakdown.
"""

import logging
from dataclasses import asdict
from datetime import datetime, date, timedelta
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from counseltrack.auth.routes import get_current_user, require_admin
from counseltrack.auth.users import User, counselor_names, get_user_by_id, list_counselors
from counseltrack.core.config import Settings
from counseltrack.db.database import get_store, get_settings
from counseltrack.records.models import InteractionType
from counseltrack.records.queries import (
    recent_interactions, upcoming_follow_ups, category_counts, calendar_events,
    interactions_in_range, report_summary, time_distribution, counselor_performance,
)
from counseltrack.records.reports import build_report_csv, report_filename
from counseltrack.records.schemas import (
    DashboardResponse, FollowUpResponse, CalendarEventResponse, ReportSummaryResponse,
    CounselorPerformanceResponse,
)
from counseltrack.records.store import CounselingStore
from counseltrack.records.utils import format_minutes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


def parse_date_param(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name} format. Use YYYY-MM-DD"
        )


def get_date_range(
    start_date: Optional[date], end_date: Optional[date], default_days: int
) -> Tuple[date, date]:
    """Fill in a missing end with today and a missing start with the default window"""
    today = date.today()
    if not end_date:
        end_date = today
    if not start_date:
        start_date = end_date - timedelta(days=default_days)
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    return start_date, end_date


def report_range(
    start_date: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="End date (YYYY-MM-DD)"),
    settings: Settings = Depends(get_settings),
) -> Tuple[date, date]:
    """Shared start_date/end_date query parameters of the report endpoints"""
    return get_date_range(
        parse_date_param(start_date, "start_date"),
        parse_date_param(end_date, "end_date"),
        settings.REPORT_DEFAULT_DAYS,
    )


def scope_counselor(user: User, counselor_id: Optional[str]) -> Optional[str]:
    """Filtering by counselor is an admin report feature"""
    if counselor_id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Counselor filter is admin only")
    return counselor_id


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Counselor stats, recent interactions, upcoming follow-ups and reason categories"""
    snapshot = store.snapshot()
    follow_ups = upcoming_follow_ups(
        snapshot.interactions, date.today(), limit=settings.FOLLOW_UP_DISPLAY_COUNT
    )
    return DashboardResponse(
        stats=snapshot.stats,
        total_time_display=format_minutes(snapshot.stats.total_time_spent),
        recent_interactions=recent_interactions(
            snapshot.interactions, limit=settings.RECENT_INTERACTIONS_COUNT
        ),
        upcoming_follow_ups=[
            FollowUpResponse(interaction=item.interaction, past_due=item.past_due)
            for item in follow_ups
        ],
        categories=category_counts(snapshot.interactions, snapshot.reasons),
    )


@router.get("/calendar/events", response_model=List[CalendarEventResponse])
def get_calendar_events(
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    return [CalendarEventResponse(**asdict(event)) for event in calendar_events(store.interactions)]


@router.get("/reports/summary", response_model=ReportSummaryResponse)
def get_report_summary(
    date_range: Tuple[date, date] = Depends(report_range),
    person_id: Optional[str] = Query(None, description="Limit to one student or contact"),
    type: Optional[InteractionType] = Query(None, description="Student or Contact"),
    counselor_id: Optional[str] = Query(None, description="Filter by counselor (admin only)"),
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    start, end = date_range
    snapshot = store.snapshot()
    summary = report_summary(
        snapshot.interactions, snapshot.reasons, start, end,
        person_id=person_id, interaction_type=type,
        counselor_id=scope_counselor(user, counselor_id),
    )
    return ReportSummaryResponse(
        start_date=start,
        end_date=end,
        total_time_display=format_minutes(summary.total_time),
        **asdict(summary),
    )


@router.get("/reports/time-distribution", response_model=Dict[str, int])
def get_time_distribution(
    date_range: Tuple[date, date] = Depends(report_range),
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    """Minutes spent per day across the range"""
    start, end = date_range
    selected = interactions_in_range(store.interactions, start, end)
    return {day.isoformat(): minutes for day, minutes in time_distribution(selected).items()}


@router.get("/reports/counselors", response_model=List[CounselorPerformanceResponse])
def get_counselor_performance(
    date_range: Tuple[date, date] = Depends(report_range),
    admin: User = Depends(require_admin),
    store: CounselingStore = Depends(get_store),
):
    """Interactions, time and average duration per counselor (admin only)"""
    start, end = date_range
    counselors = list_counselors()
    rows = counselor_performance(
        interactions_in_range(store.interactions, start, end),
        [counselor.id for counselor in counselors],
    )
    return [
        CounselorPerformanceResponse(
            counselor_name=counselor.full_name,
            total_time_display=format_minutes(row.total_time),
            **asdict(row),
        )
        for counselor, row in zip(counselors, rows)
    ]


@router.get("/reports/export")
def export_report(
    date_range: Tuple[date, date] = Depends(report_range),
    person_id: Optional[str] = Query(None, description="Limit to one student or contact"),
    type: Optional[InteractionType] = Query(None, description="Student or Contact"),
    counselor_id: Optional[str] = Query(None, description="Filter by counselor (admin only)"),
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    """
    Download the filtered interactions as CSV

    Admins get the Counselor column and a filename naming the selected
    counselor (or "All Counselors").
    """
    start, end = date_range
    counselor_id = scope_counselor(user, counselor_id)
    snapshot = store.snapshot()
    selected = interactions_in_range(
        snapshot.interactions, start, end,
        person_id=person_id, interaction_type=type, counselor_id=counselor_id,
    )

    if user.is_admin:
        counselor = get_user_by_id(counselor_id) if counselor_id else None
        counselor_label = counselor.full_name if counselor else "All Counselors"
        content = build_report_csv(selected, snapshot.reasons, counselor_names())
        filename = report_filename(start, end, counselor_label)
    else:
        content = build_report_csv(selected, snapshot.reasons)
        filename = report_filename(start, end)

    logger.info("Report %s exported by %s (%d rows)", filename, user.email, len(selected))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
