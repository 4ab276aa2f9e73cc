"""
Counseling Records - Pydantic Schemas

Request validation for the record forms. The store itself does not
re-validate; everything reaching it has passed through these.
"""

import re
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Dict
import datetime

from counseltrack.records.models import (
    GRADES,
    StudentFields, Student,
    ContactFields, ContactType, Contact,
    ReasonFields,
    InteractionFields, InteractionType, Interaction,
    CounselorStats,
)
from counseltrack.records.utils import calculate_interaction_duration

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# Student Schemas
class StudentRequest(StudentFields):
    """Create or replace a student"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    grade: str = Field(..., description="Grade level: K, 1, 2, ..., 12")
    notes: str = ""

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name is required')
        return v.strip()

    @field_validator('grade')
    @classmethod
    def validate_grade(cls, v):
        v = v.strip().upper()
        if v not in GRADES:
            raise ValueError('grade must be one of K, 1, 2, ..., 12')
        return v


# Contact Schemas
class ContactRequest(ContactFields):
    """Create or replace a contact"""
    type: ContactType
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    relation: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    notes: Optional[str] = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name is required')
        return v.strip()

    @field_validator('email', mode='before')
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


# Reason Schemas
class ReasonRequest(ReasonFields):
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: str = Field(..., min_length=1, max_length=100)


# Interaction Schemas
class InteractionRequest(BaseModel):
    """Log or edit an interaction

    duration and person_name are not accepted; the store recomputes the
    former and the route resolves the latter from person_id.
    """
    date: datetime.date
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    type: InteractionType
    person_id: str = Field(..., min_length=1)
    reason_ids: List[str] = Field(default_factory=list)
    notes: str = ""
    follow_up_needed: bool = False
    follow_up_date: Optional[datetime.date] = None

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time(cls, v):
        if not TIME_PATTERN.match(v):
            raise ValueError('time must be in HH:MM format')
        return v

    @field_validator('reason_ids')
    @classmethod
    def validate_reasons(cls, v):
        if not v:
            raise ValueError('At least one reason is required')
        return v

    @model_validator(mode='after')
    def validate_times_and_follow_up(self):
        if calculate_interaction_duration(self.start_time, self.end_time) < 0:
            raise ValueError('End time must be after start time')
        if self.follow_up_needed and self.follow_up_date is None:
            raise ValueError('Follow-up date is required')
        return self

    def to_fields(self, person_name: str, counselor_id: Optional[str]) -> InteractionFields:
        return InteractionFields(
            **self.model_dump(),
            person_name=person_name,
            counselor_id=counselor_id,
        )


# Response Schemas
class PersonStatsResponse(BaseModel):
    total_interactions: int
    total_minutes: int
    has_follow_up: bool


class StudentDetailResponse(BaseModel):
    student: Student
    stats: PersonStatsResponse
    interactions: List[Interaction]


class ContactDetailResponse(BaseModel):
    contact: Contact
    stats: PersonStatsResponse
    interactions: List[Interaction]


class InteractionDetailResponse(BaseModel):
    interaction: Interaction
    reasons: List[str]
    past_due: bool


class FollowUpResponse(BaseModel):
    interaction: Interaction
    past_due: bool


class DashboardResponse(BaseModel):
    """Dashboard summary for the signed-in counselor"""
    stats: CounselorStats
    total_time_display: str
    recent_interactions: List[Interaction]
    upcoming_follow_ups: List[FollowUpResponse]
    categories: Dict[str, int]


class CalendarEventResponse(BaseModel):
    id: str
    title: str
    start: str
    end: str
    type: InteractionType
    person_name: str
    follow_up_needed: bool


class ReportSummaryResponse(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    total_interactions: int
    total_time: int
    total_time_display: str
    average_duration: int
    student_count: int
    contact_count: int
    categories: Dict[str, int]


class MessageResponse(BaseModel):
    message: str



class CounselorPerformanceResponse(BaseModel):
    counselor_id: str
    counselor_name: str
    total_interactions: int
    student_interactions: int
    contact_interactions: int
    total_time: int
    total_time_display: str
    average_duration: int
