"""
Counseling Records - Entity Models

Four owned collections (students, contacts, interaction reasons, interactions)
plus the derived counselor statistics. These carry no validation rules; form
validation lives in records.schemas.
"""

from enum import Enum
from typing import List, Optional
import datetime
from pydantic import BaseModel, Field


GRADES = ("K", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12")


class ContactType(str, Enum):
    PARENT = "Parent"
    DCFS = "DCFS"
    TEACHER = "Teacher"
    ADMINISTRATOR = "Administrator"
    OTHER = "Other"


class InteractionType(str, Enum):
    STUDENT = "Student"
    CONTACT = "Contact"


# Students
class StudentFields(BaseModel):
    first_name: str
    last_name: str
    grade: str
    notes: str = ""


class Student(StudentFields):
    id: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# Contacts
class ContactFields(BaseModel):
    type: ContactType
    first_name: str
    last_name: str
    relation: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None


class Contact(ContactFields):
    id: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# Interaction reasons (shared taxonomy)
class ReasonFields(BaseModel):
    category: str
    subcategory: str


class InteractionReason(ReasonFields):
    id: str

    @property
    def label(self) -> str:
        return f"{self.category}: {self.subcategory}"


# Interactions
class InteractionFields(BaseModel):
    date: datetime.date
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    duration: int = 0  # minutes, recomputed by the store on every write
    type: InteractionType
    person_id: str
    person_name: str = ""
    reason_ids: List[str] = Field(default_factory=list)
    notes: str = ""
    follow_up_needed: bool = False
    follow_up_date: Optional[datetime.date] = None
    counselor_id: Optional[str] = None


class Interaction(InteractionFields):
    id: str


class CounselorStats(BaseModel):
    """Derived totals over the full interaction collection"""
    total_interactions: int = 0
    total_time_spent: int = 0
    student_interactions: int = 0
    contact_interactions: int = 0
    follow_ups_needed: int = 0
