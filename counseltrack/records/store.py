"""
Counseling Records - In-Memory Domain Store

Single source of truth for students, contacts, interaction reasons and
interactions. All mutation goes through CounselingStore; readers get copies.

Store contract:
- Interaction.duration is always recomputed from start/end time on write.
- New interactions are prepended (most recent first).
- CounselorStats is recomputed before any interaction mutation returns.
- Renaming a student or contact rewrites person_name on that person's
  interactions.
- Deleting a student, contact or reason never touches interactions; the
  dangling ids are resolved to None by the lookups.
- Updating or deleting an unknown id raises RecordNotFound.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, TypeVar

from counseltrack.records.models import (
    Student, StudentFields,
    Contact, ContactFields,
    InteractionReason, ReasonFields,
    Interaction, InteractionFields, InteractionType,
    CounselorStats,
)
from counseltrack.records.utils import calculate_interaction_duration

logger = logging.getLogger(__name__)

T = TypeVar("T", Student, Contact, InteractionReason, Interaction)


class CounselingError(Exception):
    """Base class for store errors"""


class RecordNotFound(CounselingError):
    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class InvalidTimeRange(CounselingError):
    def __init__(self, start_time: str, end_time: str):
        self.start_time = start_time
        self.end_time = end_time
        super().__init__("End time must be after start time")


@dataclass(frozen=True)
class StoreSnapshot:
    students: List[Student]
    contacts: List[Contact]
    reasons: List[InteractionReason]
    interactions: List[Interaction]
    stats: CounselorStats


def generate_id() -> str:
    return uuid.uuid4().hex


def compute_stats(interactions: Iterable[Interaction]) -> CounselorStats:
    stats = CounselorStats()
    for interaction in interactions:
        stats.total_interactions += 1
        stats.total_time_spent += interaction.duration
        if interaction.type == InteractionType.STUDENT:
            stats.student_interactions += 1
        elif interaction.type == InteractionType.CONTACT:
            stats.contact_interactions += 1
        if interaction.follow_up_needed:
            stats.follow_ups_needed += 1
    return stats


def _copies(records: Iterable[T]) -> List[T]:
    return [record.model_copy(deep=True) for record in records]


class CounselingStore:
    calculate_interaction_duration = staticmethod(calculate_interaction_duration)

    def __init__(
        self,
        students: Optional[Iterable[Student]] = None,
        contacts: Optional[Iterable[Contact]] = None,
        reasons: Optional[Iterable[InteractionReason]] = None,
        interactions: Optional[Iterable[Interaction]] = None,
        id_factory: Callable[[], str] = generate_id,
    ):
        self._lock = threading.RLock()
        self._id_factory = id_factory
        self._students: List[Student] = _copies(students or [])
        self._contacts: List[Contact] = _copies(contacts or [])
        self._reasons: List[InteractionReason] = _copies(reasons or [])
        self._interactions: List[Interaction] = _copies(interactions or [])
        self._stats = compute_stats(self._interactions)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def students(self) -> List[Student]:
        with self._lock:
            return _copies(self._students)

    @property
    def contacts(self) -> List[Contact]:
        with self._lock:
            return _copies(self._contacts)

    @property
    def reasons(self) -> List[InteractionReason]:
        with self._lock:
            return _copies(self._reasons)

    @property
    def interactions(self) -> List[Interaction]:
        with self._lock:
            return _copies(self._interactions)

    @property
    def stats(self) -> CounselorStats:
        with self._lock:
            return self._stats.model_copy()

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                students=_copies(self._students),
                contacts=_copies(self._contacts),
                reasons=_copies(self._reasons),
                interactions=_copies(self._interactions),
                stats=self._stats.model_copy(),
            )

    # ------------------------------------------------------------------
    # Lookups (absence is a normal outcome)
    # ------------------------------------------------------------------

    def get_student(self, student_id: str) -> Optional[Student]:
        with self._lock:
            return _find_copy(self._students, student_id)

    def get_contact(self, contact_id: str) -> Optional[Contact]:
        with self._lock:
            return _find_copy(self._contacts, contact_id)

    def get_reason_by_id(self, reason_id: str) -> Optional[InteractionReason]:
        with self._lock:
            return _find_copy(self._reasons, reason_id)

    def get_interaction(self, interaction_id: str) -> Optional[Interaction]:
        with self._lock:
            return _find_copy(self._interactions, interaction_id)

    def get_person_name(self, person_type: InteractionType, person_id: str) -> Optional[str]:
        """Current full name of the student or contact an interaction points at"""
        if person_type == InteractionType.STUDENT:
            person = self.get_student(person_id)
        else:
            person = self.get_contact(person_id)
        return person.full_name if person else None

    # ------------------------------------------------------------------
    # Students
    # ------------------------------------------------------------------

    def add_student(self, data: StudentFields) -> Student:
        student = Student(**_fields(data, StudentFields), id=self._id_factory())
        with self._lock:
            self._students.append(student)
        logger.debug("Added student %s", student.id)
        return student.model_copy()

    def update_student(self, student: Student) -> None:
        updated = Student(**_fields(student, StudentFields), id=student.id)
        with self._lock:
            index = _index_of(self._students, updated.id, "Student")
            previous = self._students[index]
            self._students[index] = updated
            if previous.full_name != updated.full_name:
                self._rename_person(InteractionType.STUDENT, updated.id, updated.full_name)
        logger.debug("Updated student %s", updated.id)

    def delete_student(self, student_id: str) -> None:
        with self._lock:
            index = _index_of(self._students, student_id, "Student")
            del self._students[index]
        logger.debug("Deleted student %s", student_id)

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def add_contact(self, data: ContactFields) -> Contact:
        contact = Contact(**_fields(data, ContactFields), id=self._id_factory())
        with self._lock:
            self._contacts.append(contact)
        logger.debug("Added contact %s", contact.id)
        return contact.model_copy()

    def update_contact(self, contact: Contact) -> None:
        updated = Contact(**_fields(contact, ContactFields), id=contact.id)
        with self._lock:
            index = _index_of(self._contacts, updated.id, "Contact")
            previous = self._contacts[index]
            self._contacts[index] = updated
            if previous.full_name != updated.full_name:
                self._rename_person(InteractionType.CONTACT, updated.id, updated.full_name)
        logger.debug("Updated contact %s", updated.id)

    def delete_contact(self, contact_id: str) -> None:
        with self._lock:
            index = _index_of(self._contacts, contact_id, "Contact")
            del self._contacts[index]
        logger.debug("Deleted contact %s", contact_id)

    def _rename_person(self, person_type: InteractionType, person_id: str, name: str) -> None:
        renamed = 0
        for index, interaction in enumerate(self._interactions):
            if interaction.type == person_type and interaction.person_id == person_id:
                self._interactions[index] = interaction.model_copy(update={"person_name": name})
                renamed += 1
        if renamed:
            logger.debug("Renamed %s on %d interactions", person_id, renamed)

    # ------------------------------------------------------------------
    # Interaction reasons
    # ------------------------------------------------------------------

    def add_reason(self, data: ReasonFields) -> InteractionReason:
        reason = InteractionReason(**_fields(data, ReasonFields), id=self._id_factory())
        with self._lock:
            self._reasons.append(reason)
        logger.debug("Added reason %s", reason.id)
        return reason.model_copy()

    def update_reason(self, reason: InteractionReason) -> None:
        updated = InteractionReason(**_fields(reason, ReasonFields), id=reason.id)
        with self._lock:
            index = _index_of(self._reasons, updated.id, "InteractionReason")
            self._reasons[index] = updated
        logger.debug("Updated reason %s", updated.id)

    def delete_reason(self, reason_id: str) -> None:
        with self._lock:
            index = _index_of(self._reasons, reason_id, "InteractionReason")
            del self._reasons[index]
        logger.debug("Deleted reason %s", reason_id)

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    def add_interaction(self, data: InteractionFields) -> Interaction:
        values = _fields(data, InteractionFields)
        values["duration"] = _checked_duration(data.start_time, data.end_time)
        interaction = Interaction(**values, id=self._id_factory())
        with self._lock:
            self._interactions.insert(0, interaction)
            self._recompute_stats_locked()
        logger.debug("Added interaction %s (%d min)", interaction.id, interaction.duration)
        return interaction.model_copy(deep=True)

    def update_interaction(self, interaction: Interaction) -> None:
        values = _fields(interaction, InteractionFields)
        values["duration"] = _checked_duration(interaction.start_time, interaction.end_time)
        updated = Interaction(**values, id=interaction.id)
        with self._lock:
            index = _index_of(self._interactions, updated.id, "Interaction")
            self._interactions[index] = updated
            self._recompute_stats_locked()
        logger.debug("Updated interaction %s", updated.id)

    def delete_interaction(self, interaction_id: str) -> None:
        with self._lock:
            index = _index_of(self._interactions, interaction_id, "Interaction")
            del self._interactions[index]
            self._recompute_stats_locked()
        logger.debug("Deleted interaction %s", interaction_id)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def recompute_stats(self) -> CounselorStats:
        with self._lock:
            return self._recompute_stats_locked().model_copy()

    def _recompute_stats_locked(self) -> CounselorStats:
        self._stats = compute_stats(self._interactions)
        return self._stats


def _fields(data, model) -> dict:
    """Copy the declared fields of `model` out of `data`"""
    return data.model_dump(include=set(model.model_fields))


def _checked_duration(start_time: str, end_time: str) -> int:
    duration = calculate_interaction_duration(start_time, end_time)
    if duration < 0:
        raise InvalidTimeRange(start_time, end_time)
    return duration


def _index_of(records: List[T], record_id: str, kind: str) -> int:
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    raise RecordNotFound(kind, record_id)


def _find_copy(records: List[T], record_id: str) -> Optional[T]:
    for record in records:
        if record.id == record_id:
            return record.model_copy(deep=True)
    return None
