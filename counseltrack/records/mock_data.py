"""
Counseling Records - Mock Data Source

Seeds a store with sample students, contacts, the default reason taxonomy and
a month of randomly generated interactions. Everything goes through the
store's own operations so stats and ids follow the normal rules.
"""

import logging
import random
from datetime import date, timedelta
from typing import List, Optional, Sequence

from counseltrack.records.models import (
    StudentFields, ContactFields, ContactType, ReasonFields,
    InteractionFields, InteractionType, InteractionReason,
)
from counseltrack.records.store import CounselingStore
from counseltrack.records.utils import calculate_end_time

logger = logging.getLogger(__name__)


STUDENTS = [
    StudentFields(first_name="Emma", last_name="Johnson", grade="9",
                  notes="Interested in art programs and college counseling."),
    StudentFields(first_name="Noah", last_name="Williams", grade="10",
                  notes="Struggling with math. Considering tutoring options."),
    StudentFields(first_name="Olivia", last_name="Smith", grade="11",
                  notes="Excellent academic performance. Looking into scholarship opportunities."),
    StudentFields(first_name="Liam", last_name="Brown", grade="12",
                  notes="College applications in progress. Needs support with essays."),
    StudentFields(first_name="Sophia", last_name="Davis", grade="9",
                  notes="Recently transferred. Adjusting well to new environment."),
]

CONTACTS = [
    ContactFields(type=ContactType.PARENT, first_name="Robert", last_name="Johnson",
                  relation="Father of Emma Johnson", phone="555-123-4567",
                  email="robert.johnson@example.com", notes="Prefers to be contacted via email."),
    ContactFields(type=ContactType.TEACHER, first_name="Patricia", last_name="Miller",
                  relation="Math Teacher", phone="555-987-6543",
                  email="patricia.miller@example.com", notes="Available for meetings after 3 PM."),
    ContactFields(type=ContactType.DCFS, first_name="Michael", last_name="Clark",
                  relation="Case Worker", phone="555-789-0123",
                  email="michael.clark@dcfs.example.com", notes="Handling case for Brown family."),
]

REASONS = [
    ("Academic", "Course Selection"),
    ("Academic", "Grade Concerns"),
    ("Academic", "College Planning"),
    ("Social/Emotional", "Peer Relationships"),
    ("Social/Emotional", "Mental Health"),
    ("Social/Emotional", "Family Issues"),
    ("Behavioral", "Classroom Behavior"),
    ("Behavioral", "Attendance"),
    ("Behavioral", "Conflict Resolution"),
    ("Career", "Career Exploration"),
    ("Career", "Job Applications"),
    ("Administrative", "Scheduling"),
    ("Administrative", "Paperwork"),
    ("Crisis", "Emergency Response"),
    ("Crisis", "Safety Concerns"),
]

STUDENT_DURATIONS = [15, 30, 45, 60]
CONTACT_DURATIONS = [15, 30, 45]


class MockInteractionGenerator:
    """Random interactions over the last 30 days, 8 AM to 4 PM starts"""

    def __init__(
        self,
        reasons: Sequence[InteractionReason],
        rng: random.Random,
        today: date,
        counselor_ids: Sequence[str] = (),
    ):
        self.reasons = list(reasons)
        self.counselor_ids = list(counselor_ids)
        self.rng = rng
        self.today = today

    def random_date(self) -> date:
        return self.today - timedelta(days=self.rng.randrange(30))

    def random_follow_up_date(self, interaction_date: date) -> date:
        # one to three weeks after the meeting
        return interaction_date + timedelta(days=self.rng.randint(7, 21))

    def random_time(self) -> str:
        hours = self.rng.randrange(8) + 8
        minutes = self.rng.randrange(4) * 15
        return f"{hours:02d}:{minutes:02d}"

    def random_reason_ids(self, max_reasons: int) -> List[str]:
        reason_ids: List[str] = []
        for _ in range(self.rng.randint(1, max_reasons)):
            reason = self.rng.choice(self.reasons)
            if reason.id not in reason_ids:
                reason_ids.append(reason.id)
        return reason_ids

    def subcategory_of(self, reason_id: str) -> str:
        for reason in self.reasons:
            if reason.id == reason_id:
                return reason.subcategory
        return "various topics"

    def build(
        self,
        person_type: InteractionType,
        person_id: str,
        first_name: str,
        person_name: str,
        durations: Sequence[int],
        max_reasons: int,
        follow_up_threshold: float,
    ) -> InteractionFields:
        start_time = self.random_time()
        end_time = calculate_end_time(start_time, self.rng.choice(durations))
        reason_ids = self.random_reason_ids(max_reasons)
        topic = self.subcategory_of(reason_ids[0])
        if person_type == InteractionType.STUDENT:
            notes = f"Meeting with {first_name} regarding {topic}."
        else:
            notes = f"Discussion with {first_name} regarding {topic}."
        interaction_date = self.random_date()
        follow_up_needed = self.rng.random() > follow_up_threshold
        follow_up_date = self.random_follow_up_date(interaction_date) if follow_up_needed else None
        counselor_id = self.rng.choice(self.counselor_ids) if self.counselor_ids else None
        return InteractionFields(
            date=interaction_date,
            start_time=start_time,
            end_time=end_time,
            type=person_type,
            person_id=person_id,
            person_name=person_name,
            reason_ids=reason_ids,
            notes=notes,
            follow_up_needed=follow_up_needed,
            follow_up_date=follow_up_date,
            counselor_id=counselor_id,
        )


def seed_store(
    store: CounselingStore,
    seed: Optional[int] = None,
    today: Optional[date] = None,
    counselor_ids: Sequence[str] = (),
) -> CounselingStore:
    """Fill the store with sample records

    Each interaction is attributed to a random entry of counselor_ids, or to
    nobody when none are given.
    """
    rng = random.Random(seed)
    today = today or date.today()

    students = [store.add_student(data) for data in STUDENTS]
    contacts = [store.add_contact(data) for data in CONTACTS]
    reasons = [
        store.add_reason(ReasonFields(category=category, subcategory=subcategory))
        for category, subcategory in REASONS
    ]

    generator = MockInteractionGenerator(reasons, rng, today, counselor_ids)
    pending: List[InteractionFields] = []
    for student in students:
        for _ in range(rng.randint(1, 3)):
            pending.append(generator.build(
                InteractionType.STUDENT, student.id, student.first_name, student.full_name,
                STUDENT_DURATIONS, max_reasons=3, follow_up_threshold=0.7,
            ))
    for contact in contacts:
        if rng.random() > 0.3:
            pending.append(generator.build(
                InteractionType.CONTACT, contact.id, contact.first_name, contact.full_name,
                CONTACT_DURATIONS, max_reasons=2, follow_up_threshold=0.6,
            ))

    # add_interaction prepends, so insert oldest first to end up newest first
    pending.sort(key=lambda data: (data.date, data.start_time))
    for data in pending:
        store.add_interaction(data)

    logger.info(
        "Seeded mock data: %d students, %d contacts, %d reasons, %d interactions",
        len(students), len(contacts), len(reasons), len(pending),
    )
    return store


def build_seeded_store(
    seed: Optional[int] = None,
    today: Optional[date] = None,
    counselor_ids: Sequence[str] = (),
) -> CounselingStore:
    return seed_store(CounselingStore(), seed=seed, today=today, counselor_ids=counselor_ids)
