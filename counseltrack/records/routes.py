"""
Counseling Records - CRUD API Routes

PROTECTED ENDPOINTS - JWT authentication required
Students, contacts, interaction reasons and interactions. Reason taxonomy
changes are admin only.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from counseltrack.auth.routes import get_current_user, require_admin
from counseltrack.auth.users import User
from counseltrack.db.database import get_store
from counseltrack.records.models import (
    Student, Contact, ContactType, InteractionReason, Interaction, InteractionType,
)
from counseltrack.records.queries import (
    DateRange, search_students, search_contacts, filter_interactions,
    person_interactions, person_stats, describe_reasons, is_past_due,
)
from counseltrack.records.schemas import (
    StudentRequest, ContactRequest, ReasonRequest, InteractionRequest,
    PersonStatsResponse, StudentDetailResponse, ContactDetailResponse,
    InteractionDetailResponse, MessageResponse,
)
from counseltrack.records.store import CounselingStore, RecordNotFound, InvalidTimeRange

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


def not_found(exc: RecordNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{exc.kind} not found")


def invalid_time_range(exc: InvalidTimeRange) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


# =============================================================================
# Students
# =============================================================================

@router.get("/students", response_model=List[Student])
def list_students(
    search: Optional[str] = Query(None, description="Search name, grade or notes"),
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    return search_students(store.students, search)


@router.post("/students", response_model=Student, status_code=status.HTTP_201_CREATED)
def create_student(
    request: StudentRequest,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    student = store.add_student(request)
    logger.info("Student %s added by %s", student.id, user.email)
    return student


@router.get("/students/{student_id}", response_model=StudentDetailResponse)
def get_student(
    student_id: str,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    """Student record with interaction totals and history"""
    student = store.get_student(student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    interactions = store.interactions
    return StudentDetailResponse(
        student=student,
        stats=PersonStatsResponse(**asdict(person_stats(interactions, student_id, InteractionType.STUDENT))),
        interactions=person_interactions(interactions, student_id, InteractionType.STUDENT),
    )


@router.put("/students/{student_id}", response_model=Student)
def update_student(
    student_id: str,
    request: StudentRequest,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    """Replace a student; a name change is copied onto their interactions"""
    student = Student(**request.model_dump(), id=student_id)
    try:
        store.update_student(student)
    except RecordNotFound as exc:
        raise not_found(exc)
    return student


@router.delete("/students/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: str,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    """Delete a student. Logged interactions are kept."""
    try:
        store.delete_student(student_id)
    except RecordNotFound as exc:
        raise not_found(exc)
    logger.info("Student %s deleted by %s", student_id, user.email)
    return {"message": "Student deleted. Existing interactions were kept."}


# =============================================================================
# Contacts
# =============================================================================

@router.get("/contacts", response_model=List[Contact])
def list_contacts(
    search: Optional[str] = Query(None, description="Search name, relation, email, phone or notes"),
    type: Optional[ContactType] = Query(None, description="Parent, DCFS, Teacher, Administrator or Other"),
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    return search_contacts(store.contacts, search, type)


@router.post("/contacts", response_model=Contact, status_code=status.HTTP_201_CREATED)
def create_contact(
    request: ContactRequest,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    contact = store.add_contact(request)
    logger.info("Contact %s added by %s", contact.id, user.email)
    return contact


@router.get("/contacts/{contact_id}", response_model=ContactDetailResponse)
def get_contact(
    contact_id: str,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    contact = store.get_contact(contact_id)
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")
    interactions = store.interactions
    return ContactDetailResponse(
        contact=contact,
        stats=PersonStatsResponse(**asdict(person_stats(interactions, contact_id, InteractionType.CONTACT))),
        interactions=person_interactions(interactions, contact_id, InteractionType.CONTACT),
    )


@router.put("/contacts/{contact_id}", response_model=Contact)
def update_contact(
    contact_id: str,
    request: ContactRequest,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    contact = Contact(**request.model_dump(), id=contact_id)
    try:
        store.update_contact(contact)
    except RecordNotFound as exc:
        raise not_found(exc)
    return contact


@router.delete("/contacts/{contact_id}", response_model=MessageResponse)
def delete_contact(
    contact_id: str,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    try:
        store.delete_contact(contact_id)
    except RecordNotFound as exc:
        raise not_found(exc)
    logger.info("Contact %s deleted by %s", contact_id, user.email)
    return {"message": "Contact deleted. Existing interactions were kept."}


# =============================================================================
# Interaction reasons
# =============================================================================

@router.get("/reasons", response_model=List[InteractionReason])
def list_reasons(
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    return store.reasons


@router.post("/reasons", response_model=InteractionReason, status_code=status.HTTP_201_CREATED)
def create_reason(
    request: ReasonRequest,
    admin: User = Depends(require_admin),
    store: CounselingStore = Depends(get_store),
):
    return store.add_reason(request)


@router.put("/reasons/{reason_id}", response_model=InteractionReason)
def update_reason(
    reason_id: str,
    request: ReasonRequest,
    admin: User = Depends(require_admin),
    store: CounselingStore = Depends(get_store),
):
    reason = InteractionReason(**request.model_dump(), id=reason_id)
    try:
        store.update_reason(reason)
    except RecordNotFound as exc:
        raise not_found(exc)
    return reason


@router.delete("/reasons/{reason_id}", response_model=MessageResponse)
def delete_reason(
    reason_id: str,
    admin: User = Depends(require_admin),
    store: CounselingStore = Depends(get_store),
):
    """Remove a reason from the taxonomy. Historical interactions keep the id."""
    try:
        store.delete_reason(reason_id)
    except RecordNotFound as exc:
        raise not_found(exc)
    return {"message": "Reason deleted"}


# =============================================================================
# Interactions
# =============================================================================

def resolve_person_name(store: CounselingStore, request: InteractionRequest) -> str:
    person_name = store.get_person_name(request.type, request.person_id)
    if not person_name:
        raise HTTPException(status_code=400, detail="Invalid person selected")
    return person_name


@router.get("/interactions", response_model=List[Interaction])
def list_interactions(
    search: Optional[str] = Query(None, description="Search person name or notes"),
    type: Optional[InteractionType] = Query(None, description="Student or Contact"),
    date_range: DateRange = Query(DateRange.ALL, description="all, today, week or month"),
    category: Optional[str] = Query(None, description="Reason category"),
    follow_up: bool = Query(False, description="Only interactions needing follow-up"),
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    snapshot = store.snapshot()
    return filter_interactions(
        snapshot.interactions,
        snapshot.reasons,
        search=search,
        interaction_type=type,
        date_range=date_range,
        category=category,
        follow_up_only=follow_up,
    )


@router.post("/interactions", response_model=Interaction, status_code=status.HTTP_201_CREATED)
def create_interaction(
    request: InteractionRequest,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    """Log an interaction; duration is computed from the start and end times"""
    person_name = resolve_person_name(store, request)
    try:
        interaction = store.add_interaction(request.to_fields(person_name, user.id))
    except InvalidTimeRange as exc:
        raise invalid_time_range(exc)
    logger.info("Interaction %s logged by %s", interaction.id, user.email)
    return interaction


@router.get("/interactions/{interaction_id}", response_model=InteractionDetailResponse)
def get_interaction(
    interaction_id: str,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    interaction = store.get_interaction(interaction_id)
    if not interaction:
        raise HTTPException(status_code=404, detail="Interaction not found")
    return InteractionDetailResponse(
        interaction=interaction,
        reasons=describe_reasons(interaction.reason_ids, store.reasons),
        past_due=interaction.follow_up_needed and is_past_due(interaction, date.today()),
    )


@router.put("/interactions/{interaction_id}", response_model=Interaction)
def update_interaction(
    interaction_id: str,
    request: InteractionRequest,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    existing = store.get_interaction(interaction_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Interaction not found")
    person_name = resolve_person_name(store, request)
    fields = request.to_fields(person_name, existing.counselor_id)
    try:
        store.update_interaction(Interaction(**fields.model_dump(), id=interaction_id))
    except RecordNotFound as exc:
        raise not_found(exc)
    except InvalidTimeRange as exc:
        raise invalid_time_range(exc)
    return store.get_interaction(interaction_id)


@router.delete("/interactions/{interaction_id}", response_model=MessageResponse)
def delete_interaction(
    interaction_id: str,
    user: User = Depends(get_current_user),
    store: CounselingStore = Depends(get_store),
):
    try:
        store.delete_interaction(interaction_id)
    except RecordNotFound as exc:
        raise not_found(exc)
    logger.info("Interaction %s deleted by %s", interaction_id, user.email)
    return {"message": "Interaction deleted"}
