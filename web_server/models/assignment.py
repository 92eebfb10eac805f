from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError

from db import get_db


class AssignmentStatus(str, Enum):
    active = "active"
    completed = "completed"
    transferred = "transferred"


# ── Helpers ─────────────────────────────────────────────────────────────


def make_assignment_id(candidate_id: str, mentor_id: str, loop_number: int) -> str:
    """Deterministic ID so two concurrent requests for the same loop collide."""
    return f"{candidate_id}_{mentor_id}_{loop_number}"


# ── Request / response schemas ──────────────────────────────────────────


class MentorAssignment(BaseModel):
    """Assignment document as stored in MongoDB."""
    assignment_id: str
    mentor_id: str
    candidate_id: str
    status: AssignmentStatus = AssignmentStatus.active
    loop_number: int = 1
    assigned_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class AssignmentCreate(BaseModel):
    """Body of POST /mentor-assignments."""
    candidate_id: str
    mentor_id: str
    assigned_by: Optional[str] = None


class AssignmentStatusUpdate(BaseModel):
    """Body of PATCH /mentor-assignments/{assignment_id}."""
    status: AssignmentStatus


class AssignmentList(BaseModel):
    assignments: list[MentorAssignment]


# ── CRUD ────────────────────────────────────────────────────────────────


async def get_active_assignment(candidate_id: str, mentor_id: str) -> Optional[MentorAssignment]:
    """The current active pairing between a candidate and a mentor, if any."""
    db = get_db()
    doc = await db.mentor_assignments.find_one(
        {
            "candidate_id": candidate_id,
            "mentor_id": mentor_id,
            "status": AssignmentStatus.active.value,
        },
        {"_id": 0},
    )
    if doc is None:
        return None
    return MentorAssignment(**doc)


async def next_loop_number(candidate_id: str) -> int:
    """Loops are numbered per candidate across every mentor they had."""
    db = get_db()
    count = await db.mentor_assignments.count_documents({"candidate_id": candidate_id})
    return count + 1


async def get_assignments_for_candidate(candidate_id: str) -> list[MentorAssignment]:
    db = get_db()
    cursor = db.mentor_assignments.find({"candidate_id": candidate_id}, {"_id": 0}).sort("created_at", -1)
    docs = await cursor.to_list(length=200)
    return [MentorAssignment(**doc) for doc in docs]


async def get_assignments_for_mentor(mentor_id: str) -> list[MentorAssignment]:
    db = get_db()
    cursor = db.mentor_assignments.find({"mentor_id": mentor_id}, {"_id": 0}).sort("created_at", -1)
    docs = await cursor.to_list(length=200)
    return [MentorAssignment(**doc) for doc in docs]


async def insert_assignment(doc: dict) -> tuple[MentorAssignment, bool]:
    """Insert an assignment, returning (assignment, created).

    When another request already created the same assignment the stored one
    is returned with created=False.
    """
    db = get_db()
    try:
        await db.mentor_assignments.insert_one(doc)
        doc.pop("_id", None)
        return MentorAssignment(**doc), True
    except DuplicateKeyError:
        existing = await db.mentor_assignments.find_one(
            {"assignment_id": doc["assignment_id"]}, {"_id": 0}
        )
        return MentorAssignment(**existing), False


async def set_assignment_status(
    assignment_id: str,
    status: AssignmentStatus,
) -> tuple[Optional[MentorAssignment], Optional[AssignmentStatus]]:
    """Change an assignment's status. Returns (updated, previous_status)."""
    db = get_db()
    now = datetime.now(timezone.utc).isoformat()
    before = await db.mentor_assignments.find_one_and_update(
        {"assignment_id": assignment_id},
        {"$set": {"status": status.value, "updated_at": now}},
        projection={"_id": 0},
        return_document=False,
    )
    if before is None:
        return None, None
    previous = AssignmentStatus(before["status"])
    before.update(status=status.value, updated_at=now)
    return MentorAssignment(**before), previous
