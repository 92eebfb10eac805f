import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv

from fastapi import Depends, FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from pymongo.errors import PyMongoError

load_dotenv()

from db import connect_db, close_db
from models.profiles import (
    CandidateCreate,
    CandidateProfile,
    CandidateUpdate,
    MentorCreate,
    MentorProfile,
    MentorUpdate,
    create_candidate,
    create_mentor,
    delete_mentor,
    get_candidate,
    get_mentor,
    release_mentor_slot,
    reserve_mentor_slot,
    update_candidate,
    update_mentor,
)
from models.matching import (
    MentorMatch,
    MentorMatchResponse,
    QuickMatchRequest,
    QuickMatchResponse,
    WeightsUsed,
)
from models.assignment import (
    AssignmentCreate,
    AssignmentList,
    AssignmentStatus,
    AssignmentStatusUpdate,
    MentorAssignment,
    get_active_assignment,
    get_assignments_for_candidate,
    get_assignments_for_mentor,
    insert_assignment,
    make_assignment_id,
    next_loop_number,
    set_assignment_status,
)
from models.notification import Notification, NotificationList, get_notifications, mark_read
from services.mentor_matching import (
    Weights,
    check_compatibility,
    quick_recommendations,
    rank_mentors,
)
from services.notifier import notify_assignment_closed, notify_mentor_assigned
from services.profile_store import ProfileStore, get_profile_store
from services.websocket_manager import ConnectionManager

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_db()
    yield
    await close_db()


app = FastAPI(title="The 3rd Academy Mentor Matching API", lifespan=lifespan)
ws_manager = ConnectionManager()

STORE_UNAVAILABLE = "Profile store unavailable"


@app.get("/health")
async def health():
    return {"status": "ok"}


# ── Mentor endpoints ───────────────────────────────────────────────────


@app.post("/mentors", response_model=MentorProfile, status_code=201)
async def add_mentor(body: MentorCreate):
    return await create_mentor(body)


@app.get("/mentors/{profile_id}", response_model=MentorProfile)
async def read_mentor(profile_id: str):
    mentor = await get_mentor(profile_id)
    if mentor is None:
        raise HTTPException(status_code=404, detail="Mentor not found")
    return mentor


@app.put("/mentors/{profile_id}", response_model=MentorProfile)
async def edit_mentor(profile_id: str, body: MentorUpdate):
    mentor = await update_mentor(profile_id, body)
    if mentor is None:
        raise HTTPException(status_code=404, detail="Mentor not found")
    return mentor


@app.delete("/mentors/{profile_id}", status_code=204)
async def remove_mentor(profile_id: str):
    deleted = await delete_mentor(profile_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Mentor not found")


# ── Candidate endpoints ────────────────────────────────────────────────


@app.post("/candidates", response_model=CandidateProfile, status_code=201)
async def add_candidate(body: CandidateCreate):
    return await create_candidate(body)


@app.get("/candidates/{profile_id}", response_model=CandidateProfile)
async def read_candidate(profile_id: str):
    candidate = await get_candidate(profile_id)
    if candidate is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return candidate


@app.put("/candidates/{profile_id}", response_model=CandidateProfile)
async def edit_candidate(profile_id: str, body: CandidateUpdate):
    candidate = await update_candidate(profile_id, body)
    if candidate is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return candidate


# ── Matching endpoints ─────────────────────────────────────────────────


@app.get("/candidates/{candidate_id}/mentor-matches", response_model=MentorMatchResponse)
async def match_mentors(
    candidate_id: str,
    limit: int = Query(10, ge=1, le=100),
    w_skill: float = Query(0.35, ge=0.0),
    w_industry: float = Query(0.20, ge=0.0),
    w_availability: float = Query(0.15, ge=0.0),
    w_experience: float = Query(0.15, ge=0.0),
    w_rating: float = Query(0.15, ge=0.0),
    store: ProfileStore = Depends(get_profile_store),
):
    try:
        weights = Weights(
            skill=w_skill,
            industry=w_industry,
            availability=w_availability,
            experience=w_experience,
            rating=w_rating,
        ).normalized()
    except ValueError:
        raise HTTPException(status_code=400, detail="All weights cannot be zero")

    try:
        candidate, total_mentors, matches = await rank_mentors(store, candidate_id, limit, weights)
    except PyMongoError:
        logger.exception("Mentor matching failed for candidate %s", candidate_id)
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)

    if candidate is None:
        raise HTTPException(status_code=404, detail="Candidate not found")

    return MentorMatchResponse(
        candidate_id=candidate_id,
        total_mentors=total_mentors,
        matches=matches,
        weights_used=WeightsUsed(
            skill=round(weights.skill, 4),
            industry=round(weights.industry, 4),
            availability=round(weights.availability, 4),
            experience=round(weights.experience, 4),
            rating=round(weights.rating, 4),
        ),
    )


@app.post("/mentor-matches/quick", response_model=QuickMatchResponse)
async def quick_match(body: QuickMatchRequest, store: ProfileStore = Depends(get_profile_store)):
    try:
        mentors = await quick_recommendations(store, body.skills, body.limit)
    except PyMongoError:
        logger.exception("Quick mentor recommendations failed")
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)
    return QuickMatchResponse(mentors=mentors)


@app.get("/candidates/{candidate_id}/mentor-matches/{mentor_id}", response_model=MentorMatch)
async def mentor_compatibility(
    candidate_id: str,
    mentor_id: str,
    store: ProfileStore = Depends(get_profile_store),
):
    try:
        match = await check_compatibility(store, candidate_id, mentor_id)
    except PyMongoError:
        logger.exception("Compatibility check failed for %s / %s", candidate_id, mentor_id)
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)
    if match is None:
        raise HTTPException(status_code=404, detail="No match for this candidate and mentor")
    return match


# ── Assignment endpoints ───────────────────────────────────────────────


@app.post("/mentor-assignments", response_model=MentorAssignment, status_code=201)
async def assign_mentor(body: AssignmentCreate):
    candidate = await get_candidate(body.candidate_id)
    if candidate is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    mentor = await get_mentor(body.mentor_id)
    if mentor is None:
        raise HTTPException(status_code=404, detail="Mentor not found")

    existing = await get_active_assignment(body.candidate_id, body.mentor_id)
    if existing:
        return existing

    if await reserve_mentor_slot(body.mentor_id) is None:
        # A concurrent request for the same pair may have taken the last slot
        existing = await get_active_assignment(body.candidate_id, body.mentor_id)
        if existing:
            return existing
        raise HTTPException(status_code=409, detail="Mentor is not accepting new mentees")

    try:
        loop_number = await next_loop_number(body.candidate_id)
        doc = {
            "assignment_id": make_assignment_id(body.candidate_id, body.mentor_id, loop_number),
            "mentor_id": body.mentor_id,
            "candidate_id": body.candidate_id,
            "status": AssignmentStatus.active.value,
            "loop_number": loop_number,
            "assigned_by": body.assigned_by,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "updated_at": None,
        }
        assignment, created = await insert_assignment(doc)
    except PyMongoError:
        logger.exception("Assignment of %s to %s failed", body.candidate_id, body.mentor_id)
        await release_mentor_slot(body.mentor_id)
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE)

    if not created:
        # Lost the race; the winner already holds the slot
        await release_mentor_slot(body.mentor_id)
        return assignment

    await notify_mentor_assigned(
        ws_manager,
        assignment.candidate_id,
        assignment.mentor_id,
        assignment.assignment_id,
        assignment.loop_number,
    )
    return assignment


@app.patch("/mentor-assignments/{assignment_id}", response_model=MentorAssignment)
async def update_assignment(assignment_id: str, body: AssignmentStatusUpdate):
    if body.status == AssignmentStatus.active:
        # Reopening would bypass slot reservation; create a new assignment instead
        raise HTTPException(status_code=400, detail="Assignments cannot be reactivated")

    assignment, previous = await set_assignment_status(assignment_id, body.status)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")

    if previous == AssignmentStatus.active:
        await release_mentor_slot(assignment.mentor_id)
        await notify_assignment_closed(
            ws_manager, assignment.candidate_id, assignment_id, body.status.value
        )
    return assignment


@app.get("/candidates/{candidate_id}/mentor-assignments", response_model=AssignmentList)
async def list_candidate_assignments(candidate_id: str):
    return AssignmentList(assignments=await get_assignments_for_candidate(candidate_id))


@app.get("/mentors/{mentor_id}/mentor-assignments", response_model=AssignmentList)
async def list_mentor_assignments(mentor_id: str):
    return AssignmentList(assignments=await get_assignments_for_mentor(mentor_id))


# ── Notification endpoints ─────────────────────────────────────────────


@app.get("/users/{user_id}/notifications", response_model=NotificationList)
async def list_notifications(
    user_id: str,
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
):
    return await get_notifications(user_id, unread_only, limit)


@app.post("/notifications/{notification_id}/read", response_model=Notification)
async def read_notification(notification_id: str):
    notification = await mark_read(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


# ── WebSocket endpoint ─────────────────────────────────────────────────


@app.websocket("/ws/{user_id}")
async def websocket_endpoint(websocket: WebSocket, user_id: str):
    await ws_manager.connect(user_id, websocket)
    try:
        while True:
            # Keep connection alive; client can send pings
            await websocket.receive_text()
    except WebSocketDisconnect:
        ws_manager.disconnect(user_id, websocket)
