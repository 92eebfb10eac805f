from typing import Any, Optional

from models.notification import Notification, create_notification
from services.websocket_manager import ConnectionManager


async def notify_user(
    manager: ConnectionManager,
    user_id: str,
    type: str,
    title: str,
    message: str,
    action_url: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> Notification:
    """Persist a notification, then push it to any open sockets of the user.

    The stored notification is the source of truth; the push is best effort.
    """
    notification = await create_notification(user_id, type, title, message, action_url, metadata)
    await manager.send_to_user(
        user_id,
        {"type": "notification", "notification": notification.model_dump(mode="json")},
    )
    return notification


async def notify_mentor_assigned(
    manager: ConnectionManager,
    candidate_id: str,
    mentor_id: str,
    assignment_id: str,
    loop_number: int,
) -> None:
    metadata = {"assignment_id": assignment_id, "loop_number": loop_number}
    await notify_user(
        manager,
        candidate_id,
        "mentor_assigned",
        "Mentor Assigned",
        f"You have been matched with a mentor for loop {loop_number}.",
        action_url="/dashboard/candidate",
        metadata=metadata,
    )
    await notify_user(
        manager,
        mentor_id,
        "mentee_assigned",
        "New Mentee",
        "A new candidate has been assigned to you.",
        action_url="/dashboard/mentor",
        metadata=metadata,
    )


async def notify_assignment_closed(
    manager: ConnectionManager,
    candidate_id: str,
    assignment_id: str,
    status: str,
) -> None:
    await notify_user(
        manager,
        candidate_id,
        f"assignment_{status}",
        "Mentorship Update",
        f"Your mentor assignment is now {status}.",
        action_url="/dashboard/candidate",
        metadata={"assignment_id": assignment_id},
    )
