from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel

from db import get_db


class Notification(BaseModel):
    """In-app notification as stored in MongoDB."""
    notification_id: str
    user_id: str
    type: str
    title: str
    message: str
    is_read: bool = False
    action_url: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    created_at: datetime


class NotificationList(BaseModel):
    notifications: list[Notification]
    unread: int


async def create_notification(
    user_id: str,
    type: str,
    title: str,
    message: str,
    action_url: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> Notification:
    db = get_db()
    doc = {
        "notification_id": str(uuid4()),
        "user_id": user_id,
        "type": type,
        "title": title,
        "message": message,
        "is_read": False,
        "action_url": action_url,
        "metadata": metadata,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    await db.notifications.insert_one(doc)
    doc.pop("_id", None)
    return Notification(**doc)


async def get_notifications(user_id: str, unread_only: bool = False, limit: int = 50) -> NotificationList:
    db = get_db()
    query: dict[str, Any] = {"user_id": user_id}
    if unread_only:
        query["is_read"] = False
    cursor = db.notifications.find(query, {"_id": 0}).sort("created_at", -1)
    docs = await cursor.to_list(length=limit)
    unread = await db.notifications.count_documents({"user_id": user_id, "is_read": False})
    return NotificationList(notifications=[Notification(**d) for d in docs], unread=unread)


async def mark_read(notification_id: str) -> Optional[Notification]:
    db = get_db()
    result = await db.notifications.find_one_and_update(
        {"notification_id": notification_id},
        {"$set": {"is_read": True}},
        projection={"_id": 0},
        return_document=True,
    )
    if result is None:
        return None
    return Notification(**result)
