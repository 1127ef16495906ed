"""
Notifications Repository.

Responsibilities:
- Persist in-app notifications for users.

Non-Responsibilities:
- No message composition.
- No commit; callers own the transaction.
"""

from typing import List

from ...database import Notification


def create(session, user_id: int, type: str, title: str, message: str) -> Notification:
    notification = Notification(user_id=user_id, type=type, title=title, message=message)
    session.add(notification)
    session.flush()
    return notification


def notifications_for_user(session, user_id: int, unread_only: bool = False) -> List[Notification]:
    query = session.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()
