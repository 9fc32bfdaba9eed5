"""
Notification Service - per-user messages with a read flag.

Notifications are written in the caller's session so they commit or roll
back together with the change they announce.
"""

import logging
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import NotFoundError, persistence_error
from app.db.postgres import get_db_session
from app.models.application import StatusField

logger = logging.getLogger(__name__)

NOTIFICATION_COLUMNS = "notification_id, user_id, message, is_read, created_at"

FLAG_MESSAGES = {
    StatusField.applied: "Your application for {job_title} at {company_name} has been received",
    StatusField.shortlisted: "You have been shortlisted for {job_title} at {company_name}",
    StatusField.interview_scheduled: "An interview has been scheduled for {job_title} at {company_name}",
    StatusField.technical_round: "You have moved to the technical round for {job_title} at {company_name}",
    StatusField.offer_made: "You have received an offer for {job_title} at {company_name}",
    StatusField.offer_accepted: "Your acceptance of the {job_title} offer at {company_name} is recorded",
}


def notify(db, user_id: int, message: str) -> int:
    """Insert a notification inside an open session and return its id."""
    result = db.execute(
        text("INSERT INTO notifications (user_id, message, is_read) VALUES (:uid, :message, :read) RETURNING notification_id"),
        {"uid": user_id, "message": message, "read": False}
    )
    return result.fetchone()[0]


def flag_message(field: StatusField, application: dict) -> Optional[str]:
    template = FLAG_MESSAGES.get(field)
    if template is None:
        return None
    return template.format(
        job_title=application.get("job_title") or "the job",
        company_name=application.get("company_name") or "the company",
    )


def list_notifications(user_id: int, unread_only: bool = False) -> List[dict]:
    """Newest first."""
    sql = f"SELECT {NOTIFICATION_COLUMNS} FROM notifications WHERE user_id = :uid"
    params = {"uid": user_id}
    if unread_only:
        sql += " AND is_read = :read"
        params["read"] = False
    sql += " ORDER BY created_at DESC, notification_id DESC"

    try:
        with get_db_session() as db:
            return [dict(r) for r in db.execute(text(sql), params).mappings().fetchall()]
    except SQLAlchemyError as e:
        logger.error("Failed to list notifications for user %s", user_id, exc_info=True)
        raise persistence_error(e)


def mark_read(user_id: int, notification_id: int) -> dict:
    try:
        with get_db_session() as db:
            row = db.execute(
                text(f"""
                    UPDATE notifications SET is_read = :read
                    WHERE notification_id = :nid AND user_id = :uid
                    RETURNING {NOTIFICATION_COLUMNS}
                """),
                {"nid": notification_id, "uid": user_id, "read": True}
            ).mappings().fetchone()
            if not row:
                raise NotFoundError(f"Notification {notification_id} not found")
            notification = dict(row)
    except SQLAlchemyError as e:
        logger.error("Failed to mark notification %s read", notification_id, exc_info=True)
        raise persistence_error(e)
    return notification


def mark_all_read(user_id: int) -> int:
    """Mark every unread notification of the user as read; returns how many changed."""
    try:
        with get_db_session() as db:
            result = db.execute(
                text("UPDATE notifications SET is_read = :read WHERE user_id = :uid AND is_read = :unread"),
                {"uid": user_id, "read": True, "unread": False}
            )
            changed = result.rowcount
    except SQLAlchemyError as e:
        logger.error("Failed to mark notifications read for user %s", user_id, exc_info=True)
        raise persistence_error(e)
    return changed
