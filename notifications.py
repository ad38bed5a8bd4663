# backend/notifications.py
"""
E-mail notifications sent through Resend.

Only the password-reset flow sends mail today; the task reminder helpers are
available for a scheduler but nothing calls them on a timer.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

import resend

from config import get_settings

logger = logging.getLogger(__name__)

SUBJECTS = {
    "reminder": "Task Reminder",
    "due_soon": "Task Due Soon",
    "overdue": "Task Overdue",
    "task_update": "Task Update",
    "password_reset": "Password Reset Request",
}


@dataclass
class Notification:
    user_id: int
    type: str
    message: str
    email: Optional[str] = None
    task_id: Optional[int] = None
    html: Optional[str] = None


def get_subject(kind: str) -> str:
    return SUBJECTS.get(kind, "Task Notification")


class NotificationService:
    def __init__(self, api_key: Optional[str] = None, sender: Optional[str] = None):
        settings = get_settings()
        self.api_key = settings.resend_api_key if api_key is None else api_key
        self.sender = sender or settings.mail_from

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def send_notification(self, notification: Notification) -> bool:
        """Send ``notification`` by e-mail. Returns True when Resend accepted it."""
        if not notification.email:
            logger.debug("Notification for user id=%s has no address, skipping", notification.user_id)
            return False
        if not self.enabled:
            logger.warning("RESEND_API_KEY is not configured; dropping %s notification", notification.type)
            return False

        resend.api_key = self.api_key
        params = {
            "from": self.sender,
            "to": notification.email,
            "subject": get_subject(notification.type),
            "text": notification.message,
        }
        if notification.html:
            params["html"] = notification.html

        try:
            resend.Emails.send(params)
        except Exception as e:
            # Delivery problems must not fail the request that triggered them.
            logger.error("Failed to send %s e-mail to user id=%s: %s", notification.type, notification.user_id, e)
            return False
        return True

    def send_task_reminder(self, user_id: int, email: str, task_title: str, due_date: date) -> bool:
        message = f'Reminder: Your task "{task_title}" is due on {due_date.isoformat()}.'
        return self.send_notification(Notification(user_id, "reminder", message, email))

    def send_due_soon_alert(self, user_id: int, email: str, task_title: str, due_date: date) -> bool:
        message = f'Alert: Your task "{task_title}" is due soon ({due_date.isoformat()}).'
        return self.send_notification(Notification(user_id, "due_soon", message, email))

    def send_overdue_alert(self, user_id: int, email: str, task_title: str, due_date: date) -> bool:
        message = f'Overdue: Your task "{task_title}" was due on {due_date.isoformat()}. Please take action.'
        return self.send_notification(Notification(user_id, "overdue", message, email))

    def send_task_update(self, user_id: int, email: str, message: str) -> bool:
        return self.send_notification(Notification(user_id, "task_update", message, email))

    def send_password_reset(self, user_id: int, email: str, username: str, reset_link: str) -> bool:
        message = (
            f"Hi {username},\n\n"
            f"You requested a password reset. Open the link below to choose a new password:\n"
            f"{reset_link}\n\n"
            f"If you did not request this, please ignore this email."
        )
        html = (
            f"<p>Hi {username},</p>"
            f"<p>You requested a password reset. Click the link below to reset your password:</p>"
            f'<a href="{reset_link}">Reset Password</a>'
            f"<p>If you did not request this, please ignore this email.</p>"
        )
        return self.send_notification(Notification(user_id, "password_reset", message, email, html=html))


def get_notifier() -> NotificationService:
    return NotificationService()
