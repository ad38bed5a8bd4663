# backend/services.py
"""
Authentication and task services.

Routes call these functions; they validate input, apply defaults and translate
store failures into the errors defined in ``errors``.
"""
import logging
import secrets
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import auth
import crud
from config import get_settings
from errors import AuthError, ConflictError, NotFoundError, SchemaValidationError, ValidationError
from models import Task, TaskStatus, User, utcnow
from notifications import NotificationService
from schemas import TaskCreate, TaskFilter, TaskUpdate, TokenIdentity, UserCreate, UserUpdate

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
STATUS_ALL = "all"

_date_adapter = TypeAdapter(date)
_datetime_adapter = TypeAdapter(datetime)


def _schema_error(exc: PydanticValidationError) -> SchemaValidationError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "input"
    return SchemaValidationError(f"Invalid {field}: {first.get('msg')}")

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       Authentication Service
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

def register_user(db: Session, username: str, email: str, password: str) -> User:
    try:
        data = UserCreate(username=username, email=email, password=password)
    except PydanticValidationError as exc:
        raise _schema_error(exc)

    if crud.get_user_by_email(db, data.email):
        raise ConflictError("Email already registered")

    try:
        user = crud.create_user(db, data.username, data.email, auth.get_password_hash(data.password))
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already registered")

    logger.info("Registered user id=%s", user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Dict[str, Any]:
    user = crud.get_user_by_email(db, email)
    # Unknown email and wrong password are indistinguishable to the caller.
    if user is None or not auth.verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)

    token = auth.create_access_token(user.id, user.email)
    return {"user": user, "token": token}


def verify_token(token: str) -> TokenIdentity:
    return auth.decode_access_token(token)


def get_profile(db: Session, user_id: int) -> User:
    user = crud.get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_profile(db: Session, user_id: int, changes: UserUpdate) -> User:
    user = get_profile(db, user_id)
    data = {k: v for k, v in changes.model_dump(exclude_unset=True).items() if v is not None}

    if "email" in data and data["email"] != user.email:
        if crud.get_user_by_email(db, data["email"]):
            raise ConflictError("Email already registered")

    try:
        return crud.update_user(db, user, data)
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already registered")


def delete_user(db: Session, user_id: int) -> bool:
    deleted = crud.delete_user(db, user_id)
    if deleted:
        logger.info("Deleted user id=%s", user_id)
    return deleted


def request_password_reset(db: Session, email: str, notifier: NotificationService) -> None:
    """
    Issue a single-use reset token and e-mail it.

    Returns nothing either way so callers cannot probe which addresses exist.
    """
    user = crud.get_user_by_email(db, email)
    if user is None:
        return

    settings = get_settings()
    token = secrets.token_urlsafe(32)
    expires_at = utcnow() + timedelta(minutes=settings.password_reset_expire_minutes)
    crud.create_reset_token(db, user.id, token, expires_at)

    reset_link = f"{settings.frontend_url}/reset-password?token={token}"
    notifier.send_password_reset(user.id, user.email, user.username, reset_link)


def reset_password(db: Session, token: str, new_password: str) -> None:
    reset_token = crud.get_reset_token(db, token)
    if reset_token is None:
        raise ValidationError("Invalid or expired token")

    if reset_token.expires_at < utcnow():
        db.delete(reset_token)
        db.commit()
        raise ValidationError("Invalid or expired token")

    if len(new_password) < 8:
        raise SchemaValidationError("Password must be at least 8 characters")

    user = reset_token.user
    user.password_hash = auth.get_password_hash(new_password)
    db.add(user)
    db.delete(reset_token)
    db.commit()
    logger.info("Password reset for user id=%s", user.id)

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       Task Service
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

def parse_due_date(value: Any) -> Optional[date]:
    """Accept a calendar date or a datetime; empty values mean "no due date"."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return _date_adapter.validate_python(value)
    except PydanticValidationError:
        pass
    try:
        return _datetime_adapter.validate_python(value).date()
    except PydanticValidationError:
        raise ValidationError("Due date is invalid.")


def _check_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise ValidationError("Title is required.")
    return title


def _check_category(db: Session, category_id: Optional[int], owner_id: int) -> None:
    if category_id is None:
        return
    category = crud.get_category(db, category_id)
    if category is not None and category.user_id != owner_id:
        raise ValidationError("Invalid category.")


def _next_updated_at(previous: Optional[datetime]) -> datetime:
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _persist_failure(db: Session, exc: IntegrityError) -> ValidationError:
    db.rollback()
    logger.warning("Task write rejected by the database: %s", exc.orig)
    return ValidationError("Invalid category or priority reference.")


def create_task(db: Session, task: TaskCreate, owner_id: int) -> Task:
    title = _check_title(task.title)
    due_date = parse_due_date(task.due_date)
    _check_category(db, task.category_id, owner_id)

    data = {
        "title": title,
        "description": task.description,
        "status": (task.status or TaskStatus.initial()).value,
        "due_date": due_date,
        "user_id": owner_id,
        "category_id": task.category_id,
        "priority_id": task.priority_id,
    }
    try:
        db_task = crud.create_task(db, data)
    except IntegrityError as exc:
        raise _persist_failure(db, exc)

    logger.debug("Created task id=%s for user id=%s", db_task.id, owner_id)
    return db_task


def get_task(db: Session, task_id: int, owner_id: int) -> Task:
    db_task = crud.get_task(db, task_id, owner_id)
    if db_task is None:
        raise NotFoundError("Task not found")
    return db_task


def update_task(db: Session, task_id: int, changes: TaskUpdate, owner_id: int) -> Task:
    data = changes.model_dump(exclude_unset=True)

    if "title" in data:
        _check_title(data["title"])
    if "due_date" in data:
        data["due_date"] = parse_due_date(data["due_date"])
    if "status" in data:
        if data["status"] is None:
            raise ValidationError("Status cannot be empty.")
        data["status"] = TaskStatus(data["status"]).value

    db_task = get_task(db, task_id, owner_id)
    if data.get("category_id") is not None:
        _check_category(db, data["category_id"], owner_id)

    data["updated_at"] = _next_updated_at(db_task.updated_at)
    try:
        return crud.update_task(db, db_task, data)
    except IntegrityError as exc:
        raise _persist_failure(db, exc)


def delete_task(db: Session, task_id: int, owner_id: int) -> bool:
    return crud.delete_task(db, task_id, owner_id)


def list_tasks(db: Session, task_filter: TaskFilter) -> List[Task]:
    status = task_filter.status
    if status == STATUS_ALL or status == "":
        status = None
    elif status is not None:
        try:
            status = TaskStatus(status).value
        except ValueError:
            raise ValidationError(f"Invalid status: {task_filter.status}")

    return crud.get_tasks(
        db,
        user_id=task_filter.user_id,
        status=status,
        search=task_filter.search,
        due_before=task_filter.due_before,
        due_after=task_filter.due_after,
        category_id=task_filter.category_id,
        priority_id=task_filter.priority_id,
    )


def _set_status(db: Session, task_id: int, owner_id: int, status: TaskStatus) -> Task:
    return update_task(db, task_id, TaskUpdate(status=status), owner_id)


def mark_completed(db: Session, task_id: int, owner_id: int) -> Task:
    return _set_status(db, task_id, owner_id, TaskStatus.COMPLETED)


def mark_incomplete(db: Session, task_id: int, owner_id: int) -> Task:
    return _set_status(db, task_id, owner_id, TaskStatus.initial())


def list_overdue_tasks(db: Session, owner_id: int, today: Optional[date] = None) -> List[Task]:
    if today is None:
        today = utcnow().date()
    return crud.get_tasks(db, user_id=owner_id, status=TaskStatus.PENDING.value, due_before=today)
