# backend/crud.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import Category, PasswordResetToken, Priority, Task, User

DEFAULT_CATEGORY_NAME = "Uncategorized"

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       Credential Store
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()

def create_user(db: Session, username: str, email: str, password_hash: str) -> User:
    """Insert the user and its default category in one transaction."""
    db_user = User(username=username, email=email, password_hash=password_hash)
    db.add(db_user)
    db.flush()
    db.add(Category(name=DEFAULT_CATEGORY_NAME, user_id=db_user.id))
    db.commit()
    db.refresh(db_user)
    return db_user

def update_user(db: Session, db_user: User, data: Dict[str, Any]) -> User:
    for field, value in data.items():
        setattr(db_user, field, value)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def update_password_hash(db: Session, db_user: User, password_hash: str) -> None:
    db_user.password_hash = password_hash
    db.add(db_user)
    db.commit()

def delete_user(db: Session, user_id: int) -> bool:
    db_user = get_user(db, user_id)
    if db_user is None:
        return False
    db.delete(db_user)
    db.commit()
    return True

def create_reset_token(db: Session, user_id: int, token: str, expires_at: datetime) -> PasswordResetToken:
    reset_token = PasswordResetToken(user_id=user_id, token=token, expires_at=expires_at)
    db.add(reset_token)
    db.commit()
    return reset_token

def get_reset_token(db: Session, token: str) -> Optional[PasswordResetToken]:
    return db.query(PasswordResetToken).filter(PasswordResetToken.token == token).first()

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       Task Store
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

def _escape_like(term: str) -> str:
    # LIKE wildcards in user input match literally.
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def get_tasks(
    db: Session,
    user_id: Optional[int] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    due_before=None,
    due_after=None,
    category_id: Optional[int] = None,
    priority_id: Optional[int] = None,
) -> List[Task]:
    query = db.query(Task)
    if user_id is not None:
        query = query.filter(Task.user_id == user_id)
    if status is not None:
        query = query.filter(Task.status == status)
    if due_before is not None:
        query = query.filter(Task.due_date < due_before)
    if due_after is not None:
        query = query.filter(Task.due_date > due_after)
    if category_id is not None:
        query = query.filter(Task.category_id == category_id)
    if priority_id is not None:
        query = query.filter(Task.priority_id == priority_id)
    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.filter(or_(
            Task.title.ilike(pattern, escape="\\"),
            Task.description.ilike(pattern, escape="\\"),
        ))

    # Due date ascending with undated tasks last, newest first among ties.
    return query.order_by(
        Task.due_date.is_(None),
        Task.due_date.asc(),
        Task.created_at.desc(),
        Task.id.desc(),
    ).all()

def get_task(db: Session, task_id: int, user_id: Optional[int] = None) -> Optional[Task]:
    query = db.query(Task).filter(Task.id == task_id)
    if user_id is not None:
        query = query.filter(Task.user_id == user_id)
    return query.first()

def create_task(db: Session, data: Dict[str, Any]) -> Task:
    db_task = Task(**data)
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    return db_task

def update_task(db: Session, db_task: Task, data: Dict[str, Any]) -> Task:
    for field, value in data.items():
        setattr(db_task, field, value)
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    return db_task

def delete_task(db: Session, task_id: int, user_id: Optional[int] = None) -> bool:
    db_task = get_task(db, task_id, user_id)
    if db_task is None:
        return False
    db.delete(db_task)
    db.commit()
    return True

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       Categories & Priorities
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

def get_categories(db: Session, user_id: int) -> List[Category]:
    return db.query(Category).filter(Category.user_id == user_id).order_by(Category.id.asc()).all()

def get_category(db: Session, category_id: int) -> Optional[Category]:
    return db.query(Category).filter(Category.id == category_id).first()

def get_priorities(db: Session) -> List[Priority]:
    return db.query(Priority).order_by(Priority.level.asc()).all()
