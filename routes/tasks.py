from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

import services
from dependencies import get_current_user, get_db
from errors import NotFoundError
from models import User
from schemas import TaskCreate, TaskFilter, TaskResponse, TaskUpdate

router = APIRouter()


# Listings are always scoped to the caller; a user_id query parameter is ignored.
@router.get("/tasks", response_model=List[TaskResponse])
def read_tasks(
    status: Optional[str] = None,
    search: Optional[str] = None,
    due_before: Optional[date] = None,
    due_after: Optional[date] = None,
    category_id: Optional[int] = None,
    priority_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task_filter = TaskFilter(
        status=status,
        user_id=current_user.id,
        search=search,
        due_before=due_before,
        due_after=due_after,
        category_id=category_id,
        priority_id=priority_id,
    )
    return services.list_tasks(db, task_filter)

@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(task: TaskCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return services.create_task(db, task, owner_id=current_user.id)

@router.get("/tasks/{id}", response_model=TaskResponse)
def read_task(id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return services.get_task(db, id, owner_id=current_user.id)

@router.put("/tasks/{id}", response_model=TaskResponse)
def update_task(id: int, task: TaskUpdate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return services.update_task(db, id, task, owner_id=current_user.id)

@router.delete("/tasks/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if not services.delete_task(db, id, owner_id=current_user.id):
        raise NotFoundError("Task not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.patch("/tasks/{id}/complete", response_model=TaskResponse)
def complete_task(id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return services.mark_completed(db, id, owner_id=current_user.id)

@router.patch("/tasks/{id}/incomplete", response_model=TaskResponse)
def reopen_task(id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return services.mark_incomplete(db, id, owner_id=current_user.id)
