# backend/schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from models import TaskStatus

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       Task Schemas
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

# Title and due_date stay loosely typed on input; the task service owns those
# checks so that API and direct callers get the same messages.
class TaskCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[str] = None
    category_id: Optional[int] = None
    priority_id: Optional[int] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[str] = None
    category_id: Optional[int] = None
    priority_id: Optional[int] = None


class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    due_date: Optional[date] = None
    user_id: int
    category_id: Optional[int] = None
    priority_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True # Enable ORM mode


class TaskFilter(BaseModel):
    """Optional predicates narrowing a task listing."""

    status: Optional[str] = None
    user_id: Optional[int] = None
    search: Optional[str] = None
    due_before: Optional[date] = None
    due_after: Optional[date] = None
    category_id: Optional[int] = None
    priority_id: Optional[int] = None

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       User Schemas
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=100, pattern=EMAIL_PATTERN)

class UserCreate(UserBase):
    password: str = Field(..., min_length=8)

class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True # Enable ORM mode

class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, max_length=100, pattern=EMAIL_PATTERN)

class LoginRequest(BaseModel):
    email: str
    password: str

class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse

class SessionResponse(BaseModel):
    user: UserResponse

class ForgotPassword(BaseModel):
    email: str

class ResetPassword(BaseModel):
    token: str
    new_password: str = Field(..., min_length=8)

class Message(BaseModel):
    message: str

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       Token Schemas
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

class TokenIdentity(BaseModel):
    id: int
    email: str

#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-
#       Reference Data Schemas
#-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-*-

class PriorityResponse(BaseModel):
    id: int
    name: str
    level: int

    class Config:
        from_attributes = True

class CategoryResponse(BaseModel):
    id: int
    name: str
    user_id: int

    class Config:
        from_attributes = True

class HealthResponse(BaseModel):
    status: str
    uptime: float
