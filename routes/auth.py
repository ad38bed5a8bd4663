# backend/routes/auth.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

import models
import schemas
import services
from dependencies import get_db, get_current_user
from notifications import NotificationService, get_notifier

router = APIRouter()

RESET_REQUESTED = "If your email is registered, a password reset link has been sent."


@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, db: Session = Depends(get_db)):
    return services.register_user(db, user.username, user.email, user.password)


@router.post("/login", response_model=schemas.LoginResponse)
def login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    result = services.authenticate_user(db, credentials.email, credentials.password)
    return {"token": result["token"], "token_type": "bearer", "user": result["user"]}


@router.post("/logout", response_model=schemas.Message)
def logout(current_user: models.User = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy.
    return {"message": "Logout successful"}


@router.get("/session", response_model=schemas.SessionResponse)
def read_session(current_user: models.User = Depends(get_current_user)):
    return {"user": current_user}


@router.get("/profile", response_model=schemas.UserResponse)
def read_profile(current_user: models.User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=schemas.UserResponse)
def update_profile(
    changes: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return services.update_profile(db, current_user.id, changes)


@router.delete("/delete", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    services.delete_user(db, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/forgot-password", response_model=schemas.Message)
def forgot_password(
    request_body: schemas.ForgotPassword,
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
):
    services.request_password_reset(db, request_body.email, notifier)
    # Same answer whether or not the address is registered.
    return {"message": RESET_REQUESTED}


@router.post("/reset-password", status_code=status.HTTP_204_NO_CONTENT)
def reset_password(request_body: schemas.ResetPassword, db: Session = Depends(get_db)):
    services.reset_password(db, request_body.token, request_body.new_password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
