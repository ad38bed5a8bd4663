# backend/dependencies.py
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

import crud
import services
from database import get_db
from errors import AuthError
from models import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthError("Authorization header missing or malformed")

    identity = services.verify_token(credentials.credentials)

    user = crud.get_user(db, identity.id)
    if user is None:
        logger.warning("Token for unknown user id=%s", identity.id)
        raise AuthError("Could not validate credentials")
    return user
