from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

import crud
from dependencies import get_current_user, get_db
from models import User
from schemas import CategoryResponse, PriorityResponse

router = APIRouter(
    dependencies=[Depends(get_current_user)],
)

@router.get("/priorities", response_model=List[PriorityResponse])
def read_priorities(db: Session = Depends(get_db)):
    return crud.get_priorities(db)

@router.get("/categories", response_model=List[CategoryResponse])
def read_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return crud.get_categories(db, user_id=current_user.id)
