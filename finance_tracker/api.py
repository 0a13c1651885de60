# finance_tracker/api.py

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from . import crud
from .database import get_db
from .schemas import (
    CategoryOut,
    Message,
    Summary,
    TransactionIn,
    TransactionOut,
    TransactionPage,
    TransactionType,
)
from .security import get_current_user_id

router = APIRouter(prefix="/api")


@router.get("/health")
def health():
    return {
        "status": "OK",
        "message": "Finance tracker is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return crud.get_categories(db)


@router.get("/transactions/summary", response_model=Summary)
def transactions_summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return crud.get_summary(db, user_id, start_date, end_date)


@router.get("/transactions", response_model=TransactionPage)
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(crud.DEFAULT_PAGE_SIZE, ge=1, le=100),
    type: Optional[TransactionType] = None,
    category_id: Optional[uuid.UUID] = Query(None, alias="categoryId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return crud.get_filtered_transactions(
        db,
        user_id,
        page=page,
        limit=limit,
        type=type,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.post(
    "/transactions", response_model=TransactionOut, status_code=status.HTTP_201_CREATED
)
def create_transaction(
    data: TransactionIn,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return crud.add_transaction(db, user_id, data)


@router.put("/transactions/{txn_id}", response_model=TransactionOut)
def update_transaction(
    txn_id: uuid.UUID,
    data: TransactionIn,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return crud.update_transaction(db, txn_id, user_id, data)


@router.delete("/transactions/{txn_id}", response_model=Message)
def delete_transaction(
    txn_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    crud.delete_transaction(db, txn_id, user_id)
    return {"message": "Transaction deleted"}
