import logging
import math
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from .errors import NotFoundError
from .models import Category, Transaction

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


def _date_filter(query, start_date: Optional[date], end_date: Optional[date]):
    # a half-open range (only one bound) is ignored, not treated as an error
    if start_date and end_date:
        query = query.filter(Transaction.date.between(start_date, end_date))
    return query


def _user_transactions(db: Session, user_id: uuid.UUID):
    return db.query(Transaction).filter(Transaction.user_id == user_id)


def get_categories(db: Session):
    return db.query(Category).order_by(Category.type.asc(), Category.name.asc()).all()


def get_category_by_id(db: Session, category_id: uuid.UUID):
    return db.query(Category).filter(Category.id == category_id).first()


def _require_category(db: Session, category_id: uuid.UUID):
    category = get_category_by_id(db, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def get_transaction_by_id(db: Session, txn_id: uuid.UUID, user_id: uuid.UUID):
    return (
        _user_transactions(db, user_id)
        .options(joinedload(Transaction.category))
        .filter(Transaction.id == txn_id)
        .first()
    )


def get_filtered_transactions(
    db: Session,
    user_id: uuid.UUID,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    type: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    """Return one page of the user's transactions, newest first.

    The user filter is always applied; the remaining criteria narrow it
    further. The result mirrors the list endpoint payload: ``transactions``,
    ``total_count``, ``total_pages`` and ``current_page``.
    """
    query = _user_transactions(db, user_id)

    if type:
        query = query.filter(Transaction.type == type)
    if category_id:
        query = query.filter(Transaction.category_id == category_id)
    query = _date_filter(query, start_date, end_date)

    total_count = query.count()
    transactions = (
        query.options(joinedload(Transaction.category))
        .order_by(Transaction.date.desc(), Transaction.created_at.desc(), Transaction.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "transactions": transactions,
        "total_count": total_count,
        "total_pages": math.ceil(total_count / limit),
        "current_page": page,
    }


def add_transaction(db: Session, user_id: uuid.UUID, data):
    _require_category(db, data.category_id)

    txn = Transaction(
        user_id=user_id,
        category_id=data.category_id,
        description=data.description,
        amount=data.amount,
        type=data.type,
        date=data.date,
        receipt_url=data.receipt_url,
    )
    db.add(txn)
    db.commit()
    logger.info("Created transaction %s for user %s", txn.id, user_id)
    return get_transaction_by_id(db, txn.id, user_id)


def update_transaction(db: Session, txn_id: uuid.UUID, user_id: uuid.UUID, data):
    _require_category(db, data.category_id)

    # ownership check and mutation are one statement
    updated = (
        _user_transactions(db, user_id)
        .filter(Transaction.id == txn_id)
        .update(
            {
                Transaction.description: data.description,
                Transaction.amount: data.amount,
                Transaction.type: data.type,
                Transaction.date: data.date,
                Transaction.category_id: data.category_id,
                Transaction.receipt_url: data.receipt_url,
            },
            synchronize_session=False,
        )
    )
    if not updated:
        db.rollback()
        raise NotFoundError("Transaction not found")

    db.commit()
    db.expire_all()
    return get_transaction_by_id(db, txn_id, user_id)


def delete_transaction(db: Session, txn_id: uuid.UUID, user_id: uuid.UUID):
    deleted = (
        _user_transactions(db, user_id)
        .filter(Transaction.id == txn_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.rollback()
        raise NotFoundError("Transaction not found")

    db.commit()
    logger.info("Deleted transaction %s for user %s", txn_id, user_id)


def get_summary(
    db: Session,
    user_id: uuid.UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    transactions = _date_filter(_user_transactions(db, user_id), start_date, end_date).all()

    total_income = sum(
        (Decimal(t.amount) for t in transactions if t.type == "income"), Decimal("0")
    )
    total_expense = sum(
        (Decimal(t.amount) for t in transactions if t.type == "expense"), Decimal("0")
    )

    return {
        "total_income": total_income,
        "total_expense": total_expense,
        "balance": total_income - total_expense,
        "transaction_count": len(transactions),
    }
