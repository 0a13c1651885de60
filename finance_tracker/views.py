# finance_tracker/views.py
# Server-rendered pages. They share the query layer with the JSON API and
# identify the user through the session cookie set at login.

import os
import uuid
from datetime import date

from fastapi import APIRouter, Request, Depends, Form
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from starlette.responses import RedirectResponse

from . import crud
from .database import get_db
from .errors import NotFoundError
from .models import User
from .schemas import TransactionIn

templates = Jinja2Templates(directory=os.path.join(os.path.dirname(__file__), "templates"))

router = APIRouter()

PAGE_SIZE = 20


def first_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(part) for part in err["loc"])
    return f"{field}: {err['msg']}"


def _parse_date(value):
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _parse_uuid(value):
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


# Dependency to get logged-in user
def get_session_user(request: Request, db: Session = Depends(get_db)):
    user_id = _parse_uuid(request.session.get("user_id"))
    if not user_id:
        return None
    if not db.query(User.id).filter(User.id == user_id).first():
        request.session.clear()
        return None
    return user_id


@router.get("/")
def home():
    return RedirectResponse("/dashboard")


@router.get("/dashboard")
def dashboard(
    request: Request,
    user_id: uuid.UUID = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    if not user_id:
        return RedirectResponse("/login")

    summary = crud.get_summary(db, user_id)
    recent = crud.get_filtered_transactions(db, user_id, limit=5)

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"summary": summary, "transactions": recent["transactions"]},
    )


@router.get("/categories")
def view_categories(request: Request, db: Session = Depends(get_db)):
    categories = crud.get_categories(db)
    return templates.TemplateResponse(request, "categories.html", {"categories": categories})


def _render_transactions(request, db, user_id, params, errors=None, form=None, status_code=200):
    page = params.get("page", "1")
    page = int(page) if page.isdigit() and int(page) > 0 else 1
    txn_type = params.get("type") if params.get("type") in ("income", "expense") else None
    category_id = _parse_uuid(params.get("categoryId"))
    start_date = _parse_date(params.get("startDate"))
    end_date = _parse_date(params.get("endDate"))

    result = crud.get_filtered_transactions(
        db,
        user_id,
        page=page,
        limit=PAGE_SIZE,
        type=txn_type,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
    )
    return templates.TemplateResponse(
        request,
        "transactions.html",
        {
            "result": result,
            "categories": crud.get_categories(db),
            "filters": {
                "type": txn_type or "",
                "categoryId": str(category_id) if category_id else "",
                "startDate": start_date.isoformat() if start_date else "",
                "endDate": end_date.isoformat() if end_date else "",
            },
            "errors": errors or [],
            "form": form or {},
        },
        status_code=status_code,
    )


@router.get("/transactions")
def view_transactions(
    request: Request,
    user_id: uuid.UUID = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    if not user_id:
        return RedirectResponse("/login")
    return _render_transactions(request, db, user_id, request.query_params)


@router.post("/transactions")
def add_transaction(
    request: Request,
    description: str = Form(""),
    amount: str = Form(""),
    type: str = Form("expense"),
    date: str = Form(""),
    category_id: str = Form(""),
    receipt_url: str = Form(""),
    user_id: uuid.UUID = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    if not user_id:
        return RedirectResponse("/login", status_code=302)

    form = {
        "description": description,
        "amount": amount,
        "type": type,
        "date": date,
        "category_id": category_id,
        "receipt_url": receipt_url,
    }
    try:
        data = TransactionIn(
            description=description,
            amount=amount,
            type=type,
            date=date,
            category_id=category_id,
            receipt_url=receipt_url or None,
        )
        crud.add_transaction(db, user_id, data)
    except PydanticValidationError as exc:
        errors = [
            "{}: {}".format(".".join(str(p) for p in e["loc"]), e["msg"]) for e in exc.errors()
        ]
        return _render_transactions(request, db, user_id, {}, errors, form, status_code=400)
    except NotFoundError as exc:
        return _render_transactions(request, db, user_id, {}, [exc.message], form, status_code=404)

    return RedirectResponse("/transactions", status_code=302)


@router.post("/transactions/{txn_id}/delete")
def delete_transaction(
    request: Request,
    txn_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    if not user_id:
        return RedirectResponse("/login", status_code=302)

    try:
        crud.delete_transaction(db, txn_id, user_id)
    except NotFoundError as exc:
        return _render_transactions(request, db, user_id, {}, [exc.message], status_code=404)
    return RedirectResponse("/transactions", status_code=302)
