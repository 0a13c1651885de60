# finance_tracker/auth.py

import logging
import uuid

from fastapi import APIRouter, Request, Form, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.responses import RedirectResponse
from pydantic import ValidationError as PydanticValidationError

from .database import get_db
from .errors import UnauthorizedError, ValidationError
from .models import User
from .schemas import LoginIn, Me, RegisterIn, TokenOut
from .security import authenticate, create_access_token, get_current_user_id, hash_password
from .views import templates, first_error

logger = logging.getLogger(__name__)

router = APIRouter()


def create_user(db: Session, data: RegisterIn) -> User:
    if db.query(User).filter(User.email == data.email).first():
        raise ValidationError.for_field("email", "Email already registered.")

    new_user = User(name=data.name, email=data.email, password=hash_password(data.password))
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        db.rollback()
        raise ValidationError.for_field("email", "Email already registered.")
    db.refresh(new_user)
    logger.info("Registered user %s", new_user.id)
    return new_user


# ---------- JSON API ----------

@router.post("/api/auth/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def api_register(data: RegisterIn, db: Session = Depends(get_db)):
    user = create_user(db, data)
    return {"token": create_access_token(user.id), "user": user}


@router.post("/api/auth/login", response_model=TokenOut)
def api_login(data: LoginIn, db: Session = Depends(get_db)):
    user = authenticate(db, data.email, data.password)
    if not user:
        raise UnauthorizedError("Invalid email or password.")
    return {"token": create_access_token(user.id), "user": user}


@router.get("/api/auth/me", response_model=Me)
def api_me(user_id: uuid.UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return {"user": db.get(User, user_id)}


# ---------- HTML forms ----------

# Register (Signup)
@router.get("/register")
def register_form(request: Request):
    return templates.TemplateResponse(request, "register.html", {})


@router.post("/register")
def register(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    try:
        data = RegisterIn(name=name, email=email, password=password)
        user = create_user(db, data)
    except PydanticValidationError as exc:
        return templates.TemplateResponse(
            request, "register.html", {"error": first_error(exc)}, status_code=400
        )
    except ValidationError as exc:
        return templates.TemplateResponse(
            request, "register.html", {"error": exc.errors[0]["message"]}, status_code=400
        )

    request.session["user_id"] = str(user.id)
    request.session["name"] = user.name
    return RedirectResponse("/dashboard", status_code=302)


@router.get("/login")
def login_form(request: Request):
    return templates.TemplateResponse(request, "login.html", {})


@router.post("/login")
def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    user = authenticate(db, email.strip().lower(), password)
    if not user:
        return templates.TemplateResponse(
            request, "login.html", {"error": "Invalid email or password."}, status_code=401
        )

    request.session["user_id"] = str(user.id)
    request.session["name"] = user.name
    return RedirectResponse("/dashboard", status_code=302)


# Logout
@router.get("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/login", status_code=302)
