# finance_tracker/schemas.py

import datetime as dt
import re
import uuid
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_serializer, field_validator
from pydantic.alias_generators import to_camel

TransactionType = Literal["income", "expense"]

EMAIL_PATTERN = re.compile(r"^[\w\.\+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")

CENT = Decimal("0.01")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ---------- Categories ----------

class CategorySummary(CamelModel):
    id: uuid.UUID
    name: str
    color: str


class CategoryOut(CategorySummary):
    type: TransactionType


# ---------- Transactions ----------

class TransactionIn(CamelModel):
    description: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
    ]
    amount: Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]
    type: TransactionType
    date: dt.date
    category_id: uuid.UUID
    receipt_url: Optional[Annotated[str, StringConstraints(max_length=500)]] = None

    # Decimal normalizes "1.100" to 1.1 before decimal_places is checked
    @field_validator("amount", mode="before")
    @classmethod
    def check_amount_digits(cls, value):
        if isinstance(value, str):
            _, _, fraction = value.strip().partition(".")
            if len(fraction) > 2:
                raise ValueError("Amount must have at most 2 decimal places")
        return value


class TransactionOut(CamelModel):
    id: uuid.UUID
    description: str
    amount: Decimal
    type: TransactionType
    date: dt.date
    category_id: uuid.UUID
    user_id: uuid.UUID
    receipt_url: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    category: CategorySummary

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal) -> str:
        return format(amount.quantize(CENT), "f")


class TransactionPage(CamelModel):
    transactions: List[TransactionOut]
    total_pages: int
    current_page: int
    total_count: int


class Summary(CamelModel):
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    transaction_count: int

    # totals are summed as Decimal and only rendered as JSON numbers at the edge
    @field_serializer("total_income", "total_expense", "balance")
    def serialize_total(self, value: Decimal) -> float:
        return float(value)


class Message(BaseModel):
    message: str


# ---------- Auth ----------

class RegisterIn(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    email: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, max_length=255)]
    password: Annotated[str, StringConstraints(min_length=6, max_length=72)]

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email format (e.g. name@gmail.com).")
        return value


class LoginIn(BaseModel):
    email: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True)]
    password: str


class UserOut(CamelModel):
    id: uuid.UUID
    name: str
    email: str


class TokenOut(BaseModel):
    token: str
    user: UserOut


class Me(BaseModel):
    user: UserOut
