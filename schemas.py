"""
Database Schemas for SummerChamp

Each Pydantic model corresponds to a MongoDB collection document or a request/response
body. Documents are open-ended, so the collection models allow extra fields; the named
fields are validated before anything is written via the database helpers.
"""
from __future__ import annotations
from enum import Enum
from typing import Annotated, Optional, Dict, Any
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.networks import validate_email


class Role(str, Enum):
    none = "none"
    admin = "admin"
    instructor = "instructor"


class ClassStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    denied = "denied"


def role_of(user: Optional[Dict[str, Any]]) -> Role:
    """Role of a stored user document; a missing user or unknown value counts as none."""
    if not user:
        return Role.none
    try:
        return Role(user.get("role") or Role.none)
    except ValueError:
        return Role.none


def _checked_email(value: str) -> str:
    validate_email(value)
    return value


# Emails are lookup keys: validated, but stored exactly as sent.
Email = Annotated[str, AfterValidator(_checked_email)]


class Document(BaseModel):
    model_config = ConfigDict(extra="allow")


# Users
class User(Document):
    email: Optional[Email] = None
    name: Optional[str] = None
    photo: Optional[str] = None
    role: Optional[Role] = None


# Classes
class ClassItem(Document):
    name: str = Field(..., description="Class title")
    image: Optional[str] = None
    instructorName: Optional[str] = None
    instructorEmail: Email
    availableSeats: int = Field(0, ge=0)
    price: float = Field(0, ge=0)
    status: ClassStatus = ClassStatus.pending
    feedback: Optional[str] = None


class ClassUpdate(Document):
    name: Optional[str] = None
    image: Optional[str] = None
    instructorName: Optional[str] = None
    instructorEmail: Optional[Email] = None
    availableSeats: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    status: Optional[ClassStatus] = None
    feedback: Optional[str] = None


# Bookings and payments
class SelectedClass(Document):
    user: Email
    name: Optional[str] = None
    image: Optional[str] = None
    instructorName: Optional[str] = None
    availableSeats: Optional[int] = None
    price: Optional[float] = None


class Payment(Document):
    user: Email
    classId: str
    amount: float = Field(..., ge=0)
    transactionId: Optional[str] = None
    date: Optional[str] = None


# Request / response bodies
class TokenRequest(Document):
    email: Email


class TokenResponse(BaseModel):
    token: str


class PaymentIntentRequest(BaseModel):
    price: float = Field(..., gt=0)


class PaymentIntentResponse(BaseModel):
    clientSecret: str


class AdminCheck(BaseModel):
    admin: bool


class InstructorCheck(BaseModel):
    instructor: bool
