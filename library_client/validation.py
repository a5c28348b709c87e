"""Form validation schemas.

Input is checked here, with per-field messages, before any request is made.
"""

from __future__ import annotations

import re
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from library_client.exceptions import FormValidationError
from library_client.policy.constants import BOOK_CATEGORIES, MESSAGE_MIN_LENGTH, PASSWORD_MIN_LENGTH

FormT = TypeVar("FormT", bound=BaseModel)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_VALUE_ERROR_PREFIX = "Value error, "


def _required(value: Any, label: str) -> str:
    text = (value or "").strip() if isinstance(value, str) or value is None else str(value).strip()
    if not text:
        raise ValueError(f"{label} is required")
    return text


def _email(value: Any) -> str:
    text = _required(value, "Email")
    if not EMAIL_PATTERN.match(text):
        raise ValueError("Enter a valid email")
    return text


def _password(value: Any, label: str = "Password") -> str:
    if not value:
        raise ValueError(f"{label} is required")
    if not isinstance(value, str):
        raise ValueError(f"{label} must be text")
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"{label} must be at least {PASSWORD_MIN_LENGTH} characters")
    return value


class _Form(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=False, extra="ignore")


class LoginForm(_Form):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v: Any) -> str:
        return _email(v)

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, v: Any) -> str:
        return _password(v)


class RegisterForm(_Form):
    first_name: str
    last_name: str
    email: str
    password: str
    username: str | None = None

    @field_validator("first_name", mode="before")
    @classmethod
    def _check_first(cls, v: Any) -> str:
        return _required(v, "First name")

    @field_validator("last_name", mode="before")
    @classmethod
    def _check_last(cls, v: Any) -> str:
        return _required(v, "Last name")

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v: Any) -> str:
        return _email(v)

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, v: Any) -> str:
        return _password(v)

    def to_api(self) -> dict[str, Any]:
        payload = {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "password": self.password,
        }
        if self.username:
            payload["username"] = self.username
        return payload


class ContactForm(_Form):
    name: str
    email: str
    subject: str
    message: str

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v: Any) -> str:
        return _required(v, "Name and surname")

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v: Any) -> str:
        return _email(v)

    @field_validator("subject", mode="before")
    @classmethod
    def _check_subject(cls, v: Any) -> str:
        return _required(v, "Subject")

    @field_validator("message", mode="before")
    @classmethod
    def _check_message(cls, v: Any) -> str:
        text = _required(v, "Message")
        if len(text) < MESSAGE_MIN_LENGTH:
            raise ValueError(f"Message must be at least {MESSAGE_MIN_LENGTH} characters long")
        return text


class ChangePasswordForm(_Form):
    current_password: str
    new_password: str
    confirm_password: str

    @field_validator("current_password", mode="before")
    @classmethod
    def _check_current(cls, v: Any) -> str:
        if not v:
            raise ValueError("Current password is required")
        return v

    @field_validator("new_password", mode="before")
    @classmethod
    def _check_new(cls, v: Any) -> str:
        return _password(v, "New password")

    @model_validator(mode="after")
    def _passwords_match(self) -> "ChangePasswordForm":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ResetPasswordForm(_Form):
    token: str
    new_password: str
    confirm_password: str

    @field_validator("token", mode="before")
    @classmethod
    def _check_token(cls, v: Any) -> str:
        return _required(v, "Reset token")

    @field_validator("new_password", mode="before")
    @classmethod
    def _check_new(cls, v: Any) -> str:
        return _password(v, "New password")

    @model_validator(mode="after")
    def _passwords_match(self) -> "ResetPasswordForm":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ReviewForm(_Form):
    review_text: str
    rating: int = 5

    @field_validator("review_text", mode="before")
    @classmethod
    def _check_text(cls, v: Any) -> str:
        text = _required(v, "Review")
        if len(text) < MESSAGE_MIN_LENGTH:
            raise ValueError(f"Review must be at least {MESSAGE_MIN_LENGTH} characters long")
        return text

    @field_validator("rating")
    @classmethod
    def _check_rating(cls, v: int) -> int:
        if not 1 <= v <= 5:
            raise ValueError("Rating must be between 1 and 5")
        return v


class BookForm(_Form):
    title: str
    author: str
    category: str
    description: str | None = None
    image_url: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, v: Any) -> str:
        return _required(v, "Title")

    @field_validator("author", mode="before")
    @classmethod
    def _check_author(cls, v: Any) -> str:
        return _required(v, "Author")

    @field_validator("category", mode="before")
    @classmethod
    def _check_category(cls, v: Any) -> str:
        text = _required(v, "Category")
        for category in BOOK_CATEGORIES:
            if category.lower() == text.lower():
                return category
        raise ValueError(f"Unknown category: {text}")

    def to_api(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "category": self.category,
            "description": self.description,
            "imageUrl": self.image_url,
        }


class BanForm(_Form):
    days: int

    @field_validator("days")
    @classmethod
    def _check_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Please enter a valid number of days")
        return v


class AdminMessageForm(_Form):
    subject: str
    message: str

    @field_validator("subject", mode="before")
    @classmethod
    def _check_subject(cls, v: Any) -> str:
        return _required(v, "Subject")

    @field_validator("message", mode="before")
    @classmethod
    def _check_message(cls, v: Any) -> str:
        return _required(v, "Message")


class ReplyForm(_Form):
    message: str

    @field_validator("message", mode="before")
    @classmethod
    def _check_message(cls, v: Any) -> str:
        return _required(v, "Reply")


class ProfileForm(_Form):
    username: str | None = None
    email: str | None = None
    phone: str | None = None
    tc_no: str | None = None

    @field_validator("username", mode="before")
    @classmethod
    def _check_username(cls, v: Any) -> str | None:
        return None if v is None else _required(v, "Username")

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v: Any) -> str | None:
        return None if v is None else _email(v)

    @field_validator("phone", mode="before")
    @classmethod
    def _check_phone(cls, v: Any) -> str | None:
        if v is None:
            return None
        formatted = format_phone_number(str(v))
        if len(re.sub(r"\D", "", formatted)) != 12:
            raise ValueError("Enter a valid phone number")
        return formatted

    @field_validator("tc_no", mode="before")
    @classmethod
    def _check_tc(cls, v: Any) -> str | None:
        if v is None:
            return None
        if not validate_tc_identity(str(v)):
            raise ValueError("Enter a valid TC identity number")
        return str(v)

    def to_api(self) -> dict[str, Any]:
        payload = {"username": self.username, "email": self.email, "phone": self.phone, "tcNo": self.tc_no}
        return {k: v for k, v in payload.items() if v is not None}


def validate_form(schema: type[FormT], data: dict[str, Any]) -> FormT:
    """Validate ``data`` against ``schema``.

    Raises
    ------
    FormValidationError
        With every failing field mapped to its messages.
    """
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        errors: dict[str, list[str]] = {}
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"]) or "form"
            if err["type"] == "missing":
                message = f"{field.replace('_', ' ').capitalize()} is required"
            else:
                message = err["msg"]
                if message.startswith(_VALUE_ERROR_PREFIX):
                    message = message[len(_VALUE_ERROR_PREFIX):]
            errors.setdefault(field, []).append(message)
        raise FormValidationError(errors) from exc


def validate_tc_identity(tc: str) -> bool:
    """Check a Turkish TC identity number (11 digits with two check digits)."""
    if not tc or not re.fullmatch(r"\d{11}", tc) or tc[0] == "0":
        return False
    digits = [int(c) for c in tc]
    odd_sum = digits[0] + digits[2] + digits[4] + digits[6] + digits[8]
    even_sum = digits[1] + digits[3] + digits[5] + digits[7]
    if (odd_sum * 7 - even_sum) % 10 != digits[9]:
        return False
    return sum(digits[:10]) % 10 == digits[10]


def format_phone_number(value: str) -> str:
    """Format to ``+90 XXX XXX XX XX``, keeping at most ten national digits."""
    digits = re.sub(r"\D", "", value)
    if digits.startswith("90"):
        digits = digits[2:]
    digits = digits[:10]

    parts = [digits[0:3], digits[3:6], digits[6:8], digits[8:10]]
    return " ".join(["+90"] + [p for p in parts if p])
