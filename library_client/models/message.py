"""Contact message and payment models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from library_client.models.enums import MessageStatus, PaymentProvider

T = TypeVar("T")


@dataclass
class ContactMessage:
    message_id: str
    name: str
    email: str
    subject: str
    message: str
    status: MessageStatus = MessageStatus.NEW
    reply: str | None = None
    created_at: datetime | None = None


@dataclass
class Page(Generic[T]):
    """One page of a paged listing."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1


@dataclass
class CheckoutSession:
    """Gateway checkout created for a loan's late fee."""

    loan_id: str
    provider: PaymentProvider
    url: str
    session_id: str | None = None
