"""Contact form and admin message endpoints."""

from __future__ import annotations

from typing import Any

from library_client.http import ApiClient
from library_client.models import ContactMessage, MessageStatus, Page
from library_client.serialization import parse_message
from library_client.validation import AdminMessageForm, ContactForm, ReplyForm, validate_form


class MessageService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def send_contact(self, name: str, email: str, subject: str, message: str) -> Any:
        form = validate_form(
            ContactForm,
            {"name": name, "email": email, "subject": subject, "message": message},
        )
        return self.api.post("/contact", json=form.model_dump(), auth=False)

    def list(self, page: int = 1, status: MessageStatus | None = None) -> Page[ContactMessage]:
        params = {"page": page, "status": status.value if status else None}
        body = self.api.get("/contact/messages", params=params) or {}
        return Page(
            items=[parse_message(item) for item in body.get("items", [])],
            total=int(body.get("total") or 0),
            page=page,
        )

    def mark_read(self, message_id: str) -> Any:
        return self.api.patch(f"/contact/messages/{message_id}/read")

    def reply(self, message_id: str, reply_message: str) -> Any:
        """Reply to a message; the server emails the sender."""
        form = validate_form(ReplyForm, {"message": reply_message})
        return self.api.post(
            f"/contact/messages/{message_id}/reply",
            json={"replyMessage": form.message},
        )

    def send_new_message(self, email: str, subject: str, message: str) -> Any:
        form = validate_form(AdminMessageForm, {"subject": subject, "message": message})
        return self.api.post(
            "/contact/send-new-message",
            json={"email": email, "subject": form.subject, "message": form.message},
        )

    def unread_count(self) -> int:
        body = self.api.get("/contact/unread-count") or {}
        return int(body.get("count", body.get("unreadCount", 0)) or 0)

    def delete(self, message_id: str) -> Any:
        return self.api.delete(f"/contact/messages/{message_id}")
