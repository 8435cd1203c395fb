"""Test doubles and helpers shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

from core.exceptions import TransportError

DATA_DIR = Path(__file__).parent / "data"
AIRPORTS_CSV = DATA_DIR / "airports.csv"

GROUP_ID = -1001234567890
TOPIC_ID = 42
ADMIN_ID = 900


def utc(value: str) -> datetime:
    """``"2025-11-13T10:00:00"`` as an aware UTC datetime."""
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


class FakeClock:
    """Settable time source."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: str) -> None:
        self.now = utc(value)

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeTransport:
    """Records every call; member statuses are configured per user."""

    def __init__(self) -> None:
        self.sent: List[dict] = []
        self.deleted: List[tuple] = []
        self.statuses: Dict[int, str] = {ADMIN_ID: "administrator"}
        self.default_status = "member"
        self.status_calls = 0
        self.fail_send = False
        self.fail_delete = False
        self.fail_status = False
        self._next_message_id = 100

    async def send_message(
        self,
        chat_id: int,
        text: str,
        thread_id: Optional[int] = None,
        parse_mode: Optional[str] = None,
    ) -> Optional[int]:
        if self.fail_send:
            raise TransportError("send failed")
        self._next_message_id += 1
        self.sent.append({
            "chat_id": chat_id,
            "text": text,
            "thread_id": thread_id,
            "parse_mode": parse_mode,
            "message_id": self._next_message_id,
        })
        return self._next_message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        if self.fail_delete:
            raise TransportError("delete failed")
        self.deleted.append((chat_id, message_id))

    async def get_member_status(self, chat_id: int, user_id: int) -> str:
        self.status_calls += 1
        if self.fail_status:
            raise TransportError("getChatMember failed")
        return self.statuses.get(user_id, self.default_status)

    def texts_to(self, chat_id: int) -> List[str]:
        return [message["text"] for message in self.sent if message["chat_id"] == chat_id]


