from __future__ import annotations

import base64
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionRecord(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    data: dict[str, Any] = Field(default_factory=dict)


class GeneratedReport(BaseModel):
    content: str
    pdf: bytes

    def to_payload(self) -> dict[str, str]:
        return {
            'content': self.content,
            'pdf': base64.b64encode(self.pdf).decode('ascii'),
        }
