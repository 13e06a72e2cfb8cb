# src/nlp/messages.py
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


class Role(enum.Enum):
    USER = "user"
    SYSTEM = "system"


class AttachmentKind(enum.Enum):
    CHART = "chart"
    MAP = "map"
    TABLE = "table"


@dataclass(frozen=True)
class Attachment:
    kind: AttachmentKind
    title: str
    description: str


@dataclass(frozen=True)
class Reply:
    """What a responder hands back; becomes a system message"""
    content: str
    attachments: Tuple[Attachment, ...] = ()


@dataclass(frozen=True)
class Message:
    id: str
    role: Role
    content: str
    timestamp: datetime
    attachments: Tuple[Attachment, ...] = ()
    # Id of the user message a system reply answers
    reply_to: Optional[str] = None

    @property
    def is_user(self) -> bool:
        return self.role is Role.USER

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'role': self.role.value,
            'content': self.content,
            'timestamp': self.timestamp.isoformat(),
            'attachments': [
                {'kind': a.kind.value, 'title': a.title, 'description': a.description}
                for a in self.attachments
            ],
            'reply_to': self.reply_to,
        }
