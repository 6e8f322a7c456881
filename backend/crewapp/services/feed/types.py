"""Feed value objects."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from crewapp.services.reactions.types import EMPTY_REACTIONS, ReactionSummary


@dataclass(frozen=True)
class FeedItem:
    id: str
    type: str
    actor_id: int
    subject_ref: str
    occurred_at: datetime | None
    payload: dict = field(default_factory=dict)
    reactions: ReactionSummary = EMPTY_REACTIONS
    actor: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "actorId": self.actor_id,
            "subjectRef": self.subject_ref,
            "occurredAt": self.occurred_at.isoformat() if self.occurred_at else None,
            "data": self.payload,
            "user": self.actor,
            "reactions": self.reactions.to_dict(include_comments=False),
        }


@dataclass(frozen=True)
class FeedPage:
    items: list[FeedItem]
    has_more: bool

    def to_dict(self) -> dict:
        return {"items": [i.to_dict() for i in self.items], "hasMore": self.has_more}
