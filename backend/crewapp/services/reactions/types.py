"""Reaction value objects. Immutable once built for a request."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SubjectKey:
    """One likeable subject: (type, owner scope, id). Owner scope is 0 for global subjects."""

    subject_type: str
    owner_id: int
    subject_id: str


@dataclass(frozen=True)
class CommentView:
    id: int
    author_id: int
    content: str
    created_at: datetime | None
    likes_count: int = 0
    viewer_liked: bool = False
    deleted: bool = False
    author: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "authorId": self.author_id,
            "author": self.author,
            "content": self.content,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "likesCount": self.likes_count,
            "viewerLiked": self.viewer_liked,
            "deleted": self.deleted,
        }


@dataclass(frozen=True)
class ReactionSummary:
    likes_count: int = 0
    comments_count: int = 0
    viewer_liked: bool = False
    comments: tuple[CommentView, ...] = ()

    def to_dict(self, include_comments: bool = True) -> dict:
        out = {
            "likesCount": self.likes_count,
            "commentsCount": self.comments_count,
            "viewerLiked": self.viewer_liked,
        }
        if include_comments:
            out["comments"] = [c.to_dict() for c in self.comments]
        return out


EMPTY_REACTIONS = ReactionSummary()


@dataclass(frozen=True)
class ToggleResult:
    viewer_liked: bool
    likes_count: int

    def to_dict(self) -> dict:
        return {"viewerLiked": self.viewer_liked, "likesCount": self.likes_count}
