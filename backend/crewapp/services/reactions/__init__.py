from crewapp.services.reactions.comments import add_comment, delete_comment
from crewapp.services.reactions.loader import load_reaction, load_reaction_counts, load_reactions
from crewapp.services.reactions.subjects import owner_subject_ids, resolve_subject
from crewapp.services.reactions.toggle import toggle_comment_like, toggle_like
from crewapp.services.reactions.types import CommentView, ReactionSummary, SubjectKey, ToggleResult

__all__ = [
    "CommentView",
    "ReactionSummary",
    "SubjectKey",
    "ToggleResult",
    "add_comment",
    "delete_comment",
    "load_reaction",
    "load_reaction_counts",
    "load_reactions",
    "owner_subject_ids",
    "resolve_subject",
    "toggle_comment_like",
    "toggle_like",
]
