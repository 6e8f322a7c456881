"""
Centralized constants (Encapsulate What Changes).

Statuses, item types, subject types and feed item types live here instead of as literals
scattered across services and routes.
"""

# Trick progress
STATUS_TODO = "todo"
STATUS_IN_PROGRESS = "in_progress"
STATUS_MASTERED = "mastered"
TRICK_STATUSES = (STATUS_TODO, STATUS_IN_PROGRESS, STATUS_MASTERED)
STANCE_GOOFY = "goofy"

# Orders that count as a confirmed booking
BOOKING_ORDER_STATUSES = ("completed", "pending_shipment")

# Favorites
ITEM_TYPE_TRICK = "trick"
ITEM_TYPE_ARTICLE = "article"
ITEM_TYPE_USER = "user"

# Likeable / commentable subjects
SUBJECT_TRICK = "trick"
SUBJECT_ACHIEVEMENT = "achievement"
SUBJECT_EVENT = "event"
SUBJECT_POST = "post"
SUBJECT_NEWS = "news"
SUBJECT_TYPES = (SUBJECT_TRICK, SUBJECT_ACHIEVEMENT, SUBJECT_EVENT, SUBJECT_POST, SUBJECT_NEWS)
# Subjects whose owner scope must be given by the caller (others are resolved or global)
OWNER_SCOPED_SUBJECTS = (SUBJECT_TRICK, SUBJECT_ACHIEVEMENT, SUBJECT_EVENT)
GLOBAL_OWNER_ID = 0

# Feed item types
FEED_PROGRESS_STARTED = "progress_started"
FEED_PROGRESS_MASTERED = "progress_mastered"
FEED_EVENT_JOINED = "event_joined"
FEED_ACHIEVEMENT_EARNED = "achievement_earned"
FEED_ITEM_TYPES = (
    FEED_PROGRESS_STARTED,
    FEED_PROGRESS_MASTERED,
    FEED_EVENT_JOINED,
    FEED_ACHIEVEMENT_EARNED,
)

# Comments
COMMENT_MAX_LENGTH = 1000
