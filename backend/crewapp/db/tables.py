"""
Single source of truth for database tables created by migration 001.

alembic/env.py checks the registered models against this list.
"""
# All tables that exist in the DB. Must match models and alembic/versions.
ALL_TABLE_NAMES = (
    "users",
    "tricks",
    "articles",
    "products",
    "events",
    "event_attendees",
    "user_tricks",
    "user_articles",
    "favorites",
    "orders",
    "news",
    "user_news_read",
    "user_news_hidden",
    "notification_groups",
    "user_achievements",
    "user_posts",
    "likes",
    "comments",
    "comment_likes",
    "feed_hidden_items",
)
