from crewapp.models.article import Article
from crewapp.models.comment import Comment
from crewapp.models.comment_like import CommentLike
from crewapp.models.event import Event
from crewapp.models.event_attendee import EventAttendee
from crewapp.models.favorite import Favorite
from crewapp.models.feed_hidden_item import FeedHiddenItem
from crewapp.models.like import Like
from crewapp.models.news import News, UserNewsHidden, UserNewsRead
from crewapp.models.notification_group import NotificationGroup
from crewapp.models.order import Order
from crewapp.models.product import Product
from crewapp.models.trick import Trick
from crewapp.models.user import User
from crewapp.models.user_achievement import UserAchievement
from crewapp.models.user_article import UserArticle
from crewapp.models.user_post import UserPost
from crewapp.models.user_trick import UserTrick

__all__ = [
    "Article",
    "Comment",
    "CommentLike",
    "Event",
    "EventAttendee",
    "Favorite",
    "FeedHiddenItem",
    "Like",
    "News",
    "NotificationGroup",
    "Order",
    "Product",
    "Trick",
    "User",
    "UserAchievement",
    "UserArticle",
    "UserNewsHidden",
    "UserNewsRead",
    "UserPost",
    "UserTrick",
]
