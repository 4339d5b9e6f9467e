from postboard.web.routers.auth import router as auth_router
from postboard.web.routers.comments import router as comments_router
from postboard.web.routers.posts import router as posts_router
from postboard.web.routers.users import router as users_router

__all__ = [
    "auth_router",
    "comments_router",
    "posts_router",
    "users_router",
]
