"""Database repository layer, one repo per aggregate root."""

from src.db.repositories.blog_repo import BlogRepo

__all__ = [
    "BlogRepo",
]
