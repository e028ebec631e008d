"""ORM model package."""

from daybook.models.entities import Client, User, WorkDay

__all__ = [
    "Client",
    "User",
    "WorkDay",
]
