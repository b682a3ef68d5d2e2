"""Account models."""

from app.models.user import Role, UserRecord

__all__ = ["Role", "UserRecord"]
