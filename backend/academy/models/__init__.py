from academy.models.refresh_token import RefreshToken
from academy.models.user import Role, User

__all__ = [
    "RefreshToken",
    "Role",
    "User",
]
