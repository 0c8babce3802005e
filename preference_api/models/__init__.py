from .preference import UserPreference
from .user import User

__all__ = [
    "User",
    "UserPreference",
]
