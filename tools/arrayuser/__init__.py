"""
arrayuser — bcrypt users kept in a plain Python list.

Binds the storage-agnostic BcryptUser to an in-memory list of user dicts
through a three-method resolver.

Architecture:
    ArrayUser → BcryptUser → ArrayResolver → list[dict]

Components:
    - match_object: Field-subset matching of lookup criteria against records
    - ArrayResolver: find / insert / update_hash over a caller-owned list
    - BcryptUser: Hashing, verification and validation for one (username, realm)
    - ArrayUser: Validates the list and wires the two together

Usage:
    from arrayuser import ArrayUser

    db = []
    user = ArrayUser(db, "owl", "lab")
    await user.register("password123")
    await user.verify_password("password123")  # True
"""

__version__ = "0.1.0"

from .auth import (
    DEFAULT_REALM,
    BcryptUser,
    PasswordUpdateError,
    UserError,
    UserExistsError,
    UserOptions,
)
from .match import match_object
from .resolver import ArrayResolver, Resolver
from .user import ArrayUser, find_user, register_user

__all__ = [
    "ArrayUser",
    "ArrayResolver",
    "BcryptUser",
    "DEFAULT_REALM",
    "PasswordUpdateError",
    "Resolver",
    "UserError",
    "UserExistsError",
    "UserOptions",
    "find_user",
    "match_object",
    "register_user",
]
