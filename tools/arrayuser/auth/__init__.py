"""
arrayuser auth — bcrypt user primitive and its errors.

BcryptUser binds a (username, realm) pair to a resolver and handles
hashing, verification and validation. The resolver decides where records live.

Usage:
    from arrayuser.auth import BcryptUser

    user = BcryptUser(resolver, "owl", "lab")
    await user.register("password123")
    await user.verify_password("password123")  # True
"""

from .bcrypt_user import (
    DEFAULT_REALM,
    BcryptUser,
    UserOptions,
    check_all_with_password,
    hash_password,
)
from .errors import PasswordUpdateError, UserError, UserExistsError

__all__ = [
    "DEFAULT_REALM",
    "BcryptUser",
    "UserOptions",
    "check_all_with_password",
    "hash_password",
    "UserError",
    "UserExistsError",
    "PasswordUpdateError",
]
