"""Users stored in a plain list.

ArrayUser wraps a BcryptUser whose resolver reads and writes a list of
dicts owned by the caller. Every ArrayUser built over the same list shares
its records.

Usage:
    db = []
    user = await ArrayUser.register_user(db, "baz", "p4ssword", realm="lab")
    await user.verify_password("p4ssword")  # True
    db[0]["password"]                        # "$2a$10$..."
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from arrayuser.auth import bcrypt_user
from arrayuser.auth.bcrypt_user import BcryptUser, OptionsLike, resolve_options
from arrayuser.resolver import ArrayResolver

_PLACEHOLDER_PASSWORD = "xxxxxx"


def check_all_with_password(collection: Any, username: Any, password: Any, realm: Any) -> None:
    """Validate a list-backed identity plus a password.

    Raises:
        TypeError: ``collection`` is not a list, or a credential has the wrong type.
        ValueError: A credential is out of bounds.
    """
    if not isinstance(collection, list):
        raise TypeError("db must be a list")
    bcrypt_user.check_all_with_password(username, password, realm)


class ArrayUser:
    """Store and verify bcrypt-hashed users kept in a list.

    Args:
        collection: List of user dicts, mutated in place.
        username: Name of the user to bind this instance to.
        realm: Optional realm, defaults to ``options["realm"]`` or "_default".
        options: Mapping or UserOptions with ``realm``, ``debug``, ``hide``, ``rounds``.
    """

    def __init__(
        self,
        collection: List[Dict[str, Any]],
        username: str,
        realm: Optional[str] = None,
        options: OptionsLike = None,
    ) -> None:
        opts = resolve_options(realm, options)
        check_all_with_password(collection, username, _PLACEHOLDER_PASSWORD, opts.realm)

        self.resolver = ArrayResolver(collection)
        self._user = BcryptUser(self.resolver, username, options=opts)

    @property
    def username(self) -> str:
        return self._user.username

    @property
    def realm(self) -> str:
        return self._user.realm

    @property
    def options(self) -> bcrypt_user.UserOptions:
        return self._user.options

    @property
    def record(self) -> Optional[Dict[str, Any]]:
        """Record loaded by the last find/exists/register, if any."""
        return self._user.record

    async def register(self, password: str) -> Dict[str, Any]:
        return await self._user.register(password)

    async def verify_password(self, password: str) -> bool:
        return await self._user.verify_password(password)

    async def set_password(self, new_password: str) -> None:
        await self._user.set_password(new_password)

    async def exists(self) -> bool:
        return await self._user.exists()

    async def find(self) -> Optional[Dict[str, Any]]:
        return await self._user.find()

    @classmethod
    async def register_user(
        cls,
        collection: List[Dict[str, Any]],
        username: str,
        password: str,
        realm: Optional[str] = None,
        options: OptionsLike = None,
    ) -> "ArrayUser":
        """Create a user and register it in one step."""
        user = cls(collection, username, realm, options)
        await user.register(password)
        return user

    @classmethod
    async def find_user(
        cls,
        collection: List[Dict[str, Any]],
        username: str,
        realm: Optional[str] = None,
        options: OptionsLike = None,
    ) -> Optional["ArrayUser"]:
        """Return a loaded user, or None if no record exists for the identity."""
        user = cls(collection, username, realm, options)
        if await user.find() is None:
            return None
        return user

    def __repr__(self) -> str:
        name = "***" if self.options.hide else self.username
        return f"ArrayUser(username={name!r}, realm={self.realm!r})"


register_user = ArrayUser.register_user
find_user = ArrayUser.find_user
