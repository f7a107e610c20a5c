"""Storage-agnostic user bound to a (username, realm) pair with bcrypt passwords.

BcryptUser owns hashing, verification and input validation. Persistence is
delegated to a resolver (see arrayuser.resolver) that knows how to find,
insert and rehash records in some backing store.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Union

import bcrypt

from .errors import UserExistsError

logger = logging.getLogger(__name__)

DEFAULT_REALM = "_default"
DEFAULT_ROUNDS = 10
MIN_ROUNDS = 4
MAX_ROUNDS = 31
HASH_PREFIX = b"2a"

MAX_NAME_LENGTH = 128
MIN_PASSWORD_BYTES = 6
MAX_PASSWORD_BYTES = 72

_DUMMY_HASH = bcrypt.hashpw(
    b"dummy", bcrypt.gensalt(rounds=DEFAULT_ROUNDS, prefix=HASH_PREFIX)
)


@dataclass
class UserOptions:
    """Per-user settings.

    Attributes:
        realm: Namespace the username lives in.
        debug: Emit debug log lines for this user's operations.
        hide: Mask the username in log lines.
        rounds: bcrypt cost factor for new hashes.
    """

    realm: str = DEFAULT_REALM
    debug: bool = False
    hide: bool = False
    rounds: int = DEFAULT_ROUNDS

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserOptions":
        """Build options from a dict, ignoring keys that are not options."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


OptionsLike = Union[UserOptions, Mapping[str, Any], None]


def resolve_options(realm: Optional[str], options: OptionsLike) -> UserOptions:
    """Merge an explicit realm with an options object or mapping.

    An explicit ``realm`` argument wins over ``options.realm``.
    """
    if options is None:
        opts = UserOptions()
    elif isinstance(options, UserOptions):
        opts = replace(options)
    elif isinstance(options, Mapping):
        opts = UserOptions.from_mapping(options)
    else:
        raise TypeError("options must be a mapping or UserOptions")

    if realm is not None:
        opts.realm = realm
    check_rounds(opts.rounds)
    return opts


def check_rounds(rounds: Any) -> None:
    if not isinstance(rounds, int) or isinstance(rounds, bool):
        raise TypeError("rounds must be an integer")
    if not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
        raise ValueError(f"rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}")


def check_username(username: Any) -> None:
    if not isinstance(username, str):
        raise TypeError("username must be a string")
    if not 1 <= len(username) <= MAX_NAME_LENGTH:
        raise ValueError(f"username must be between 1 and {MAX_NAME_LENGTH} characters")


def check_password(password: Any) -> None:
    if not isinstance(password, str):
        raise TypeError("password must be a string")
    size = len(password.encode("utf-8"))
    if not MIN_PASSWORD_BYTES <= size <= MAX_PASSWORD_BYTES:
        raise ValueError(
            f"password must be between {MIN_PASSWORD_BYTES} and {MAX_PASSWORD_BYTES} bytes"
        )


def check_realm(realm: Any) -> None:
    if not isinstance(realm, str):
        raise TypeError("realm must be a string")
    if not 1 <= len(realm) <= MAX_NAME_LENGTH:
        raise ValueError(f"realm must be between 1 and {MAX_NAME_LENGTH} characters")


def check_all_with_password(username: Any, password: Any, realm: Any) -> None:
    """Validate a full set of credentials, raising TypeError or ValueError."""
    check_username(username)
    check_password(password)
    check_realm(realm)


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash ``password`` into a 60 character ``$2a$`` bcrypt string."""
    salt = bcrypt.gensalt(rounds=rounds, prefix=HASH_PREFIX)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password_hash(password: str, hashed: str) -> bool:
    """Compare a plaintext password with a stored bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


class BcryptUser:
    """A user identified by (username, realm), persisted through a resolver.

    Hashing and checking run in a worker thread so the event loop is not
    blocked. Registration hashes first and only then checks for an existing
    record and inserts it, so with a resolver that does not suspend inside
    ``find`` two registrations of one identity cannot both succeed.

    Args:
        resolver: Object with ``find``, ``insert`` and ``update_hash`` coroutines.
        username: Name to bind this instance to.
        realm: Optional realm, defaults to ``options.realm`` or "_default".
        options: UserOptions or a mapping with ``realm``, ``debug``, ``hide``, ``rounds``.
    """

    def __init__(
        self,
        resolver: Any,
        username: str,
        realm: Optional[str] = None,
        options: OptionsLike = None,
    ) -> None:
        self.options = resolve_options(realm, options)
        check_username(username)
        check_realm(self.options.realm)

        self.resolver = resolver
        self.username = username
        self.realm = self.options.realm
        self.record: Optional[Dict[str, Any]] = None

    @property
    def lookup(self) -> Dict[str, str]:
        """Criteria identifying this user's record."""
        return {"username": self.username, "realm": self.realm}

    def _debug(self, message: str) -> None:
        if not self.options.debug:
            return
        who = "***" if self.options.hide else f"{self.username}@{self.realm}"
        logger.debug(f"[{who}] {message}")

    async def find(self) -> Optional[Dict[str, Any]]:
        """Load this user's record into ``self.record`` and return it."""
        self.record = await self.resolver.find(self.lookup)
        self._debug("found" if self.record is not None else "not found")
        return self.record

    async def exists(self) -> bool:
        """Return True if a record for this identity is stored."""
        return await self.find() is not None

    async def register(self, password: str) -> Dict[str, Any]:
        """Create the record for this identity with a freshly hashed password.

        Raises:
            UserExistsError: A record for (username, realm) is already stored.
        """
        check_password(password)
        hashed = await asyncio.to_thread(hash_password, password, self.options.rounds)

        if await self.resolver.find(self.lookup) is not None:
            self._debug("register refused, already exists")
            raise UserExistsError()

        record = {"username": self.username, "realm": self.realm, "password": hashed}
        await self.resolver.insert(record)
        self.record = record
        self._debug("registered")
        return record

    async def verify_password(self, password: str) -> bool:
        """Return True if ``password`` matches the stored hash.

        Unknown identities still pay for one bcrypt check so timing does
        not reveal which usernames exist.
        """
        if not isinstance(password, str):
            raise TypeError("password must be a string")
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False

        record = await self.find()
        if record is None:
            await asyncio.to_thread(bcrypt.checkpw, encoded, _DUMMY_HASH)
            return False

        correct = await asyncio.to_thread(check_password_hash, password, record["password"])
        self._debug(f"password {'accepted' if correct else 'rejected'}")
        return correct

    async def set_password(self, new_password: str) -> None:
        """Replace the stored hash.

        Errors from the resolver's ``update_hash`` propagate unchanged.
        """
        check_password(new_password)
        hashed = await asyncio.to_thread(hash_password, new_password, self.options.rounds)
        await self.resolver.update_hash(self.lookup, hashed)
        self._debug("password updated")
