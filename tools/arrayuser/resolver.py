"""Persistence resolvers used by the bcrypt authentication primitive.

A resolver exposes three coroutines:

    find(criteria)                 -> first matching record or None
    insert(record)                 -> append a new record
    update_hash(criteria, hash)    -> overwrite the password of the first match

ArrayResolver implements them over a caller-owned list. The list is held by
reference and never copied, so every resolver built over the same list sees
the same records.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

from arrayuser.auth.errors import PasswordUpdateError
from arrayuser.match import match_object

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    """Storage callbacks required by BcryptUser."""

    async def find(self, criteria: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    async def insert(self, record: Dict[str, Any]) -> None:
        ...

    async def update_hash(self, criteria: Mapping[str, Any], new_hash: str) -> None:
        ...


class ArrayResolver:
    """Resolver over an in-memory list of user records.

    ``find`` and ``insert`` never suspend before their scan or append is
    done, so a caller that awaits ``find`` and then ``insert`` cannot be
    interleaved with another coroutine on the same event loop.

    Args:
        collection: List of user dicts. Mutated in place.
    """

    def __init__(self, collection: List[Dict[str, Any]]) -> None:
        self.collection = collection

    def _first_match(self, criteria: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        for record in self.collection:
            if match_object(criteria, record):
                return record
        return None

    async def find(self, criteria: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Return the first record matching ``criteria``, or None."""
        return self._first_match(criteria)

    async def insert(self, record: Dict[str, Any]) -> None:
        """Append ``record``. Completes on the next event loop tick."""
        self.collection.append(record)
        logger.debug(f"Inserted record ({len(self.collection)} total)")
        await asyncio.sleep(0)

    async def update_hash(self, criteria: Mapping[str, Any], new_hash: str) -> None:
        """Overwrite the password of the first record matching ``criteria``.

        Raises:
            PasswordUpdateError: No record matches. The collection is untouched.
        """
        record = self._first_match(criteria)
        if record is None:
            logger.warning("Password update matched no record")
            raise PasswordUpdateError()

        record["password"] = new_hash
        logger.debug("Password hash updated")
