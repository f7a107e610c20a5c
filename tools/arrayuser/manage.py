#!/usr/bin/env python3
"""CLI management tool for users kept in a JSON list file.

Provides commands to:
- Add users with bcrypt-hashed passwords
- Verify and change passwords
- List users, optionally filtered by realm
- Remove users by username and realm
"""

import argparse
import asyncio
import getpass
import json
import logging
import os
import sys
import tempfile
from pathlib import Path

import jsonschema

# Ensure arrayuser package is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from arrayuser.auth import DEFAULT_REALM, UserError
from arrayuser.match import match_object
from arrayuser.user import ArrayUser

logger = logging.getLogger("arrayuser.manage")

DEFAULT_DB_PATH = ".arrayuser/users.json"

BCRYPT_HASH_PATTERN = r"^\$2[aby]\$\d{2}\$.{53}$"

USERS_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["username", "realm", "password"],
        "properties": {
            "username": {"type": "string"},
            "realm": {"type": "string"},
            "password": {"type": "string", "pattern": BCRYPT_HASH_PATTERN},
        },
    },
}


def load_users(db_path: str) -> list:
    """Load and validate the user list. A missing file is an empty list."""
    path = Path(db_path)
    if not path.exists():
        logger.debug(f"No user file at {path}, starting empty")
        return []

    with open(path) as f:
        users = json.load(f)
    jsonschema.validate(users, USERS_SCHEMA)
    return users


def save_users(db_path: str, users: list) -> None:
    """Write the user list through a sibling temp file swapped in with os.replace."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(json.dumps(users, indent=2) + "\n")
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise
    logger.debug(f"Wrote {len(users)} users to {path}")


def _read_password(args, prompt: str) -> str:
    if args.password:
        return args.password
    return getpass.getpass(prompt)


def add_user(args, users: list) -> int:
    """Register a new user with optional password prompt."""
    password = _read_password(args, f"Password for {args.username}: ")
    if not password:
        print("Error: Password cannot be empty", file=sys.stderr)
        return 1

    try:
        user = asyncio.run(
            ArrayUser.register_user(users, args.username, password, args.realm)
        )
    except (TypeError, ValueError, UserError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"✓ User created: {user.username} ({user.realm})")
    return 0


def verify(args, users: list) -> int:
    """Check a password. Exit code 0 when it matches."""
    password = _read_password(args, f"Password for {args.username}: ")
    try:
        user = ArrayUser(users, args.username, args.realm)
        valid = asyncio.run(user.verify_password(password))
    except (TypeError, ValueError, UserError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if valid:
        print("✓ Password valid")
        return 0

    print("✗ Password invalid", file=sys.stderr)
    return 1


def set_password(args, users: list) -> int:
    """Replace the password of an existing user."""
    password = _read_password(args, f"New password for {args.username}: ")
    try:
        user = ArrayUser(users, args.username, args.realm)
        asyncio.run(user.set_password(password))
    except (TypeError, ValueError, UserError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"✓ Password updated for {args.username} ({args.realm})")
    return 0


def list_users(args, users: list) -> int:
    """List users, optionally restricted to one realm."""
    criteria = {"realm": args.realm} if args.realm else {}
    rows = [u for u in users if match_object(criteria, u)]

    if not rows:
        print("No users found")
        return 0

    print(f"{'Username':<30} {'Realm':<20}")
    print("-" * 50)
    for user in rows:
        print(f"{user['username']:<30} {user['realm']:<20}")

    return 0


def remove_user(args, users: list) -> int:
    """Remove the first record for a username and realm."""
    criteria = {"username": args.username, "realm": args.realm}
    for i, user in enumerate(users):
        if match_object(criteria, user):
            del users[i]
            print(f"✓ Removed user {args.username} ({args.realm})")
            return 0

    print(f"Error: User '{args.username}' not found in realm '{args.realm}'", file=sys.stderr)
    return 1


COMMANDS = {
    "add-user": (add_user, True),
    "verify": (verify, False),
    "set-password": (set_password, True),
    "list-users": (list_users, False),
    "remove-user": (remove_user, True),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arrayuser",
        description="Manage bcrypt users stored in a JSON list file",
    )
    parser.add_argument(
        "--db-path",
        default=DEFAULT_DB_PATH,
        help=f"Path to the user file (default: {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    for name, help_text in (
        ("add-user", "Add a new user"),
        ("verify", "Verify a user's password"),
        ("set-password", "Change a user's password"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--username", required=True, help="Username")
        sub.add_argument("--realm", default=DEFAULT_REALM, help="Realm")
        sub.add_argument("--password", help="Password (prompted if omitted)")

    list_parser = subparsers.add_parser("list-users", help="List users")
    list_parser.add_argument("--realm", help="Only list users in this realm")

    remove_parser = subparsers.add_parser("remove-user", help="Remove a user")
    remove_parser.add_argument("--username", required=True, help="Username")
    remove_parser.add_argument("--realm", default=DEFAULT_REALM, help="Realm")

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        users = load_users(args.db_path)
    except (json.JSONDecodeError, jsonschema.ValidationError) as e:
        print(f"Error: Invalid user file {args.db_path}: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Cannot read user file {args.db_path}: {e}", file=sys.stderr)
        return 1

    handler, mutates = COMMANDS[args.command]
    code = handler(args, users)
    if code == 0 and mutates:
        save_users(args.db_path, users)
    return code


if __name__ == "__main__":
    sys.exit(main())
