"""Domain errors raised by users and resolvers."""


class UserError(Exception):
    """Base class for user store failures."""


class UserExistsError(UserError):
    def __init__(self, message: str = "username already exists") -> None:
        super().__init__(message)


class PasswordUpdateError(UserError):
    """Raised by a resolver when no record matches a password update."""

    def __init__(self, message: str = "failed to update password") -> None:
        super().__init__(message)
