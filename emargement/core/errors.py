"""Error taxonomy shared by the stores, the token service and the routes."""

from enum import Enum


class EmargementError(Exception):
    """Base class for every error raised by the application."""


class InvalidInput(EmargementError):
    """Malformed or missing input. Surfaces as 400."""


class DuplicateEmail(InvalidInput):
    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email


class Unauthorized(EmargementError):
    """Missing, invalid or role-mismatched credentials. Surfaces as 401."""


class TokenError(EmargementError):
    """A token could not be verified."""


class InvalidSignature(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class FailureReason(str, Enum):
    MISSING_HEADER = "missing_header"
    INVALID_TOKEN = "invalid_token"
    UNKNOWN_IDENTITY = "unknown_identity"
    ROLE_MISMATCH = "role_mismatch"


class AuthorizationFailure(Unauthorized):
    """Request could not be resolved to a principal with the required role.

    Every reason maps to the same 401 response; the reason is kept for logs.
    """

    def __init__(self, reason: FailureReason) -> None:
        super().__init__(reason.value)
        self.reason = reason
