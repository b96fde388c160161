import logging
from collections.abc import Collection
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from emargement.auth.credentials import CredentialStore
from emargement.auth.jwt_handler import TokenService
from emargement.core.errors import AuthorizationFailure, FailureReason, TokenError
from emargement.models.user import Role

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class Principal:
    id: int
    name: str
    email: str
    role: str


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_credential_store(request: Request, db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)


def extract_token(header: str | None) -> str | None:
    """Return the token from an Authorization header, raw or with a Bearer scheme."""
    if header is None:
        return None
    parts = header.split(None, 1)
    if parts and parts[0].lower() == BEARER_SCHEME:
        parts = parts[1:]
    if not parts:
        return None
    return parts[0].strip() or None


def authorize(
    header: str | None,
    tokens: TokenService,
    users: CredentialStore,
    roles: Collection[str] = (),
) -> Principal:
    """Resolve an Authorization header to a live principal holding one of ``roles``.

    An empty ``roles`` accepts any authenticated user. Raises
    AuthorizationFailure naming the check that failed.
    """
    token = extract_token(header)
    if token is None:
        raise AuthorizationFailure(FailureReason.MISSING_HEADER)

    try:
        claims = tokens.verify(token)
    except TokenError as exc:
        raise AuthorizationFailure(FailureReason.INVALID_TOKEN) from exc

    user = users.find_by_id(claims.id)
    if user is None:
        raise AuthorizationFailure(FailureReason.UNKNOWN_IDENTITY)

    # Checked against the stored role, not the role claim.
    if roles and user.role not in roles:
        raise AuthorizationFailure(FailureReason.ROLE_MISMATCH)

    return Principal(id=user.id, name=user.name, email=user.email, role=user.role)


def require_role(*roles: Role):
    allowed = frozenset(role.value for role in roles)

    def dependency(
        authorization: str | None = Header(default=None),
        tokens: TokenService = Depends(get_token_service),
        users: CredentialStore = Depends(get_credential_store),
    ) -> Principal:
        try:
            return authorize(authorization, tokens, users, allowed)
        except AuthorizationFailure as exc:
            logger.info("Rejected request: %s", exc.reason.value)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized") from exc

    return dependency


require_authenticated = require_role()
require_trainer = require_role(Role.TRAINER)
require_student = require_role(Role.STUDENT)
