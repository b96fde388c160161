from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from emargement.core.config import Settings
from emargement.core.errors import ExpiredToken, InvalidSignature, MalformedToken
from emargement.database import MAX_ROW_ID


@dataclass(frozen=True)
class Claims:
    id: int
    role: str


class TokenService:
    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int | None = None) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(settings.jwt_key, settings.jwt_algorithm, settings.jwt_expires_minutes)

    def issue(self, claims: Claims) -> str:
        now = datetime.now(timezone.utc)
        payload = {"id": claims.id, "role": claims.role, "iat": now}
        if self.expires_minutes:
            payload["exp"] = now + timedelta(minutes=self.expires_minutes)
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Claims:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature("Token signature does not match") from exc
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredToken("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken(str(exc)) from exc

        user_id = payload.get("id")
        role = payload.get("role")
        # bool is an int subclass and never a valid id.
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise MalformedToken("Token is missing an integer 'id' claim")
        if not 1 <= user_id <= MAX_ROW_ID:
            raise MalformedToken("Token 'id' claim is out of range")
        if not isinstance(role, str):
            raise MalformedToken("Token is missing a 'role' claim")
        return Claims(id=user_id, role=role)
