import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from emargement.auth.credentials import CredentialStore
from emargement.auth.dependencies import (
    Principal,
    get_credential_store,
    get_token_service,
    require_authenticated,
)
from emargement.auth.jwt_handler import Claims, TokenService
from emargement.core.errors import InvalidInput
from emargement.models.user import Role
from emargement.routes.responses import store_failure

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class SignupRequest(BaseModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=8)
    role: Role

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) < 2:
            raise ValueError('Name must be at least 2 characters.')
        return normalized

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class SignupResponse(BaseModel):
    id: int
    name: str
    email: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    token: str


class PrincipalResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str


@router.post('/signup', response_model=SignupResponse)
def signup(data: SignupRequest, users: CredentialStore = Depends(get_credential_store)):
    try:
        user = users.create_user(data.name, data.email, data.password, data.role.value)
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise store_failure(users.db, exc, 'creating a user') from exc

    logger.info('Created %s account %s', user.role, user.id)
    return SignupResponse(id=user.id, name=user.name, email=user.email)


@router.post('/login', response_model=TokenResponse)
def login(
    data: LoginRequest,
    users: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        user = users.authenticate(data.email, data.password)
    except SQLAlchemyError as exc:
        raise store_failure(users.db, exc, 'checking credentials') from exc

    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Unauthorized')

    return TokenResponse(token=tokens.issue(Claims(id=user.id, role=user.role)))


@router.get('/me', response_model=PrincipalResponse)
def me(principal: Principal = Depends(require_authenticated)):
    return PrincipalResponse(id=principal.id, name=principal.name, email=principal.email, role=principal.role)
