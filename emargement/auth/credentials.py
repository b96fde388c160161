"""Credential store: user records and password checks over a SQLAlchemy session."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from emargement.auth.passwords import hash_password, verify_password
from emargement.core.errors import DuplicateEmail, InvalidInput
from emargement.models.user import Role, User


class CredentialStore:
    def __init__(self, db: Session, bcrypt_rounds: int = 10) -> None:
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def create_user(self, name: str, email: str, password: str, role: str) -> User:
        """Insert a user and return it with its id populated.

        Raises DuplicateEmail when the email is taken and InvalidInput for an
        unknown role. SQLAlchemy errors other than the unique constraint
        propagate to the caller.
        """
        try:
            role = Role(role).value
        except ValueError as exc:
            raise InvalidInput(f"Unknown role: {role}") from exc

        if self.find_by_email(email) is not None:
            raise DuplicateEmail(email)

        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password, rounds=self.bcrypt_rounds),
            role=role,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent signup for the same email.
            self.db.rollback()
            raise DuplicateEmail(email) from exc
        self.db.refresh(user)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.find_by_email(email)
        if user is None:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user
