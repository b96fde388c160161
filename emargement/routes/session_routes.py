from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from emargement.auth.dependencies import Principal, get_db, require_trainer
from emargement.database import MAX_ROW_ID
from emargement.models.attendance import Attendance
from emargement.models.session import CourseSession
from emargement.models.user import Role, User
from emargement.routes.responses import store_failure

router = APIRouter(tags=['sessions'])

MIN_TITLE_LENGTH = 5
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 5


class SessionRequest(BaseModel):
    title: str
    date: date
    trainer_id: int = Field(alias='trainerId', ge=1, le=MAX_ROW_ID)

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) < MIN_TITLE_LENGTH:
            raise ValueError(f'Title must be at least {MIN_TITLE_LENGTH} characters.')
        return normalized


class SessionResponse(BaseModel):
    id: int
    title: str
    date: date
    trainer_id: int = Field(serialization_alias='trainerId')


def to_session_response(course_session: CourseSession) -> SessionResponse:
    return SessionResponse(
        id=course_session.id,
        title=course_session.title,
        date=course_session.date,
        trainer_id=course_session.trainer_id,
    )


def parse_positive_int(value: str | None, name: str, default: int) -> int:
    if value is None or not value.strip():
        return default

    try:
        parsed = int(value)
    except ValueError:
        parsed = 0

    if parsed < 1 or parsed > MAX_ROW_ID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Invalid query parameter "{name}"',
        )

    return parsed


def ensure_trainer_exists(trainer_id: int, db: Session) -> None:
    trainer = db.query(User.id).filter(
        User.id == trainer_id,
        User.role == Role.TRAINER.value,
    ).first()

    if trainer is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Unknown trainer.',
        )


def get_session_or_404(session_id: int, db: Session) -> CourseSession:
    course_session = None
    if 1 <= session_id <= MAX_ROW_ID:
        course_session = db.query(CourseSession).filter(CourseSession.id == session_id).first()

    if course_session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Session not found.',
        )

    return course_session


@router.post('', response_model=SessionResponse)
def create_session(
    data: SessionRequest,
    principal: Principal = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    del principal

    try:
        ensure_trainer_exists(data.trainer_id, db)

        course_session = CourseSession(
            title=data.title,
            date=data.date,
            trainer_id=data.trainer_id,
        )
        db.add(course_session)
        db.commit()
        db.refresh(course_session)

        return to_session_response(course_session)
    except SQLAlchemyError as exc:
        raise store_failure(db, exc, 'creating a session') from exc


@router.get('', response_model=list[SessionResponse])
def list_sessions(
    page: str | None = Query(default=None),
    size: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    page_number = parse_positive_int(page, 'page', DEFAULT_PAGE)
    page_size = parse_positive_int(size, 'size', DEFAULT_PAGE_SIZE)

    offset = (page_number - 1) * page_size
    if offset > MAX_ROW_ID:
        # No row can sit past the largest id.
        return []

    try:
        course_sessions = (
            db.query(CourseSession)
            .order_by(CourseSession.id.asc())
            .offset(offset)
            .limit(page_size)
            .all()
        )

        return [to_session_response(course_session) for course_session in course_sessions]
    except SQLAlchemyError as exc:
        raise store_failure(db, exc, 'listing sessions') from exc


@router.get('/{session_id}', response_model=SessionResponse)
def get_session(session_id: int, db: Session = Depends(get_db)):
    try:
        return to_session_response(get_session_or_404(session_id, db))
    except SQLAlchemyError as exc:
        raise store_failure(db, exc, 'reading a session') from exc


@router.put('/{session_id}', response_model=SessionResponse)
def update_session(
    session_id: int,
    data: SessionRequest,
    principal: Principal = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    # Any trainer may edit any session; ownership is not checked.
    del principal

    try:
        course_session = get_session_or_404(session_id, db)
        ensure_trainer_exists(data.trainer_id, db)

        course_session.title = data.title
        course_session.date = data.date
        course_session.trainer_id = data.trainer_id
        db.commit()
        db.refresh(course_session)

        return to_session_response(course_session)
    except SQLAlchemyError as exc:
        raise store_failure(db, exc, 'updating a session') from exc


@router.delete('/{session_id}', response_class=PlainTextResponse)
def delete_session(
    session_id: int,
    principal: Principal = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    del principal

    try:
        course_session = get_session_or_404(session_id, db)

        db.query(Attendance).filter(Attendance.session_id == session_id).delete(synchronize_session=False)
        db.delete(course_session)
        db.commit()
    except SQLAlchemyError as exc:
        raise store_failure(db, exc, 'deleting a session') from exc

    return 'Session deleted'
