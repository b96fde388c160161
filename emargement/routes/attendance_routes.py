import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from emargement.auth.dependencies import Principal, get_db, require_student, require_trainer
from emargement.database import MAX_ROW_ID
from emargement.models.attendance import Attendance
from emargement.models.user import User
from emargement.routes.responses import store_failure
from emargement.routes.session_routes import get_session_or_404

router = APIRouter(tags=['emargement'])

logger = logging.getLogger(__name__)


class AttendanceRequest(BaseModel):
    student_id: int | None = Field(default=None, alias='studentId', ge=1, le=MAX_ROW_ID)


class AttendanceResponse(BaseModel):
    id: int
    session_id: int = Field(serialization_alias='sessionId')
    student_id: int = Field(serialization_alias='studentId')
    status: bool


class AttendeeResponse(BaseModel):
    id: int
    name: str
    email: str


@router.post('/{session_id}/emargement', response_model=AttendanceResponse)
def record_attendance(
    session_id: int,
    data: AttendanceRequest | None = None,
    principal: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    student_id = principal.id
    if data is not None and data.student_id is not None and data.student_id != principal.id:
        # Students sign in themselves only; reported like any other auth failure.
        logger.info('Student %s tried to sign in student %s', principal.id, data.student_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Unauthorized')

    try:
        get_session_or_404(session_id, db)

        # No uniqueness check: signing in twice records two rows.
        attendance = Attendance(session_id=session_id, student_id=student_id, status=True)
        db.add(attendance)
        db.commit()
        db.refresh(attendance)

        return AttendanceResponse(
            id=attendance.id,
            session_id=attendance.session_id,
            student_id=attendance.student_id,
            status=attendance.status,
        )
    except SQLAlchemyError as exc:
        raise store_failure(db, exc, 'recording attendance') from exc


@router.get('/{session_id}/emargement', response_model=list[AttendeeResponse])
def list_attendees(
    session_id: int,
    principal: Principal = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    del principal

    try:
        get_session_or_404(session_id, db)

        rows = db.query(User.id, User.name, User.email).join(
            Attendance,
            Attendance.student_id == User.id,
        ).filter(
            Attendance.session_id == session_id,
        ).order_by(Attendance.id.asc()).all()
    except SQLAlchemyError as exc:
        raise store_failure(db, exc, 'listing attendees') from exc

    attendees: list[AttendeeResponse] = []
    seen_ids: set[int] = set()
    for user_id, name, email in rows:
        if user_id in seen_ids:
            continue
        seen_ids.add(user_id)
        attendees.append(AttendeeResponse(id=user_id, name=name, email=email))

    return attendees
