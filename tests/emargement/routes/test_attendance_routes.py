from datetime import date

import pytest
from fastapi import HTTPException

from emargement.auth.dependencies import Principal
from emargement.models.attendance import Attendance
from emargement.models.session import CourseSession
from emargement.routes.attendance_routes import AttendanceRequest, list_attendees, record_attendance


def _principal(user) -> Principal:
    return Principal(id=user.id, name=user.name, email=user.email, role=user.role)


@pytest.fixture
def roster(db, users):
    trainer = users.create_user('Bob', 'bob@x.com', 'password1', 'trainer')
    ann = users.create_user('Ann', 'ann@x.com', 'password1', 'student')
    cal = users.create_user('Cal', 'cal@x.com', 'password1', 'student')
    course_session = CourseSession(title='Intro to Python', date=date(2026, 3, 2), trainer_id=trainer.id)
    db.add(course_session)
    db.commit()
    db.refresh(course_session)
    return course_session, _principal(trainer), _principal(ann), _principal(cal)


def _login(client, name: str, email: str, role: str) -> str:
    client.post('/auth/signup', json={'name': name, 'email': email, 'password': 'password1', 'role': role})
    return client.post('/auth/login', json={'email': email, 'password': 'password1'}).json()['token']


def test_record_attendance_marks_student_present(db, roster) -> None:
    course_session, _trainer, ann, _cal = roster

    record = record_attendance(session_id=course_session.id, data=None, principal=ann, db=db)

    assert record.session_id == course_session.id
    assert record.student_id == ann.id
    assert record.status is True


def test_record_attendance_twice_creates_two_rows(db, roster) -> None:
    course_session, _trainer, ann, _cal = roster

    first = record_attendance(session_id=course_session.id, data=None, principal=ann, db=db)
    second = record_attendance(session_id=course_session.id, data=None, principal=ann, db=db)

    assert first.id != second.id
    assert db.query(Attendance).filter(
        Attendance.session_id == course_session.id,
        Attendance.student_id == ann.id,
    ).count() == 2


def test_record_attendance_rejects_signing_in_another_student(db, roster) -> None:
    course_session, _trainer, ann, cal = roster

    with pytest.raises(HTTPException) as exception_info:
        record_attendance(
            session_id=course_session.id,
            data=AttendanceRequest(studentId=cal.id),
            principal=ann,
            db=db,
        )

    assert exception_info.value.status_code == 401
    assert db.query(Attendance).count() == 0


def test_record_attendance_accepts_own_student_id(db, roster) -> None:
    course_session, _trainer, ann, _cal = roster

    record = record_attendance(
        session_id=course_session.id,
        data=AttendanceRequest(studentId=ann.id),
        principal=ann,
        db=db,
    )

    assert record.student_id == ann.id


def test_record_attendance_returns_404_for_unknown_session(db, roster) -> None:
    _course_session, _trainer, ann, _cal = roster

    with pytest.raises(HTTPException) as exception_info:
        record_attendance(session_id=999, data=None, principal=ann, db=db)

    assert exception_info.value.status_code == 404


def test_list_attendees_returns_each_present_student_once(db, roster) -> None:
    course_session, trainer, ann, cal = roster
    record_attendance(session_id=course_session.id, data=None, principal=ann, db=db)
    record_attendance(session_id=course_session.id, data=None, principal=cal, db=db)
    record_attendance(session_id=course_session.id, data=None, principal=ann, db=db)

    attendees = list_attendees(session_id=course_session.id, principal=trainer, db=db)

    assert [(attendee.name, attendee.email) for attendee in attendees] == [
        ('Ann', 'ann@x.com'),
        ('Cal', 'cal@x.com'),
    ]


def test_list_attendees_is_empty_before_any_sign_in(db, roster) -> None:
    course_session, trainer, _ann, _cal = roster

    assert list_attendees(session_id=course_session.id, principal=trainer, db=db) == []


def test_student_token_cannot_read_roster(client) -> None:
    signup = client.post(
        '/auth/signup',
        json={'name': 'Ann', 'email': 'ann@x.com', 'password': 'password1', 'role': 'student'},
    )
    assert signup.status_code == 200
    assert 'id' in signup.json()

    login = client.post('/auth/login', json={'email': 'ann@x.com', 'password': 'password1'})
    assert login.status_code == 200
    token = login.json()['token']

    response = client.get('/sessions/1/emargement', headers={'Authorization': token})

    assert response.status_code == 401
    assert response.json() == {'detail': 'Unauthorized'}


def test_trainer_token_cannot_sign_in(client) -> None:
    token = _login(client, 'Bob', 'bob@x.com', 'trainer')

    response = client.post('/sessions/1/emargement', json={}, headers={'Authorization': token})

    assert response.status_code == 401


def test_emargement_flow_over_http(client) -> None:
    trainer_token = _login(client, 'Bob', 'bob@x.com', 'trainer')
    student_token = _login(client, 'Ann', 'ann@x.com', 'student')
    trainer_id = client.get('/auth/me', headers={'Authorization': trainer_token}).json()['id']
    student_id = client.get('/auth/me', headers={'Authorization': student_token}).json()['id']
    session_id = client.post(
        '/sessions',
        json={'title': 'Intro to Python', 'date': '2026-03-02', 'trainerId': trainer_id},
        headers={'Authorization': trainer_token},
    ).json()['id']

    recorded = client.post(
        f'/sessions/{session_id}/emargement',
        json={'studentId': student_id},
        headers={'Authorization': f'Bearer {student_token}'},
    )
    assert recorded.status_code == 200
    assert recorded.json() == {
        'id': recorded.json()['id'],
        'sessionId': session_id,
        'studentId': student_id,
        'status': True,
    }

    roster = client.get(f'/sessions/{session_id}/emargement', headers={'Authorization': trainer_token})
    assert roster.status_code == 200
    assert roster.json() == [{'id': student_id, 'name': 'Ann', 'email': 'ann@x.com'}]


def test_emargement_over_http_handles_out_of_range_ids(client) -> None:
    trainer_token = _login(client, 'Bob', 'bob@x.com', 'trainer')
    student_token = _login(client, 'Ann', 'ann@x.com', 'student')

    roster = client.get('/sessions/99999999999999999999/emargement', headers={'Authorization': trainer_token})
    recorded = client.post(
        '/sessions/1/emargement',
        json={'studentId': 99999999999999999999},
        headers={'Authorization': student_token},
    )

    assert roster.status_code == 404
    assert recorded.status_code == 400
