from datetime import timedelta

import pytest
from django.core import signing
from django.utils import timezone

from courses.services import calendar_service
from lms_backend.exceptions import AuthorizationError, ExternalServiceError, ValidationError


class FakeCalendar:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if self.fail:
            raise RuntimeError("Google is down")

    def create_event(self, user, event):
        self._record("create", event.pk)
        return "gcal-1"

    def update_event(self, user, event):
        self._record("update", event.google_event_id)

    def delete_event(self, user, google_event_id):
        self._record("delete", google_event_id)

    def authorization_url(self, state):
        return f"https://accounts.google.com/o/oauth2/auth?state={state}"

    def exchange_code(self, code):
        self._record("exchange", code)
        return {"access_token": "access", "refresh_token": "refresh", "expiry": None}


def event_data(quiz, start=None, hours=1):
    start = start or timezone.now() + timedelta(days=1)
    return {
        "quizId": quiz.pk,
        "event": {"summary": "Vectors test", "start": start.isoformat(), "end": (start + timedelta(hours=hours)).isoformat()},
    }


@pytest.fixture
def connected(student):
    student.calendar_integration_enabled = True
    student.google_access_token = "token"
    student.save()
    return student


def test_event_schedules_the_quiz(student, quiz):
    event = calendar_service.create_event(student, event_data(quiz), FakeCalendar())

    quiz.refresh_from_db()
    assert quiz.is_scheduled
    assert quiz.start_date == event.start_datetime
    assert event.google_event_id == ""


def test_event_window_must_be_ordered(student, quiz):
    with pytest.raises(ValidationError):
        calendar_service.create_event(student, event_data(quiz, hours=-1), FakeCalendar())
    with pytest.raises(ValidationError):
        calendar_service.create_event(student, {"quizId": quiz.pk}, FakeCalendar())


def test_connected_users_get_a_google_copy(connected, quiz):
    calendar = FakeCalendar()
    event = calendar_service.create_event(connected, event_data(quiz), calendar)
    assert event.google_event_id == "gcal-1"

    calendar_service.delete_event(connected, event.pk, calendar)

    assert calendar.calls[-1] == ("delete", "gcal-1")
    quiz.refresh_from_db()
    assert not quiz.is_scheduled


def test_google_failures_keep_the_event(connected, quiz):
    event = calendar_service.create_event(connected, event_data(quiz), FakeCalendar(fail=True))
    assert event.pk is not None
    assert event.google_event_id == ""


def test_only_the_owner_changes_an_event(student, mentor, quiz):
    event = calendar_service.create_event(student, event_data(quiz), FakeCalendar())
    with pytest.raises(AuthorizationError):
        calendar_service.update_event(mentor, event.pk, {"summary": "Mine now"}, FakeCalendar())


def test_upcoming_events_skip_past_ones(student, quiz):
    calendar_service.create_event(student, event_data(quiz, start=timezone.now() - timedelta(days=2)), FakeCalendar())
    upcoming = calendar_service.create_event(student, event_data(quiz), FakeCalendar())

    assert list(calendar_service.upcoming_events(student)) == [upcoming]
    assert calendar_service.user_events(student).count() == 2


def test_oauth_round_trip(student):
    calendar = FakeCalendar()
    url = calendar_service.authorization_url(student, calendar)
    state = url.split("state=", 1)[1]

    user = calendar_service.complete_oauth("code-1", state, calendar)

    assert user.calendar_integration_enabled
    assert user.google_refresh_token == "refresh"
    calendar_service.disconnect(user)
    user.refresh_from_db()
    assert not user.calendar_integration_enabled
    assert user.google_access_token == ""


def test_oauth_rejects_tampered_state(student):
    with pytest.raises(ValidationError):
        calendar_service.complete_oauth("code-1", "forged", FakeCalendar())


def test_failed_token_exchange(student):
    state = signing.dumps({"user_id": student.pk}, salt=calendar_service.OAUTH_STATE_SALT)
    with pytest.raises(ExternalServiceError):
        calendar_service.complete_oauth("code-1", state, FakeCalendar(fail=True))
