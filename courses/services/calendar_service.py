"""
Quiz calendar events and their Google Calendar mirror.

Events always live in the database. Users who connected Google Calendar also
get a copy in their primary calendar; Google failures are logged and never
undo the database write.
"""
import logging
from datetime import timezone as dt_timezone

from django.core import signing
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from accounts.policy import Action, can
from courses.models import CalendarEvent, Quiz
from lms_backend.exceptions import AuthorizationError, ExternalServiceError, NotFoundError, ValidationError

from lms_backend.utils import parse_datetime_field

logger = logging.getLogger(__name__)

OAUTH_STATE_SALT = "calendar-oauth"
OAUTH_STATE_MAX_AGE = 600


def _mirrors_to_google(user) -> bool:
    return bool(user.calendar_integration_enabled and user.google_access_token)


def _sync(action: str, event, call) -> None:
    try:
        call()
    except Exception as e:
        logger.error(f"Google Calendar {action} failed for event {event.pk}: {str(e)}", exc_info=True)


def create_event(user, data, calendar) -> CalendarEvent:
    quiz_id = data.get("quizId") or data.get("quiz_id")
    payload = data.get("event") or {}
    if not quiz_id or not isinstance(payload, dict) or not payload.get("start") or not payload.get("end"):
        raise ValidationError("Missing required event information")
    try:
        quiz = Quiz.objects.get(pk=quiz_id)
    except (Quiz.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Quiz not found")

    start = parse_datetime_field(payload["start"], "start")
    end = parse_datetime_field(payload["end"], "end")
    if end <= start:
        raise ValidationError("End date must be after start date")

    with transaction.atomic():
        event = CalendarEvent.objects.create(
            quiz=quiz,
            user=user,
            summary=payload.get("summary") or quiz.title,
            description=payload.get("description") or f"Quiz: {quiz.title}",
            location=payload.get("location") or "",
            color_id=payload.get("colorId") or payload.get("color_id") or "1",
            start_datetime=start,
            end_datetime=end,
        )
        quiz.is_scheduled = True
        quiz.start_date = start
        quiz.end_date = end
        quiz.save(update_fields=["is_scheduled", "start_date", "end_date", "updated_at"])

    if _mirrors_to_google(user):
        def insert():
            event.google_event_id = calendar.create_event(user, event)
            event.save(update_fields=["google_event_id", "updated_at"])

        _sync("insert", event, insert)
    return event


def _owned_event(user, event_id) -> CalendarEvent:
    try:
        event = CalendarEvent.objects.select_related("quiz").get(pk=event_id)
    except (CalendarEvent.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Calendar event not found")
    if not can(user, Action.CALENDAR_EVENT_MANAGE, event):
        raise AuthorizationError("Not authorized to modify this event")
    return event


def update_event(user, event_id, data, calendar) -> CalendarEvent:
    event = _owned_event(user, event_id)
    payload = data.get("event", data) or {}

    for source, field in (
        ("summary", "summary"),
        ("description", "description"),
        ("location", "location"),
        ("colorId", "color_id"),
    ):
        if payload.get(source):
            setattr(event, field, payload[source])
    if payload.get("start"):
        event.start_datetime = parse_datetime_field(payload["start"], "start")
    if payload.get("end"):
        event.end_datetime = parse_datetime_field(payload["end"], "end")
    if event.end_datetime <= event.start_datetime:
        raise ValidationError("End date must be after start date")

    with transaction.atomic():
        event.save()
        quiz = event.quiz
        quiz.start_date = event.start_datetime
        quiz.end_date = event.end_datetime
        quiz.save(update_fields=["start_date", "end_date", "updated_at"])

    if event.google_event_id and _mirrors_to_google(user):
        _sync("update", event, lambda: calendar.update_event(user, event))
    return event


def delete_event(user, event_id, calendar) -> None:
    event = _owned_event(user, event_id)
    if event.google_event_id and _mirrors_to_google(user):
        _sync("delete", event, lambda: calendar.delete_event(user, event.google_event_id))

    with transaction.atomic():
        quiz = event.quiz
        quiz.is_scheduled = False
        quiz.save(update_fields=["is_scheduled", "updated_at"])
        event.delete()


def user_events(user):
    return CalendarEvent.objects.filter(user=user).select_related("quiz").order_by("start_datetime")


def upcoming_events(user):
    return user_events(user).filter(end_datetime__gte=timezone.now())


def quiz_schedule(quiz) -> dict:
    return {
        "quiz_id": quiz.pk,
        "is_scheduled": quiz.is_scheduled,
        "start_date": quiz.start_date,
        "end_date": quiz.end_date,
    }


# Google account connection ---------------------------------------------------


def authorization_url(user, calendar) -> str:
    state = signing.dumps({"user_id": user.pk}, salt=OAUTH_STATE_SALT)
    return calendar.authorization_url(state)


def complete_oauth(code, state, calendar) -> User:
    """Exchange the OAuth code and store the user's Google tokens."""
    if not code or not state:
        raise ValidationError("Missing authorization code")
    try:
        user_id = signing.loads(state, salt=OAUTH_STATE_SALT, max_age=OAUTH_STATE_MAX_AGE)["user_id"]
    except (signing.BadSignature, KeyError, TypeError):
        raise ValidationError("Invalid or expired authorization state")
    try:
        user = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFoundError("User not found")

    try:
        tokens = calendar.exchange_code(code)
    except Exception as exc:
        logger.error(f"Google token exchange failed for user {user.pk}: {str(exc)}", exc_info=True)
        raise ExternalServiceError("Failed to connect Google Calendar") from exc
    user.google_access_token = tokens.get("access_token") or ""
    if tokens.get("refresh_token"):
        user.google_refresh_token = tokens["refresh_token"]
    expiry = tokens.get("expiry")
    if expiry is not None and timezone.is_naive(expiry):
        expiry = timezone.make_aware(expiry, dt_timezone.utc)
    user.google_token_expiry = expiry
    user.calendar_integration_enabled = True
    user.save(update_fields=[
        "google_access_token", "google_refresh_token", "google_token_expiry", "calendar_integration_enabled"
    ])
    logger.info("Google Calendar connected for user %s", user.pk)
    return user


def disconnect(user) -> None:
    user.google_access_token = ""
    user.google_refresh_token = ""
    user.google_token_expiry = None
    user.calendar_integration_enabled = False
    user.save(update_fields=[
        "google_access_token", "google_refresh_token", "google_token_expiry", "calendar_integration_enabled"
    ])
