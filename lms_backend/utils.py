from datetime import datetime, time, timezone as dt_timezone

from django.core.exceptions import ObjectDoesNotExist
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from lms_backend.exceptions import NotFoundError, ValidationError

TRUE_VALUES = (True, 1, "1", "true", "True", "yes", "on")


def parse_bool(value) -> bool:
    return value in TRUE_VALUES


def parse_datetime_field(value, field):
    """
    Parse an ISO datetime (or a bare date, taken as midnight) from request
    data. Naive values are taken as UTC.
    """
    if value in (None, ""):
        return None
    if isinstance(value, str):
        try:
            parsed = parse_datetime(value)
            if parsed is None:
                day = parse_date(value)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            parsed = None
    else:
        parsed = value
    if not isinstance(parsed, datetime):
        raise ValidationError({field: "Invalid date/time."})
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def get_or_404(queryset, message="Not found.", **lookup):
    """``queryset.get(**lookup)``, raising NotFoundError with ``message`` on a miss or a malformed id."""
    try:
        return queryset.get(**lookup)
    except (ObjectDoesNotExist, ValueError, TypeError):
        raise NotFoundError(message)
