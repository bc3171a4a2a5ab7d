import logging

from django.db import transaction
from django.db.models import Count

from courses.models import Course, Quiz
from lms_backend.exceptions import ConflictError, ValidationError
from lms_backend.utils import parse_bool, parse_datetime_field

from .models import Batch, BatchCourse, BatchSubscription

logger = logging.getLogger(__name__)

DUPLICATE_NAME = "Batch with this name already exists"


def _clean_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Batch name is required")
    return name


def active_batches():
    return Batch.objects.filter(active=True).order_by("name")


def create_batch(user, data) -> Batch:
    name = _clean_name(data.get("name"))
    if Batch.objects.filter(name__iexact=name).exists():
        raise ConflictError(DUPLICATE_NAME)
    batch = Batch.objects.create(
        name=name,
        description=data.get("description") or "",
        created_by=user,
    )
    logger.info("Batch %s (%s) created by user %s", batch.pk, batch.name, user.pk)
    return batch


def update_batch(batch, data) -> Batch:
    if "name" in data:
        name = _clean_name(data.get("name"))
        if Batch.objects.filter(name__iexact=name).exclude(pk=batch.pk).exists():
            raise ConflictError(DUPLICATE_NAME)
        batch.name = name
    if "description" in data:
        batch.description = data.get("description") or ""
    if "active" in data:
        batch.active = parse_bool(data.get("active"))
    batch.save()
    return batch


def delete_batch(batch) -> bool:
    """
    Delete the batch, or only deactivate it while users are still assigned.
    Returns True when the row was deleted.
    """
    if batch.members.exists():
        batch.active = False
        batch.save(update_fields=["active", "updated_at"])
        logger.info("Batch %s deactivated; members are still assigned", batch.pk)
        return False
    batch.delete()
    return True


def assign_batches_to_course(course, batch_ids) -> list:
    """Replace the course's batch assignments. Unknown ids are skipped."""
    if batch_ids is None:
        batch_ids = []
    if not isinstance(batch_ids, list):
        raise ValidationError("batchIds must be a list")
    batches = list(Batch.objects.filter(pk__in=[value for value in batch_ids if str(value).isdigit()]))
    with transaction.atomic():
        BatchCourse.objects.filter(course=course).delete()
        BatchCourse.objects.bulk_create([BatchCourse(batch=batch, course=course) for batch in batches])
    skipped = len(batch_ids) - len(batches)
    if skipped:
        logger.warning("Skipped %s unknown batch ids while assigning course %s", skipped, course.pk)
    return batches


def batch_courses(batch):
    return Course.objects.filter(batch_assignments__batch=batch).select_related("created_by").distinct()


def batch_quizzes(batch):
    return Quiz.objects.filter(batch_assignments__batch=batch).annotate(question_count=Count("questions", distinct=True))


def set_user_batches(user, batch_ids, subscriptions=None) -> None:
    """
    Replace a user's batch memberships and subscriptions.

    ``subscriptions`` is a list of ``{"batch": id, "expires_on": datetime|None}``;
    entries for batches the user is not a member of are rejected.
    """
    batches = list(Batch.objects.filter(pk__in=batch_ids or []))
    member_ids = {batch.pk for batch in batches}
    parsed = []
    for entry in subscriptions or []:
        try:
            batch_id = int(entry.get("batch"))
        except (AttributeError, TypeError, ValueError):
            raise ValidationError("Each subscription needs a batch id")
        if batch_id not in member_ids:
            raise ValidationError("Subscriptions can only reference batches the user belongs to")
        parsed.append((batch_id, parse_datetime_field(entry.get("expires_on") or entry.get("expiresOn"), "expires_on")))

    with transaction.atomic():
        user.batches.set(batches)
        BatchSubscription.objects.filter(user=user).delete()
        for batch_id, expires_on in parsed:
            BatchSubscription.objects.create(user=user, batch_id=batch_id, expires_on=expires_on)
