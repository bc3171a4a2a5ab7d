from typing import Optional

from courses.models import Lesson, ProgressTracking
from lms_backend.exceptions import ValidationError

from .access_service import require_full_access

ENROLL_TO_TRACK = "You need to enroll in this course to track progress"


def _clean_percentage(value) -> Optional[int]:
    if value is None:
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Progress percentage must be a number")
    if not 0 <= value <= 100:
        raise ValidationError("Progress percentage must be between 0 and 100")
    return value


def upsert_progress(user, lesson, completed=None, progress_percentage=None) -> ProgressTracking:
    """
    Create the (user, lesson) record on first access, then overwrite only the
    fields that were supplied. last_accessed moves on every call.
    """
    progress_percentage = _clean_percentage(progress_percentage)
    progress, _ = ProgressTracking.objects.get_or_create(
        user=user, lesson=lesson, defaults={"course": lesson.course}
    )
    update_fields = ["last_accessed"]
    if completed is not None:
        progress.completed = bool(completed)
        update_fields.append("completed")
    if progress_percentage is not None:
        progress.progress_percentage = progress_percentage
        update_fields.append("progress_percentage")
    progress.save(update_fields=update_fields)
    return progress


def record_progress(user, lesson, completed=None, progress_percentage=None) -> ProgressTracking:
    require_full_access(user, lesson.course, ENROLL_TO_TRACK)
    return upsert_progress(user, lesson, completed, progress_percentage)


def lesson_progress(user, lesson) -> Optional[ProgressTracking]:
    require_full_access(user, lesson.course, ENROLL_TO_TRACK)
    return ProgressTracking.objects.filter(user=user, lesson=lesson).first()


def course_progress(user, course) -> dict:
    require_full_access(user, course, ENROLL_TO_TRACK)
    records = list(
        ProgressTracking.objects.filter(user=user, course=course).select_related("lesson")
    )
    total_lessons = Lesson.objects.filter(chapter__section__course=course).count()
    completed_lessons = sum(1 for record in records if record.completed)
    return {
        "progress": records,
        "overall_progress": round(completed_lessons / total_lessons * 100) if total_lessons else 0,
        "total_lessons": total_lessons,
        "completed_lessons": completed_lessons,
    }
