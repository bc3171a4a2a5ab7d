import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Q

from accounts.policy import Action, can
from batches.models import BatchCourse
from courses.models import Course, Lesson
from lms_backend.exceptions import ConflictError, ValidationError
from lms_backend.utils import parse_bool

from .access_service import resolve_access
from .content_service import course_tree, delete_files, pdf_urls

logger = logging.getLogger(__name__)

THUMBNAIL_FOLDER = "courses/thumbnails"
EDITABLE_FIELDS = ("title", "description", "status", "price", "sale_price", "enable_razorpay")


def list_courses(user, status=None, search=None):
    """
    Courses visible to ``user``: managers see every status, authors also see
    their own drafts, everybody else only Published courses.
    """
    queryset = Course.objects.select_related("created_by")
    if user.is_authenticated and user.is_admin_role:
        pass
    elif user.is_authenticated:
        queryset = queryset.filter(Q(status=Course.Status.PUBLISHED) | Q(created_by=user))
    else:
        queryset = queryset.filter(status=Course.Status.PUBLISHED)

    if status:
        queryset = queryset.filter(status=status)
    if search:
        queryset = queryset.filter(Q(title__icontains=search) | Q(description__icontains=search))
    return queryset.order_by("-created_at")


def _decimal(value, field):
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError({field: "Must be a number."})


def _apply(course, data):
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data.get(field)
        if field in ("price", "sale_price"):
            value = _decimal(value, field)
            if field == "price" and value is None:
                value = Decimal("0.00")
        elif field == "enable_razorpay":
            value = parse_bool(value)
        elif field == "status" and value not in Course.Status.values:
            raise ValidationError({"status": f"Status must be one of {', '.join(Course.Status.values)}."})
        setattr(course, field, value)
    if not (course.title or "").strip():
        raise ValidationError({"title": "Course title is required."})


def create_course(user, data, storage, thumbnail=None) -> Course:
    course = Course(created_by=user)
    _apply(course, data)
    if thumbnail is not None:
        course.thumbnail = storage.upload(thumbnail, THUMBNAIL_FOLDER)
    course.save()
    logger.info("Course %s created by user %s", course.pk, user.pk)
    return course


def update_course(course, data, storage, thumbnail=None) -> Course:
    _apply(course, data)
    old_thumbnail = None
    if thumbnail is not None:
        old_thumbnail = course.thumbnail
        course.thumbnail = storage.upload(thumbnail, THUMBNAIL_FOLDER)
    course.save()
    if old_thumbnail:
        delete_files(storage, [old_thumbnail])
    return course


def delete_course(course, storage) -> None:
    """
    Delete a course and everything under it. Courses that anybody has
    enrolled in are kept.
    """
    enrollment_count = course.enrollments.count()
    if enrollment_count:
        raise ConflictError(
            "Cannot delete course with existing enrollments",
            extra={"enrollment_count": enrollment_count},
        )

    urls = pdf_urls(Lesson.objects.filter(chapter__section__course=course))
    if course.thumbnail:
        urls.append(course.thumbnail)
    course_id = course.pk
    with transaction.atomic():
        BatchCourse.objects.filter(course=course).delete()
        course.delete()
    delete_files(storage, urls)
    logger.info("Course %s deleted with %s stored files", course_id, len(urls))


def course_detail(course, user) -> dict:
    access = resolve_access(user, course)
    batches = [
        {"id": assignment.batch_id, "name": assignment.batch.name}
        for assignment in course.batch_assignments.select_related("batch")
    ]
    return {
        "sections": course_tree(course, access.has_full_access),
        "batches": batches,
        "user_access": access.to_dict(),
        "can_edit": can(user, Action.COURSE_UPDATE, course),
    }
