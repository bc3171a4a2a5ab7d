import logging
from dataclasses import dataclass
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from courses.models import Course, Enrollment
from lms_backend.exceptions import ConflictError, ValidationError

from .access_service import AccessSource, resolve_access
from .email_service import send_enrollment_email

logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "You are already enrolled in this course"


@dataclass
class EnrollmentOutcome:
    """Result of the enroll flow: either an enrollment or a pending payment."""

    enrollment: Optional[Enrollment] = None
    transaction: Optional[object] = None

    @property
    def requires_payment(self) -> bool:
        return self.enrollment is None


def active_enrollment(user, course) -> Optional[Enrollment]:
    return Enrollment.objects.filter(user=user, course=course, status=Enrollment.Status.ACTIVE).first()


def expire_lapsed_enrollments(user, course=None) -> int:
    """Move the user's Active enrollments whose expiry date has passed to Expired."""
    now = timezone.now()
    queryset = Enrollment.objects.filter(user=user, status=Enrollment.Status.ACTIVE, expiry_date__lt=now)
    if course is not None:
        queryset = queryset.filter(course=course)
    expired = queryset.update(status=Enrollment.Status.EXPIRED, updated_at=now)
    if expired:
        logger.info("Expired %s lapsed enrollment(s) for user %s", expired, user.pk)
    return expired


def grant_enrollment(user, course, enrollment_type, expiry_date=None, *, mailer=None) -> Enrollment:
    """
    Create an Active enrollment and bump the course's enrolled_count.

    A lapsed Active enrollment is expired first so the course can be renewed.
    Raises ConflictError when the user already holds a live Active enrollment,
    including when a concurrent request wins the race to the unique constraint.
    """
    try:
        with transaction.atomic():
            expire_lapsed_enrollments(user, course)
            if active_enrollment(user, course) is not None:
                raise ConflictError(ALREADY_ENROLLED)
            enrollment = Enrollment.objects.create(
                user=user,
                course=course,
                enrollment_type=enrollment_type,
                expiry_date=expiry_date,
            )
            Course.objects.filter(pk=course.pk).update(enrolled_count=F("enrolled_count") + 1)
    except IntegrityError as exc:
        raise ConflictError(ALREADY_ENROLLED) from exc

    logger.info(
        "Enrollment %s created: user=%s course=%s type=%s", enrollment.pk, user.pk, course.pk, enrollment_type
    )
    if mailer is not None:
        transaction.on_commit(lambda: send_enrollment_email(mailer, enrollment))
    return enrollment


def enroll(user, course, *, gateway, mailer=None) -> EnrollmentOutcome:
    """
    Enroll ``user`` the way the course allows: through a batch, for free,
    or by opening a payment order that has to be confirmed later.
    """
    from payments.services import create_payment_order

    if not course.is_published:
        raise ValidationError("Course is not available for enrollment")
    expire_lapsed_enrollments(user, course)
    if active_enrollment(user, course) is not None:
        raise ConflictError(ALREADY_ENROLLED)

    access = resolve_access(user, course)
    if access.has_full_access and access.source == AccessSource.BATCH:
        enrollment = grant_enrollment(
            user, course, Enrollment.EnrollmentType.BATCH, access.expires_on, mailer=mailer
        )
        return EnrollmentOutcome(enrollment=enrollment)

    if not course.effective_price:
        enrollment = grant_enrollment(user, course, Enrollment.EnrollmentType.FREE, mailer=mailer)
        return EnrollmentOutcome(enrollment=enrollment)

    if not course.enable_razorpay:
        raise ValidationError("Payment is not enabled for this course")

    return EnrollmentOutcome(transaction=create_payment_order(user, course, gateway))


def user_enrollments(user):
    return (
        Enrollment.objects.filter(user=user)
        .select_related("course", "course__created_by")
        .order_by("-enrolled_at")
    )
