"""
Course entitlement.

``resolve_access`` decides what a user may see of a course. Resolution order,
first match wins:

1. Admins, Super Admins and the course author get full access.
2. An Active enrollment grants full access until its expiry date; once it
   has passed the user drops to preview with ``enrollment_expired``. An
   enrollment already marked Expired gives the same result.
3. Membership of an active batch the course is assigned to grants full
   access while at least one such batch has no subscription or an
   unexpired one; otherwise preview with ``subscription_expired``.
4. Everybody else (anonymous users included) gets preview access.

This is a read-only path; callers decide whether preview access blocks the
request or only hides locked lesson content.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from django.utils import timezone

from accounts.models import User
from batches.models import BatchCourse, BatchSubscription
from courses.models import Enrollment
from lms_backend.exceptions import AuthorizationError

ENROLLMENT_EXPIRED = "enrollment_expired"
SUBSCRIPTION_EXPIRED = "subscription_expired"


class AccessLevel(str, Enum):
    FULL = "full"
    PREVIEW_ONLY = "preview_only"


class AccessSource(str, Enum):
    STAFF = "staff"
    AUTHOR = "author"
    ENROLLMENT = "enrollment"
    BATCH = "batch"
    NONE = "none"


@dataclass(frozen=True)
class CourseAccess:
    level: AccessLevel
    source: AccessSource = AccessSource.NONE
    enrollment: Optional[Enrollment] = None
    expires_on: Optional[datetime] = None
    condition: Optional[str] = None

    @property
    def has_full_access(self) -> bool:
        return self.level == AccessLevel.FULL

    def to_dict(self) -> dict:
        if self.enrollment is not None:
            enrollment_type = self.enrollment.enrollment_type
        elif self.source == AccessSource.BATCH:
            enrollment_type = Enrollment.EnrollmentType.BATCH.value
        else:
            enrollment_type = None
        return {
            "has_full_access": self.has_full_access,
            "enrollment_type": enrollment_type,
            "expiry_date": self.expires_on,
            "condition": self.condition,
        }


PREVIEW = CourseAccess(level=AccessLevel.PREVIEW_ONLY)


def _batch_access(user, course, now) -> Optional[CourseAccess]:
    batch_ids = list(
        BatchCourse.objects.filter(
            course=course, batch__active=True, batch__members=user
        ).values_list("batch_id", flat=True)
    )
    if not batch_ids:
        return None

    expiries = dict(
        BatchSubscription.objects.filter(user=user, batch_id__in=batch_ids).values_list("batch_id", "expires_on")
    )
    unbounded = False
    latest = None
    for batch_id in batch_ids:
        expires_on = expiries.get(batch_id)
        if expires_on is None:
            # Membership without a time limit
            unbounded = True
        elif expires_on > now and (latest is None or expires_on > latest):
            latest = expires_on

    if unbounded or latest is not None:
        return CourseAccess(
            level=AccessLevel.FULL,
            source=AccessSource.BATCH,
            expires_on=None if unbounded else latest,
        )
    return CourseAccess(
        level=AccessLevel.PREVIEW_ONLY, source=AccessSource.BATCH, condition=SUBSCRIPTION_EXPIRED
    )


def resolve_access(user, course, now: Optional[datetime] = None) -> CourseAccess:
    if user is None or not user.is_authenticated:
        return PREVIEW
    now = now or timezone.now()

    if user.role in (User.Role.SUPER_ADMIN, User.Role.ADMIN):
        return CourseAccess(level=AccessLevel.FULL, source=AccessSource.STAFF)
    if course.created_by_id == user.pk:
        return CourseAccess(level=AccessLevel.FULL, source=AccessSource.AUTHOR)

    enrollment = Enrollment.objects.filter(
        user=user, course=course, status=Enrollment.Status.ACTIVE
    ).first()
    if enrollment is not None:
        if enrollment.expiry_date is not None and enrollment.expiry_date < now:
            return CourseAccess(
                level=AccessLevel.PREVIEW_ONLY,
                source=AccessSource.ENROLLMENT,
                enrollment=enrollment,
                expires_on=enrollment.expiry_date,
                condition=ENROLLMENT_EXPIRED,
            )
        return CourseAccess(
            level=AccessLevel.FULL,
            source=AccessSource.ENROLLMENT,
            enrollment=enrollment,
            expires_on=enrollment.expiry_date,
        )

    batch_access = _batch_access(user, course, now)
    if batch_access is not None:
        return batch_access
    if Enrollment.objects.filter(user=user, course=course, status=Enrollment.Status.EXPIRED).exists():
        return CourseAccess(
            level=AccessLevel.PREVIEW_ONLY, source=AccessSource.ENROLLMENT, condition=ENROLLMENT_EXPIRED
        )
    return PREVIEW


def require_full_access(user, course, message: str = "You need to enroll in this course") -> CourseAccess:
    """Resolve access and raise AuthorizationError unless it is FULL."""
    access = resolve_access(user, course)
    if not access.has_full_access:
        raise AuthorizationError(message)
    return access
