from datetime import timedelta

from django.contrib.auth.models import AnonymousUser
from django.utils import timezone

from accounts.models import User
from courses.models import Enrollment
from courses.services.access_service import (
    ENROLLMENT_EXPIRED,
    SUBSCRIPTION_EXPIRED,
    AccessLevel,
    AccessSource,
    resolve_access,
)


def test_staff_and_author_have_full_access(make_user, course, mentor):
    assert resolve_access(make_user(User.Role.ADMIN), course).source == AccessSource.STAFF
    assert resolve_access(mentor, course).source == AccessSource.AUTHOR


def test_strangers_and_anonymous_users_get_preview(student, course):
    assert resolve_access(student, course).level == AccessLevel.PREVIEW_ONLY
    assert resolve_access(AnonymousUser(), course).level == AccessLevel.PREVIEW_ONLY


def test_active_enrollment_grants_full_access(student, course):
    Enrollment.objects.create(user=student, course=course, enrollment_type=Enrollment.EnrollmentType.FREE)
    access = resolve_access(student, course)
    assert access.level == AccessLevel.FULL
    assert access.to_dict()["enrollment_type"] == "free"


def test_expired_enrollment_drops_to_preview(student, course):
    Enrollment.objects.create(
        user=student,
        course=course,
        enrollment_type=Enrollment.EnrollmentType.SUBSCRIPTION,
        expiry_date=timezone.now() - timedelta(days=1),
    )
    access = resolve_access(student, course)
    assert access.level == AccessLevel.PREVIEW_ONLY
    assert access.condition == ENROLLMENT_EXPIRED


def test_batch_membership_without_subscription_is_unbounded(student, course, make_batch):
    make_batch(members=[student], courses=[course])
    access = resolve_access(student, course)
    assert access.level == AccessLevel.FULL
    assert access.source == AccessSource.BATCH
    assert access.expires_on is None


def test_expired_batch_subscription_resolves_to_preview(student, course, make_batch):
    make_batch(members=[student], courses=[course], expires_on=timezone.now() - timedelta(days=1))
    access = resolve_access(student, course)
    assert access.level == AccessLevel.PREVIEW_ONLY
    assert access.condition == SUBSCRIPTION_EXPIRED


def test_latest_unexpired_subscription_wins(student, course, make_batch):
    later = timezone.now() + timedelta(days=30)
    make_batch("Expired", members=[student], courses=[course], expires_on=timezone.now() - timedelta(days=1))
    make_batch("Current", members=[student], courses=[course], expires_on=later)
    access = resolve_access(student, course)
    assert access.level == AccessLevel.FULL
    assert access.expires_on == later


def test_inactive_batches_grant_nothing(student, course, make_batch):
    make_batch(members=[student], courses=[course], active=False)
    assert resolve_access(student, course).level == AccessLevel.PREVIEW_ONLY
