import pytest
from django.utils import timezone

from accounts.models import User
from accounts.services import user_service
from batches import services
from batches.models import Batch, BatchCourse, BatchSubscription
from lms_backend.exceptions import AuthorizationError, ConflictError, ValidationError

from .conftest import FakeMailer


def test_batch_names_are_unique_ignoring_case(admin_user):
    services.create_batch(admin_user, {"name": "Morning"})
    with pytest.raises(ConflictError):
        services.create_batch(admin_user, {"name": " morning "})
    with pytest.raises(ValidationError):
        services.create_batch(admin_user, {"name": ""})


def test_batch_with_members_is_only_deactivated(make_batch, student):
    batch = make_batch(members=[student])

    assert services.delete_batch(batch) is False
    batch.refresh_from_db()
    assert batch.active is False
    assert services.delete_batch(make_batch(name="Empty")) is True
    assert not Batch.objects.filter(name="Empty").exists()


def test_course_batches_are_replaced(course, make_batch):
    first, second = make_batch(name="A"), make_batch(name="B")
    services.assign_batches_to_course(course, [first.pk])

    assigned = services.assign_batches_to_course(course, [second.pk, 999, "x"])

    assert assigned == [second]
    assert list(BatchCourse.objects.values_list("batch_id", flat=True)) == [second.pk]
    assert list(services.batch_courses(second)) == [course]


def test_user_batches_and_subscriptions_are_replaced(student, make_batch):
    first, second = make_batch(name="A"), make_batch(name="B")
    services.set_user_batches(student, [first.pk], [{"batch": first.pk, "expires_on": "2030-01-01"}])

    services.set_user_batches(student, [second.pk], [{"batch": second.pk, "expiresOn": None}])

    assert list(student.batches.all()) == [second]
    subscription = BatchSubscription.objects.get(user=student)
    assert subscription.batch == second
    assert subscription.expires_on is None


def test_subscriptions_must_reference_member_batches(student, make_batch):
    batch = make_batch()
    with pytest.raises(ValidationError):
        services.set_user_batches(student, [], [{"batch": batch.pk, "expires_on": timezone.now()}])


def test_only_super_admins_grant_super_admin(admin_user, super_admin, student):
    with pytest.raises(AuthorizationError):
        user_service.update_role(admin_user, student, User.Role.SUPER_ADMIN)
    assert user_service.update_role(super_admin, student, User.Role.SUPER_ADMIN).is_super_admin


def test_course_authors_cannot_be_deleted(super_admin, mentor, course):
    with pytest.raises(ConflictError):
        user_service.delete_user(super_admin, mentor)
    assert User.objects.filter(pk=mentor.pk).exists()


def test_super_admins_are_never_deleted(super_admin, make_user):
    other = make_user(User.Role.SUPER_ADMIN)
    with pytest.raises(AuthorizationError):
        user_service.delete_user(super_admin, other)


def test_list_users_filters(student, mentor, make_batch):
    batch = make_batch(members=[student])

    assert list(user_service.list_users(role=User.Role.MENTOR)) == [mentor]
    assert list(user_service.list_users(batch=batch.pk)) == [student]
    assert list(user_service.list_users(search=student.email.upper())) == [student]


def test_bulk_email_reports_each_recipient(student, mentor):
    mailer = FakeMailer(fail_for={mentor.email})

    results = user_service.bulk_email(mailer, "Holiday", "No class on Friday", [student.pk, mentor.pk])

    assert results == {"success": [student.email], "failed": [mentor.email]}
    with pytest.raises(ValidationError):
        user_service.bulk_email(mailer, "", "body", [student.pk])
