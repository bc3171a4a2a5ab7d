from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from courses.models import Course, Enrollment
from courses.services import enrollment_service
from courses.services.access_service import ENROLLMENT_EXPIRED, resolve_access
from lms_backend.exceptions import ConflictError, InvalidSignature, ValidationError
from payments import services as payment_services
from payments.models import Transaction

from .conftest import sign


def test_sale_price_must_be_below_price(make_course):
    with pytest.raises(DjangoValidationError):
        make_course(price="500", sale_price="500")


def test_sale_price_constraint_holds_in_the_database(paid_course):
    with pytest.raises(IntegrityError), transaction.atomic():
        Course.objects.filter(pk=paid_course.pk).update(sale_price=Decimal("1200"))


def test_only_one_active_enrollment_per_user_and_course(student, course):
    Enrollment.objects.create(user=student, course=course, enrollment_type=Enrollment.EnrollmentType.FREE)
    with pytest.raises(IntegrityError), transaction.atomic():
        Enrollment.objects.create(user=student, course=course, enrollment_type=Enrollment.EnrollmentType.PAID)

    # Expired enrollments do not count
    Enrollment.objects.filter(user=student, course=course).update(status=Enrollment.Status.EXPIRED)
    Enrollment.objects.create(user=student, course=course, enrollment_type=Enrollment.EnrollmentType.PAID)


def test_free_course_enrolls_immediately(student, course, gateway, mailer, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        outcome = enrollment_service.enroll(student, course, gateway=gateway, mailer=mailer)

    assert not outcome.requires_payment
    assert outcome.enrollment.enrollment_type == Enrollment.EnrollmentType.FREE
    course.refresh_from_db()
    assert course.enrolled_count == 1
    assert [message["to"] for message in mailer.sent] == [student.email]


def test_enrolling_twice_is_rejected(student, course, gateway):
    enrollment_service.enroll(student, course, gateway=gateway)
    with pytest.raises(ConflictError):
        enrollment_service.enroll(student, course, gateway=gateway)


def test_draft_courses_cannot_be_enrolled(student, make_course, gateway):
    draft = make_course(status=Course.Status.DRAFT)
    with pytest.raises(ValidationError):
        enrollment_service.enroll(student, draft, gateway=gateway)


def test_batch_members_enroll_through_their_batch(student, paid_course, make_batch, gateway):
    expires_on = timezone.now() + timedelta(days=10)
    make_batch(members=[student], courses=[paid_course], expires_on=expires_on)

    outcome = enrollment_service.enroll(student, paid_course, gateway=gateway)

    assert outcome.enrollment.enrollment_type == Enrollment.EnrollmentType.BATCH
    assert outcome.enrollment.expiry_date == expires_on
    assert not gateway.client.order.created


def test_paid_course_opens_an_order_at_the_sale_price(student, paid_course, gateway):
    outcome = enrollment_service.enroll(student, paid_course, gateway=gateway)

    assert outcome.requires_payment
    payment = outcome.transaction
    assert payment.amount == Decimal("800")
    assert payment.status == Transaction.STATUS_CREATED
    assert gateway.client.order.created[0]["amount"] == 80000
    assert payment_services.checkout_details(payment)["amount"] == 80000


def test_confirmed_payment_creates_a_paid_enrollment(student, paid_course, gateway):
    payment = enrollment_service.enroll(student, paid_course, gateway=gateway).transaction

    enrollment = payment_services.confirm_payment(
        payment.order_id, "pay_1", sign(payment.order_id, "pay_1"), gateway, user=student
    )

    assert enrollment.enrollment_type == Enrollment.EnrollmentType.PAID
    payment.refresh_from_db()
    paid_course.refresh_from_db()
    assert payment.status == Transaction.STATUS_CAPTURED
    assert payment.enrollment == enrollment
    assert paid_course.enrolled_count == 1


def test_confirming_twice_is_idempotent(student, paid_course, gateway):
    payment = enrollment_service.enroll(student, paid_course, gateway=gateway).transaction
    signature = sign(payment.order_id, "pay_1")

    first = payment_services.confirm_payment(payment.order_id, "pay_1", signature, gateway, user=student)
    second = payment_services.confirm_payment(payment.order_id, "pay_1", signature, gateway, user=student)

    assert first.pk == second.pk
    assert Enrollment.objects.filter(user=student, course=paid_course).count() == 1
    paid_course.refresh_from_db()
    assert paid_course.enrolled_count == 1


def test_invalid_signature_fails_the_transaction(student, paid_course, gateway):
    payment = enrollment_service.enroll(student, paid_course, gateway=gateway).transaction

    with pytest.raises(InvalidSignature):
        payment_services.confirm_payment(payment.order_id, "pay_1", "forged", gateway, user=student)

    payment.refresh_from_db()
    assert payment.status == Transaction.STATUS_FAILED
    assert not Enrollment.objects.filter(user=student).exists()


def test_subscription_enrolls_in_every_published_course(student, course, paid_course, make_course, gateway):
    make_course(status=Course.Status.DRAFT, title="Unreleased")
    Enrollment.objects.create(user=student, course=course, enrollment_type=Enrollment.EnrollmentType.FREE)

    payment = payment_services.create_subscription_order(student, "quarterly", gateway)
    enrollments = payment_services.confirm_subscription(
        payment.order_id, "pay_9", sign(payment.order_id, "pay_9"), gateway, user=student
    )

    assert [enrollment.course for enrollment in enrollments] == [paid_course]
    assert enrollments[0].enrollment_type == Enrollment.EnrollmentType.SUBSCRIPTION
    assert enrollments[0].expiry_date > timezone.now() + timedelta(days=85)


def test_unknown_subscription_plan_is_rejected(student, gateway):
    with pytest.raises(ValidationError):
        payment_services.create_subscription_order(student, "lifetime", gateway)


def test_add_months_clamps_to_month_end():
    start = datetime(2025, 1, 31, 9, 30, tzinfo=dt_timezone.utc)
    assert payment_services.add_months(start, 1).day == 28


def test_failed_transactions_cannot_be_confirmed_later(student, paid_course, gateway):
    payment = enrollment_service.enroll(student, paid_course, gateway=gateway).transaction
    with pytest.raises(InvalidSignature):
        payment_services.confirm_payment(payment.order_id, "pay_1", "forged", gateway, user=student)

    with pytest.raises(ConflictError):
        payment_services.confirm_payment(payment.order_id, "pay_2", sign(payment.order_id, "pay_2"), gateway, user=student)


def test_lapsed_enrollment_can_be_bought_again(student, paid_course, gateway):
    lapsed = Enrollment.objects.create(
        user=student, course=paid_course, enrollment_type=Enrollment.EnrollmentType.PAID,
        expiry_date=timezone.now() - timedelta(days=1),
    )

    outcome = enrollment_service.enroll(student, paid_course, gateway=gateway)

    assert outcome.requires_payment
    lapsed.refresh_from_db()
    assert lapsed.status == Enrollment.Status.EXPIRED
    access = resolve_access(student, paid_course)
    assert not access.has_full_access
    assert access.condition == ENROLLMENT_EXPIRED

    payment = outcome.transaction
    renewed = payment_services.confirm_payment(
        payment.order_id, "pay_1", sign(payment.order_id, "pay_1"), gateway, user=student
    )

    assert renewed.pk != lapsed.pk
    assert renewed.status == Enrollment.Status.ACTIVE
    assert resolve_access(student, paid_course).has_full_access


def test_free_course_can_be_rejoined_after_expiry(student, course):
    Enrollment.objects.create(
        user=student, course=course, enrollment_type=Enrollment.EnrollmentType.SUBSCRIPTION,
        expiry_date=timezone.now() - timedelta(hours=1),
    )

    enrollment = enrollment_service.grant_enrollment(student, course, Enrollment.EnrollmentType.FREE)

    assert enrollment.enrollment_type == Enrollment.EnrollmentType.FREE
    assert list(
        Enrollment.objects.filter(user=student, course=course).values_list("status", flat=True).order_by("pk")
    ) == [Enrollment.Status.EXPIRED, Enrollment.Status.ACTIVE]


def test_subscription_can_be_bought_again_after_it_lapses(student, paid_course, gateway):
    Enrollment.objects.create(
        user=student, course=paid_course, enrollment_type=Enrollment.EnrollmentType.SUBSCRIPTION,
        expiry_date=timezone.now() - timedelta(days=2),
    )

    payment = payment_services.create_subscription_order(student, "monthly", gateway)
    enrollments = payment_services.confirm_subscription(
        payment.order_id, "pay_5", sign(payment.order_id, "pay_5"), gateway, user=student
    )

    assert [enrollment.course for enrollment in enrollments] == [paid_course]
    access = resolve_access(student, paid_course)
    assert access.has_full_access
    assert access.expires_on == enrollments[0].expiry_date
