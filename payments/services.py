"""
Razorpay orders and their confirmation.

A Transaction is created in ``created`` state when the gateway order is
opened. Confirmation verifies the gateway signature over
``order_id|payment_id``; the transaction row is locked for the duration so a
repeated callback finds it already ``captured`` and returns the enrollments
it produced instead of granting new ones.
"""
import calendar
import logging
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.db import transaction as db_transaction
from django.utils import timezone

from courses.models import Course, Enrollment
from courses.services.email_service import send_subscription_email
from courses.services.enrollment_service import active_enrollment, expire_lapsed_enrollments, grant_enrollment
from lms_backend.exceptions import ConflictError, InvalidSignature, NotFoundError, ValidationError

from .models import Transaction

logger = logging.getLogger(__name__)


def _to_paise(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1")))


def add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def subscription_plans() -> dict:
    return getattr(settings, "SUBSCRIPTION_PLANS", {})


def _open_order(user, gateway, amount, receipt, course=None, metadata=None) -> Transaction:
    currency = getattr(settings, "PAYMENT_CURRENCY", "INR")
    order = gateway.create_order(
        amount=_to_paise(amount),
        currency=currency,
        receipt=receipt,
        notes={"user_id": str(user.pk), **({"course_id": str(course.pk)} if course else {})},
    )
    payment = Transaction.objects.create(
        user=user,
        course=course,
        order_id=order["id"],
        razorpay_order_id=order["id"],
        amount=amount,
        currency=currency,
        metadata=metadata or {},
    )
    logger.info("Transaction %s opened for order %s (%s %s)", payment.pk, payment.order_id, amount, currency)
    return payment


def create_payment_order(user, course, gateway) -> Transaction:
    """Open a gateway order for the course's effective price."""
    return _open_order(
        user,
        gateway,
        amount=course.effective_price,
        receipt=f"course_{course.pk}_user_{user.pk}",
        course=course,
    )


def create_subscription_order(user, plan: str, gateway) -> Transaction:
    plans = subscription_plans()
    if plan not in plans:
        raise ValidationError("Invalid subscription plan")
    details = plans[plan]
    return _open_order(
        user,
        gateway,
        amount=Decimal(details["price"]),
        receipt=f"subscription_{plan}_user_{user.pk}",
        metadata={"type": "subscription", "plan": plan, "validity": details["months"]},
    )


def _locked_transaction(order_id, user=None) -> Transaction:
    queryset = Transaction.objects.select_for_update()
    if user is not None:
        queryset = queryset.filter(user=user)
    try:
        return queryset.get(order_id=order_id)
    except Transaction.DoesNotExist:
        raise NotFoundError("Transaction not found")


def _confirm(order_id, payment_id, signature, gateway, user, grant, existing):
    """
    Shared confirmation state machine.

    ``grant(payment)`` runs once, right after the transaction is captured;
    ``existing(payment)`` answers repeated confirmations.
    """
    if not order_id or not payment_id or not signature:
        raise ValidationError("order_id, payment_id and signature are required")
    valid = gateway.verify_signature(order_id, payment_id, signature)

    with db_transaction.atomic():
        payment = _locked_transaction(order_id, user)

        if payment.status == Transaction.STATUS_CAPTURED:
            if not valid:
                raise InvalidSignature()
            logger.info("Transaction %s already captured; returning existing grant", payment.pk)
            return existing(payment)

        if valid:
            if not payment.can_transition_to(Transaction.STATUS_CAPTURED):
                raise ConflictError(f"Payment is {payment.status} and can no longer be confirmed")
            payment.mark_captured(payment_id, signature)
            logger.info("Transaction %s captured with payment %s", payment.pk, payment_id)
            return grant(payment)

        if payment.can_transition_to(Transaction.STATUS_FAILED):
            payment.mark_failed(payment_id)

    logger.warning("Invalid payment signature for order %s (payment %s)", order_id, payment_id)
    raise InvalidSignature()


def confirm_payment(order_id, payment_id, signature, gateway, *, user=None, mailer=None) -> Enrollment:
    def grant(payment):
        if payment.course_id is None:
            raise ValidationError("This order is not a course purchase")
        expire_lapsed_enrollments(payment.user, payment.course)
        enrollment = active_enrollment(payment.user, payment.course)
        if enrollment is None:
            enrollment = grant_enrollment(
                payment.user, payment.course, Enrollment.EnrollmentType.PAID, mailer=mailer
            )
        else:
            # Access was granted some other way while the payment was open
            logger.warning(
                "User %s already enrolled in course %s; linking transaction %s",
                payment.user_id, payment.course_id, payment.pk,
            )
        payment.enrollment = enrollment
        payment.save(update_fields=["enrollment", "updated_at"])
        return enrollment

    def existing(payment):
        return payment.enrollment or active_enrollment(payment.user, payment.course)

    return _confirm(order_id, payment_id, signature, gateway, user, grant, existing)


def confirm_subscription(order_id, payment_id, signature, gateway, *, user=None, mailer=None) -> list:
    """
    Confirm a subscription payment and enroll the user in every published
    course they are not already enrolled in, until the plan's expiry.
    """

    def grant(payment):
        if not payment.is_subscription:
            raise ValidationError("This order is not a subscription")
        expiry_date = add_months(timezone.now(), int(payment.metadata.get("validity", 1)))
        expire_lapsed_enrollments(payment.user)
        enrolled_course_ids = Enrollment.objects.filter(
            user=payment.user, status=Enrollment.Status.ACTIVE
        ).values_list("course_id", flat=True)
        courses = Course.objects.filter(status=Course.Status.PUBLISHED).exclude(pk__in=list(enrolled_course_ids))

        enrollments = [
            grant_enrollment(payment.user, course, Enrollment.EnrollmentType.SUBSCRIPTION, expiry_date)
            for course in courses
        ]
        payment.metadata = {
            **payment.metadata,
            "expiry_date": expiry_date.isoformat(),
            "enrollment_ids": [enrollment.pk for enrollment in enrollments],
        }
        payment.save(update_fields=["metadata", "updated_at"])
        if mailer is not None:
            plan = payment.metadata.get("plan", "")
            db_transaction.on_commit(
                lambda: send_subscription_email(mailer, payment.user, plan, expiry_date, len(enrollments))
            )
        return enrollments

    def existing(payment):
        return list(Enrollment.objects.filter(pk__in=payment.metadata.get("enrollment_ids", [])))

    return _confirm(order_id, payment_id, signature, gateway, user, grant, existing)


def checkout_details(payment) -> dict:
    """What the client needs to open the Razorpay checkout for ``payment``."""
    return {
        "transaction_id": payment.pk,
        "order_id": payment.order_id,
        "amount": _to_paise(payment.amount),
        "currency": payment.currency,
        "key_id": getattr(settings, "RAZORPAY_KEY_ID", ""),
    }


def user_transactions(user):
    return Transaction.objects.filter(user=user).select_related("course")
