"""
Invitations to join the platform.

An invitation carries the role, batches and batch subscriptions the invitee
receives on their first Google sign-in. Inviting an address that already has
a Pending, unexpired invitation refreshes that invitation instead of adding a
second one.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from batches.models import Batch, BatchSubscription
from courses.services.email_service import send_invitation_email
from lms_backend.exceptions import NotFoundError, ValidationError
from lms_backend.utils import parse_datetime_field

from .models import Invitation, InvitationSubscription, default_expiry, generate_token

logger = logging.getLogger(__name__)


def _split_emails(emails) -> list:
    if isinstance(emails, str):
        emails = emails.split(",")
    seen = []
    for email in emails or []:
        email = str(email).strip().lower()
        if email and email not in seen:
            seen.append(email)
    return seen


def _subscriptions(batches, expires_on) -> list:
    """``expires_on`` is one date for every batch or a ``{batch_id: date}`` mapping."""
    if isinstance(expires_on, dict):
        return [
            (batch, parse_datetime_field(expires_on.get(str(batch.pk), expires_on.get(batch.pk)), "expires_on"))
            for batch in batches
        ]
    expiry = parse_datetime_field(expires_on, "expires_on")
    return [(batch, expiry) for batch in batches]


def create_invitations(emails_csv, role, batch_ids, expires_on, invited_by, mailer) -> dict:
    """
    Invite every address in ``emails_csv``.

    Returns ``{"success": [...], "already_exists": [...], "failed": [...]}``.
    Addresses that already belong to a user land in ``already_exists``; an
    address fails when it is malformed or its email could not be sent.
    """
    emails = _split_emails(emails_csv)
    if not emails:
        raise ValidationError("At least one email address is required")
    role = role or User.Role.STUDENT
    if role not in User.Role.values:
        raise ValidationError(f"Role must be one of {', '.join(User.Role.values)}")
    if role == User.Role.SUPER_ADMIN and not invited_by.is_super_admin:
        raise ValidationError("Only a Super Admin can invite another Super Admin")

    batches = list(Batch.objects.filter(pk__in=batch_ids or [], active=True))
    subscriptions = _subscriptions(batches, expires_on)
    existing_users = set(User.objects.filter(email__in=emails).values_list("email", flat=True))

    results = {"success": [], "already_exists": [], "failed": []}
    for email in emails:
        if email in existing_users:
            results["already_exists"].append(email)
            continue
        try:
            validate_email(email)
        except DjangoValidationError:
            results["failed"].append(email)
            continue

        invitation = _save_invitation(email, role, batches, subscriptions, invited_by)
        if send_invitation_email(mailer, invitation):
            results["success"].append(email)
        else:
            results["failed"].append(email)

    logger.info(
        "Invitations by user %s: %s sent, %s existing, %s failed",
        invited_by.pk, len(results["success"]), len(results["already_exists"]), len(results["failed"]),
    )
    return results


def _save_invitation(email, role, batches, subscriptions, invited_by) -> Invitation:
    with transaction.atomic():
        invitation = (
            Invitation.objects.select_for_update()
            .filter(email=email, status=Invitation.Status.PENDING, expires_at__gt=timezone.now())
            .first()
        )
        if invitation is None:
            invitation = Invitation(email=email)
        invitation.role = role
        invitation.invited_by = invited_by
        invitation.token = generate_token()
        invitation.expires_at = default_expiry()
        invitation.save()

        invitation.batches.set(batches)
        invitation.batch_subscriptions.all().delete()
        InvitationSubscription.objects.bulk_create([
            InvitationSubscription(invitation=invitation, batch=batch, expires_on=expiry)
            for batch, expiry in subscriptions
        ])
    return invitation


def list_invitations(status=None):
    queryset = Invitation.objects.select_related("invited_by").prefetch_related("batches")
    if status:
        queryset = queryset.filter(status=status)
    return queryset


def revoke_invitation(invitation_id) -> Invitation:
    try:
        invitation = Invitation.objects.get(pk=invitation_id)
    except (Invitation.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Invitation not found")
    invitation.status = Invitation.Status.EXPIRED
    invitation.save(update_fields=["status", "updated_at"])
    return invitation


def get_by_token(token) -> Invitation:
    try:
        invitation = Invitation.objects.prefetch_related("batches").get(token=token)
    except Invitation.DoesNotExist:
        raise NotFoundError("Invitation not found")
    if invitation.status == Invitation.Status.ACCEPTED:
        raise ValidationError("Invitation has already been used")
    if invitation.status == Invitation.Status.EXPIRED or invitation.is_expired:
        raise ValidationError("Invitation has expired")
    return invitation


def pending_invitation(email):
    return (
        Invitation.objects.filter(email=email.lower(), status=Invitation.Status.PENDING, expires_at__gt=timezone.now())
        .order_by("-created_at")
        .first()
    )


def accept_invitation(invitation, user) -> None:
    """Apply the invitation's role, batches and subscriptions to ``user``."""
    user.role = invitation.role
    user.save(update_fields=["role"])
    user.batches.add(*invitation.batches.all())
    for subscription in invitation.batch_subscriptions.all():
        BatchSubscription.objects.update_or_create(
            user=user,
            batch_id=subscription.batch_id,
            defaults={"expires_on": subscription.expires_on},
        )
    invitation.status = Invitation.Status.ACCEPTED
    invitation.accepted_at = timezone.now()
    invitation.save(update_fields=["status", "accepted_at", "updated_at"])
    logger.info("Invitation %s accepted by user %s", invitation.pk, user.pk)
