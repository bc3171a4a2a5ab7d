"""
User administration for Admins and Super Admins.
"""
import csv
import io
import logging

from django.db.models import ProtectedError, Q

from accounts.models import User
from accounts.policy import Action, can
from batches.services import set_user_batches
from courses.services.email_service import send_bulk_message
from lms_backend.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["Name", "Email", "Role", "Batches", "Join Date", "Status"]


def get_user_or_404(user_id) -> User:
    try:
        return User.objects.get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("User not found")


def list_users(search=None, role=None, status=None, batch=None):
    queryset = User.objects.prefetch_related("batches", "batch_subscriptions")
    if search:
        queryset = queryset.filter(
            Q(first_name__icontains=search) | Q(last_name__icontains=search) | Q(email__icontains=search)
        )
    if role:
        queryset = queryset.filter(role=role)
    if status:
        queryset = queryset.filter(status=status)
    if batch:
        queryset = queryset.filter(batches__pk=batch)
    return queryset.distinct().order_by("-join_date")


def update_role(actor, user, role) -> User:
    if role not in User.Role.values:
        raise ValidationError(f"Role must be one of {', '.join(User.Role.values)}")
    if role == User.Role.SUPER_ADMIN and not can(actor, Action.USER_GRANT_SUPER_ADMIN):
        raise AuthorizationError("Not authorized to assign Super Admin role")
    user.role = role
    user.save(update_fields=["role"])
    logger.info("User %s set role of user %s to %s", actor.pk, user.pk, role)
    return user


def update_batches(user, batch_ids, subscriptions=None) -> User:
    if batch_ids is not None and not isinstance(batch_ids, list):
        raise ValidationError("batches must be a list")
    set_user_batches(user, batch_ids or [], subscriptions)
    return user


def update_status(user, status) -> User:
    if status not in User.Status.values:
        raise ValidationError(f"Status must be one of {', '.join(User.Status.values)}")
    user.status = status
    user.save(update_fields=["status"])
    return user


def delete_user(actor, user) -> None:
    if not can(actor, Action.USER_DELETE):
        raise AuthorizationError("Only a Super Admin can delete users")
    if user.is_super_admin:
        raise AuthorizationError("Super Admin users cannot be deleted")
    try:
        user.delete()
    except ProtectedError as exc:
        # Courses keep their author
        raise ConflictError("User still owns courses; reassign or delete them first") from exc
    logger.info("User %s deleted by user %s", user.pk, actor.pk)


def export_users_csv(users) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for user in users:
        writer.writerow([
            user.get_full_name(),
            user.email,
            user.role,
            ", ".join(batch.name for batch in user.batches.all()),
            user.join_date.date().isoformat() if user.join_date else "",
            user.status,
        ])
    return buffer.getvalue()


def bulk_email(mailer, subject, body, user_ids) -> dict:
    """Email each selected user; returns ``{"success": [...], "failed": [...]}``."""
    if not subject or not body or not user_ids:
        raise ValidationError("Missing required fields")
    results = {"success": [], "failed": []}
    for user in User.objects.filter(pk__in=user_ids):
        if send_bulk_message(mailer, user, subject, body):
            results["success"].append(user.email)
        else:
            results["failed"].append(user.email)
    logger.info("Bulk email '%s': %s sent, %s failed", subject, len(results["success"]), len(results["failed"]))
    return results
