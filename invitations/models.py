import secrets
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from accounts.models import User


def generate_token() -> str:
    return secrets.token_hex(32)


def default_expiry():
    return timezone.now() + timedelta(days=getattr(settings, "INVITATION_EXPIRY_DAYS", 7))


class Invitation(models.Model):
    class Status(models.TextChoices):
        PENDING = "Pending", "Pending"
        ACCEPTED = "Accepted", "Accepted"
        EXPIRED = "Expired", "Expired"

    email = models.EmailField()
    role = models.CharField(max_length=20, choices=User.Role.choices, default=User.Role.STUDENT)
    batches = models.ManyToManyField("batches.Batch", blank=True, related_name="invitations")
    token = models.CharField(max_length=64, unique=True, default=generate_token)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="sent_invitations"
    )
    expires_at = models.DateTimeField(default=default_expiry)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    accepted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["email", "status"], name="invitation_email_status_idx"),
            models.Index(fields=["expires_at"], name="invitation_expires_idx"),
        ]

    @property
    def is_expired(self) -> bool:
        return timezone.now() >= self.expires_at

    def __str__(self):
        return f"{self.email} ({self.role}, {self.status})"


class InvitationSubscription(models.Model):
    invitation = models.ForeignKey(Invitation, on_delete=models.CASCADE, related_name="batch_subscriptions")
    batch = models.ForeignKey("batches.Batch", on_delete=models.CASCADE, related_name="+")
    expires_on = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["invitation", "batch"], name="unique_invitation_batch_subscription")
        ]

    def __str__(self):
        return f"{self.invitation.email} - {self.batch.name}"
