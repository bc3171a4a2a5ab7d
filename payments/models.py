from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Transaction(models.Model):
    STATUS_CREATED = "created"
    STATUS_AUTHORIZED = "authorized"
    STATUS_CAPTURED = "captured"
    STATUS_FAILED = "failed"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_CREATED, "Created"),
        (STATUS_AUTHORIZED, "Authorized"),
        (STATUS_CAPTURED, "Captured"),
        (STATUS_FAILED, "Failed"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    # Statuses only move forward
    ALLOWED_TRANSITIONS = {
        STATUS_CREATED: {STATUS_AUTHORIZED, STATUS_CAPTURED, STATUS_FAILED},
        STATUS_AUTHORIZED: {STATUS_CAPTURED, STATUS_FAILED},
        STATUS_CAPTURED: {STATUS_REFUNDED},
        STATUS_FAILED: set(),
        STATUS_REFUNDED: set(),
    }

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="transactions")
    course = models.ForeignKey(
        "courses.Course", on_delete=models.SET_NULL, null=True, blank=True, related_name="transactions"
    )
    enrollment = models.ForeignKey(
        "courses.Enrollment", on_delete=models.SET_NULL, null=True, blank=True, related_name="transactions"
    )

    order_id = models.CharField(max_length=255, unique=True)
    razorpay_order_id = models.CharField(max_length=255, blank=True, default="")
    razorpay_payment_id = models.CharField(max_length=255, blank=True, default="")
    razorpay_signature = models.CharField(max_length=255, blank=True, default="")

    amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=10, default="INR")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_CREATED)
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "course"], name="transaction_user_course_idx"),
            models.Index(fields=["status"], name="transaction_status_idx"),
            models.Index(fields=["razorpay_order_id"], name="transaction_rzp_order_idx"),
        ]

    @property
    def is_subscription(self) -> bool:
        return self.metadata.get("type") == "subscription"

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in self.ALLOWED_TRANSITIONS.get(self.status, set())

    def _transition(self, new_status: str) -> None:
        if not self.can_transition_to(new_status):
            raise ValueError(f"Transaction {self.pk} cannot move from {self.status} to {new_status}")
        self.status = new_status

    def mark_captured(self, payment_id: str, signature: str) -> None:
        """
        Record a verified payment and the completed timestamp.
        """
        self._transition(self.STATUS_CAPTURED)
        self.razorpay_payment_id = payment_id
        self.razorpay_signature = signature
        self.completed_at = timezone.now()
        self.save(update_fields=[
            "status", "razorpay_payment_id", "razorpay_signature", "completed_at", "updated_at"
        ])

    def mark_failed(self, payment_id: str = "") -> None:
        self._transition(self.STATUS_FAILED)
        if payment_id:
            self.razorpay_payment_id = payment_id
        self.save(update_fields=["status", "razorpay_payment_id", "updated_at"])

    def __str__(self) -> str:
        return f"{self.user.email} - {self.order_id} - {self.status}"
