from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Batch(models.Model):
    name = models.CharField(max_length=150, unique=True)
    description = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="created_batches"
    )
    members = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name="batches")
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Batches"
        ordering = ["name"]

    def __str__(self):
        return self.name


class BatchCourse(models.Model):
    batch = models.ForeignKey(Batch, on_delete=models.CASCADE, related_name="course_assignments")
    course = models.ForeignKey("courses.Course", on_delete=models.CASCADE, related_name="batch_assignments")
    assigned_date = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-assigned_date"]
        constraints = [
            models.UniqueConstraint(fields=["batch", "course"], name="unique_batch_course")
        ]

    def __str__(self):
        return f"{self.batch.name} -> {self.course.title}"


class BatchSubscription(models.Model):
    """Time-bounded access a member holds through a batch."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="batch_subscriptions")
    batch = models.ForeignKey(Batch, on_delete=models.CASCADE, related_name="subscriptions")
    expires_on = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["expires_on"]
        constraints = [
            models.UniqueConstraint(fields=["user", "batch"], name="unique_subscription_per_user_batch")
        ]

    def clean(self):
        super().clean()
        if self.batch_id and self.user_id and not self.batch.members.filter(pk=self.user_id).exists():
            raise ValidationError({"batch": "Subscriptions can only reference batches the user belongs to."})

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.user.email} - {self.batch.name} (until {self.expires_on or 'no expiry'})"
