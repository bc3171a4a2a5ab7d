from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    def create_user(self, email, first_name="", password=None, **extra_fields):
        """
        Creates and returns a user with the given email, first name and password.
        """
        if not email:
            raise ValueError("The email field must be set")

        email = self.normalize_email(email).lower()
        user = self.model(email=email, first_name=first_name or email.split("@")[0], **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()  # Google-only accounts
        user.save(using=self._db)
        return user

    def create_superuser(self, email, first_name="", password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.SUPER_ADMIN)

        if not extra_fields.get("is_staff"):
            raise ValueError("Superuser must have is_staff=True.")
        if not extra_fields.get("is_superuser"):
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, first_name, password=password, **extra_fields)


class User(AbstractUser):
    class Role(models.TextChoices):
        SUPER_ADMIN = "Super Admin", "Super Admin"
        ADMIN = "Admin", "Admin"
        MENTOR = "Mentor", "Mentor"
        STUDENT = "Student", "Student"

    class Status(models.TextChoices):
        ACTIVE = "Active", "Active"
        INACTIVE = "Inactive", "Inactive"

    first_name = models.CharField(max_length=255)
    last_name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(max_length=254, unique=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT, db_index=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    google_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    profile_picture = models.URLField(max_length=500, blank=True, default="")
    join_date = models.DateTimeField(default=timezone.now)

    # Google Calendar integration
    google_access_token = models.TextField(blank=True, default="")
    google_refresh_token = models.TextField(blank=True, default="")
    google_token_expiry = models.DateTimeField(null=True, blank=True)
    calendar_integration_enabled = models.BooleanField(default=False)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name"]
    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-join_date"]

    def get_full_name(self):
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def is_admin_role(self) -> bool:
        return self.role in (self.Role.SUPER_ADMIN, self.Role.ADMIN)

    @property
    def is_super_admin(self) -> bool:
        return self.role == self.Role.SUPER_ADMIN

    def save(self, *args, **kwargs):
        # Generate a unique username if not set
        if not self.username:
            base_username = self.email.split("@")[0]
            username = base_username
            counter = 1
            while User.objects.filter(username=username).exclude(pk=self.pk).exists():
                username = f"{base_username}{counter}"
                counter += 1
            self.username = username
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.get_full_name()} <{self.email}>"
