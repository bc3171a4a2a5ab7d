# models.py
"""
Domain models for the courses application.

Section order:

1.  Courses
2.  Course structure (sections, chapters, lessons)
3.  Quizzes (quizzes, questions, attempts, batch assignments, calendar events)
4.  Enrollment and progress tracking
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from .content import (
    LessonContent,
    PdfContent,
    QuizContent,
    VideoContent,
    VIDEO_PROVIDERS,
)

# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


class Course(models.Model):
    class Status(models.TextChoices):
        DRAFT = "Draft", "Draft"
        PUBLISHED = "Published", "Published"
        ARCHIVED = "Archived", "Archived"

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    thumbnail = models.CharField(max_length=500, blank=True, default="")
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT)
    price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"), validators=[MinValueValidator(0)]
    )
    sale_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    enable_razorpay = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="courses"
    )
    enrolled_count = models.PositiveIntegerField(default=0)
    total_lessons = models.PositiveIntegerField(default=0)
    total_duration = models.PositiveIntegerField(default=0, help_text="Minutes")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Courses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="course_status_idx"),
            models.Index(fields=["created_by", "created_at"], name="course_creator_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(sale_price__isnull=True) | Q(sale_price__lt=models.F("price")),
                name="course_sale_price_below_price",
            ),
        ]

    def clean(self):
        super().clean()
        if self.sale_price is not None and self.price is not None and self.sale_price >= self.price:
            raise ValidationError({"sale_price": "Sale price must be lower than the regular price."})

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    @property
    def effective_price(self) -> Decimal:
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def is_published(self) -> bool:
        return self.status == self.Status.PUBLISHED

    def __str__(self):
        return self.title


# ---------------------------------------------------------------------------
# Course Structure
# ---------------------------------------------------------------------------


class Section(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="sections")
    title = models.CharField(max_length=200)
    order = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order"]
        constraints = [
            models.UniqueConstraint(fields=["course", "order"], name="unique_section_order_per_course")
        ]

    def __str__(self):
        return f"{self.course.title} - {self.title}"


class Chapter(models.Model):
    section = models.ForeignKey(Section, on_delete=models.CASCADE, related_name="chapters")
    title = models.CharField(max_length=200)
    order = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order"]
        constraints = [
            models.UniqueConstraint(fields=["section", "order"], name="unique_chapter_order_per_section")
        ]

    @property
    def course(self):
        return self.section.course

    def __str__(self):
        return f"{self.section.title} - {self.title}"


class Lesson(models.Model):
    class ContentType(models.TextChoices):
        VIDEO = "video", "Video"
        PDF = "pdf", "PDF"
        QUIZ = "quiz", "Quiz"

    chapter = models.ForeignKey(Chapter, on_delete=models.CASCADE, related_name="lessons")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    content_type = models.CharField(max_length=10, choices=ContentType.choices)
    video_provider = models.CharField(
        max_length=10, blank=True, default="", choices=[(p, p.title()) for p in VIDEO_PROVIDERS]
    )
    content_url = models.CharField(max_length=500, blank=True, default="")
    quiz = models.ForeignKey(
        "Quiz", on_delete=models.SET_NULL, null=True, blank=True, related_name="lessons"
    )
    duration = models.PositiveIntegerField(default=0, help_text="Minutes")
    preview = models.BooleanField(default=False)
    order = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Lessons"
        ordering = ["order"]
        constraints = [
            models.UniqueConstraint(fields=["chapter", "order"], name="unique_lesson_order_per_chapter")
        ]

    @property
    def course(self):
        return self.chapter.section.course

    @property
    def content(self) -> LessonContent | None:
        if self.content_type == self.ContentType.VIDEO:
            return VideoContent(provider=self.video_provider, url=self.content_url)
        if self.content_type == self.ContentType.PDF:
            return PdfContent(url=self.content_url)
        if self.content_type == self.ContentType.QUIZ and self.quiz_id:
            return QuizContent(quiz_id=self.quiz_id)
        return None

    def set_content(self, content: LessonContent) -> None:
        self.content_type = content.kind
        self.video_provider = content.provider if isinstance(content, VideoContent) else ""
        self.content_url = content.url if isinstance(content, (VideoContent, PdfContent)) else ""
        self.quiz_id = content.quiz_id if isinstance(content, QuizContent) else None

    def __str__(self):
        return f"{self.id}: {self.title} ({self.get_content_type_display()})"


# ---------------------------------------------------------------------------
# Quizzes
# ---------------------------------------------------------------------------


class Quiz(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    time_limit = models.PositiveIntegerField(default=0, help_text="Minutes, 0 for unlimited")
    passing_score = models.PositiveIntegerField(
        default=70, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="quizzes"
    )
    is_scheduled = models.BooleanField(default=False)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Quizzes"
        ordering = ["-created_at"]

    @property
    def max_score(self):
        return sum(question.score for question in self.questions.all())

    def __str__(self):
        return self.title


class Question(models.Model):
    class QuestionType(models.TextChoices):
        MULTIPLE_CHOICE = "multiple-choice", "Multiple choice"
        SINGLE_CHOICE = "single-choice", "Single choice"
        TRUE_FALSE = "true-false", "True / False"

    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    question = models.TextField()
    question_type = models.CharField(max_length=20, choices=QuestionType.choices)
    options = models.JSONField(default=list, blank=True)
    correct_answers = models.JSONField(default=list)
    score = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]

    def clean(self):
        super().clean()
        if not isinstance(self.correct_answers, list) or not self.correct_answers:
            raise ValidationError({"correct_answers": "At least one correct answer is required."})
        if self.question_type != self.QuestionType.MULTIPLE_CHOICE and len(self.correct_answers) != 1:
            raise ValidationError({"correct_answers": "Single-choice questions take exactly one correct answer."})

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.quiz.title} - {self.question[:50]}"


class QuizAttempt(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="quiz_attempts")
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="attempts")
    lesson = models.ForeignKey(
        Lesson, on_delete=models.CASCADE, null=True, blank=True, related_name="quiz_attempts"
    )
    answers = models.JSONField(default=dict, blank=True)
    score = models.FloatField(default=0.0)  # Percentage score (0-100)
    earned_points = models.PositiveIntegerField(default=0)
    max_score = models.PositiveIntegerField(default=0)
    correct_count = models.PositiveIntegerField(default=0)
    unanswered_count = models.PositiveIntegerField(default=0)
    passed = models.BooleanField(default=False)
    time_taken = models.PositiveIntegerField(default=0, help_text="Seconds")
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-submitted_at"]
        indexes = [
            models.Index(fields=["user", "quiz", "-submitted_at"], name="attempt_user_quiz_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValidationError("Quiz attempts are immutable once submitted.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.user.email} - {self.quiz.title} - {self.score:.0f}%"


class CalendarEvent(models.Model):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="calendar_events")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="calendar_events")
    google_event_id = models.CharField(max_length=255, blank=True, default="")
    summary = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    color_id = models.CharField(max_length=10, default="1")
    start_datetime = models.DateTimeField()
    end_datetime = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_datetime"]
        indexes = [models.Index(fields=["user", "end_datetime"], name="calendar_event_user_end_idx")]

    def __str__(self):
        return f"{self.summary} ({self.start_datetime:%Y-%m-%d %H:%M})"


class QuizBatch(models.Model):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="batch_assignments")
    batch = models.ForeignKey("batches.Batch", on_delete=models.CASCADE, related_name="quiz_assignments")
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    attempts = models.PositiveIntegerField(null=True, blank=True)
    custom_instructions = models.TextField(blank=True, default="")
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Quiz batches"
        constraints = [
            models.UniqueConstraint(fields=["quiz", "batch"], name="unique_quiz_batch")
        ]

    def __str__(self):
        return f"{self.quiz.title} -> {self.batch.name}"


# ---------------------------------------------------------------------------
# Enrollment and Progress
# ---------------------------------------------------------------------------


class Enrollment(models.Model):
    class EnrollmentType(models.TextChoices):
        FREE = "free", "Free"
        PAID = "paid", "Paid"
        BATCH = "batch", "Batch"
        SUBSCRIPTION = "subscription", "Subscription"

    class Status(models.TextChoices):
        ACTIVE = "Active", "Active"
        EXPIRED = "Expired", "Expired"
        CANCELLED = "Cancelled", "Cancelled"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="enrollments")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    enrollment_type = models.CharField(max_length=20, choices=EnrollmentType.choices)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    expiry_date = models.DateTimeField(null=True, blank=True)
    enrolled_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-enrolled_at"]
        indexes = [
            models.Index(fields=["user", "course"], name="enrollment_user_course_idx"),
            models.Index(fields=["status"], name="enrollment_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course"],
                condition=Q(status="Active"),
                name="unique_active_enrollment_per_user_course",
            )
        ]

    def __str__(self):
        return f"{self.user.email} - {self.course.title} ({self.enrollment_type}, {self.status})"


class ProgressTracking(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="lesson_progress")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="progress_records")
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name="progress_records")
    completed = models.BooleanField(default=False)
    progress_percentage = models.PositiveIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    last_accessed = models.DateTimeField(auto_now=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Progress tracking"
        ordering = ["lesson__order"]
        constraints = [
            models.UniqueConstraint(fields=["user", "lesson"], name="unique_progress_per_user_lesson")
        ]

    def __str__(self):
        return f"{self.user.email} - {self.lesson.title} - {self.progress_percentage}%"
