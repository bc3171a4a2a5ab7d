from django.contrib import admin

from .models import (
    CalendarEvent,
    Chapter,
    Course,
    Enrollment,
    Lesson,
    ProgressTracking,
    Question,
    Quiz,
    QuizAttempt,
    QuizBatch,
    Section,
)


# ================================
# INLINES
# ================================

class SectionInline(admin.TabularInline):
    model = Section
    extra = 0
    fields = ("title", "order")


class ChapterInline(admin.TabularInline):
    model = Chapter
    extra = 0
    fields = ("title", "order")


class LessonInline(admin.TabularInline):
    model = Lesson
    extra = 0
    fields = ("title", "content_type", "duration", "preview", "order")


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 1
    fields = ("question", "question_type", "options", "correct_answers", "score", "order")


class QuizBatchInline(admin.TabularInline):
    model = QuizBatch
    extra = 0
    readonly_fields = ("assigned_at",)


# ================================
# ADMIN CLASSES
# ================================

@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "status", "price", "sale_price", "created_by", "enrolled_count", "created_at")
    list_filter = ("status", "enable_razorpay", "created_at")
    search_fields = ("title", "description")
    ordering = ("-created_at",)
    readonly_fields = ("enrolled_count", "total_lessons", "total_duration")
    inlines = [SectionInline]


@admin.register(Section)
class SectionAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "order")
    list_filter = ("course",)
    search_fields = ("title",)
    ordering = ("course", "order")
    inlines = [ChapterInline]


@admin.register(Chapter)
class ChapterAdmin(admin.ModelAdmin):
    list_display = ("title", "section", "order")
    search_fields = ("title",)
    ordering = ("section", "order")
    inlines = [LessonInline]


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ("title", "chapter", "content_type", "preview", "order", "created_at")
    list_filter = ("content_type", "preview")
    search_fields = ("title", "description")
    ordering = ("chapter", "order")


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "passing_score", "is_scheduled", "created_by", "created_at")
    list_filter = ("is_scheduled",)
    search_fields = ("title", "description")
    inlines = [QuestionInline, QuizBatchInline]


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ("user", "quiz", "score", "passed", "submitted_at")
    list_filter = ("passed",)
    search_fields = ("user__email", "quiz__title")
    readonly_fields = ("submitted_at",)


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("user", "course", "enrollment_type", "status", "expiry_date", "enrolled_at")
    list_filter = ("enrollment_type", "status")
    search_fields = ("user__email", "course__title")


@admin.register(ProgressTracking)
class ProgressTrackingAdmin(admin.ModelAdmin):
    list_display = ("user", "lesson", "completed", "progress_percentage", "last_accessed")
    list_filter = ("completed",)
    search_fields = ("user__email", "lesson__title")


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ("summary", "user", "quiz", "start_datetime", "end_datetime", "google_event_id")
    search_fields = ("summary", "user__email")
