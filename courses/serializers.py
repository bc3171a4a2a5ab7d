from rest_framework import serializers

from accounts.serializers import UserSerializer
from courses.models import (
    CalendarEvent,
    Course,
    Enrollment,
    ProgressTracking,
    Question,
    Quiz,
    QuizAttempt,
    QuizBatch,
)


class CourseSerializer(serializers.ModelSerializer):
    created_by = UserSerializer(read_only=True)
    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Course
        fields = [
            "id", "title", "description", "thumbnail", "status", "price", "sale_price", "effective_price",
            "enable_razorpay", "created_by", "enrolled_count", "total_lessons", "total_duration",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class QuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Question
        fields = ["id", "question", "question_type", "options", "correct_answers", "score", "order"]


# Questions as students see them before submitting
class StudentQuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Question
        fields = ["id", "question", "question_type", "options", "score", "order"]


class QuizSerializer(serializers.ModelSerializer):
    created_by = UserSerializer(read_only=True)
    questions = QuestionSerializer(many=True, read_only=True)
    max_score = serializers.IntegerField(read_only=True)

    class Meta:
        model = Quiz
        fields = [
            "id", "title", "description", "time_limit", "passing_score", "created_by", "is_scheduled",
            "start_date", "end_date", "max_score", "questions", "created_at", "updated_at",
        ]


class StudentQuizSerializer(QuizSerializer):
    questions = StudentQuestionSerializer(many=True, read_only=True)


class QuizListSerializer(serializers.ModelSerializer):
    question_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Quiz
        fields = [
            "id", "title", "description", "time_limit", "passing_score", "is_scheduled", "start_date",
            "end_date", "question_count", "created_at",
        ]


class QuizAttemptSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    quiz_title = serializers.CharField(source="quiz.title", read_only=True)

    class Meta:
        model = QuizAttempt
        fields = [
            "id", "user", "quiz", "quiz_title", "lesson", "answers", "score", "earned_points", "max_score",
            "correct_count", "unanswered_count", "passed", "time_taken", "submitted_at",
        ]
        read_only_fields = fields


class QuizBatchSerializer(serializers.ModelSerializer):
    batch_name = serializers.CharField(source="batch.name", read_only=True)

    class Meta:
        model = QuizBatch
        fields = [
            "id", "quiz", "batch", "batch_name", "start_date", "end_date", "attempts", "custom_instructions",
            "assigned_at",
        ]
        read_only_fields = fields


class EnrollmentSerializer(serializers.ModelSerializer):
    course = CourseSerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = ["id", "course", "enrollment_type", "status", "expiry_date", "enrolled_at"]
        read_only_fields = fields


class ProgressSerializer(serializers.ModelSerializer):
    lesson_title = serializers.CharField(source="lesson.title", read_only=True)

    class Meta:
        model = ProgressTracking
        fields = ["id", "lesson", "lesson_title", "course", "completed", "progress_percentage", "last_accessed"]
        read_only_fields = fields


class CalendarEventSerializer(serializers.ModelSerializer):
    quiz_title = serializers.CharField(source="quiz.title", read_only=True)

    class Meta:
        model = CalendarEvent
        fields = [
            "id", "quiz", "quiz_title", "google_event_id", "summary", "description", "location", "color_id",
            "start_datetime", "end_datetime", "created_at",
        ]
        read_only_fields = fields
