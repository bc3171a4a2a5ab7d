from django.db import models
from django.db.models import Q


class Tag(models.Model):
    """
    One node of the tag hierarchy.

    exam types are roots; subjects hang off exam types, chapters off subjects
    and topics off chapters. Difficulty levels, question types and sources are
    flat vocabularies without parents.
    """

    class Category(models.TextChoices):
        EXAM_TYPE = "exam_type", "Exam type"
        SUBJECT = "subject", "Subject"
        CHAPTER = "chapter", "Chapter"
        TOPIC = "topic", "Topic"
        DIFFICULTY_LEVEL = "difficulty_level", "Difficulty level"
        QUESTION_TYPE = "question_type", "Question type"
        SOURCE = "source", "Source"

    category = models.CharField(max_length=20, choices=Category.choices)
    name = models.CharField(max_length=150)
    parent = models.ForeignKey("self", on_delete=models.CASCADE, null=True, blank=True, related_name="children")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["category", "id"]
        constraints = [
            models.UniqueConstraint(fields=["category", "name", "parent"], name="unique_tag_per_parent"),
            models.UniqueConstraint(
                fields=["category", "name"], condition=Q(parent__isnull=True), name="unique_root_tag"
            ),
        ]

    def __str__(self):
        return f"{self.category}: {self.name}"


class BankQuestion(models.Model):
    class Difficulty(models.TextChoices):
        EASY = "Easy", "Easy"
        MEDIUM = "Medium", "Medium"
        HARD = "Hard", "Hard"

    class QuestionType(models.TextChoices):
        MCQ = "MCQ", "Single correct"
        MMCQ = "MMCQ", "Multiple correct"

    external_id = models.CharField(max_length=100)
    question_text = models.TextField()
    option_a = models.TextField()
    option_b = models.TextField()
    option_c = models.TextField()
    option_d = models.TextField()
    correct_answer = models.CharField(max_length=50)
    explanation = models.TextField(blank=True, default="")
    image_url = models.CharField(max_length=500, blank=True, default="")
    option_a_image_url = models.CharField(max_length=500, blank=True, default="")
    option_b_image_url = models.CharField(max_length=500, blank=True, default="")
    option_c_image_url = models.CharField(max_length=500, blank=True, default="")
    option_d_image_url = models.CharField(max_length=500, blank=True, default="")
    explanation_image_url = models.CharField(max_length=500, blank=True, default="")

    exam_type = models.CharField(max_length=150)
    subject = models.CharField(max_length=150)
    chapter = models.CharField(max_length=150, blank=True, default="")
    topic = models.CharField(max_length=150, blank=True, default="")
    difficulty_level = models.CharField(max_length=10, choices=Difficulty.choices)
    question_type = models.CharField(max_length=10, choices=QuestionType.choices)
    source = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["subject", "chapter"], name="bankq_subject_chapter_idx"),
            models.Index(fields=["exam_type", "difficulty_level"], name="bankq_exam_difficulty_idx"),
        ]

    def __str__(self):
        return f"{self.external_id}: {self.question_text[:50]}"
