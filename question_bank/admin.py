from django.contrib import admin

from .models import BankQuestion, Tag


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "parent")
    list_filter = ("category",)
    search_fields = ("name",)


@admin.register(BankQuestion)
class BankQuestionAdmin(admin.ModelAdmin):
    list_display = ("external_id", "exam_type", "subject", "difficulty_level", "question_type", "created_at")
    list_filter = ("exam_type", "difficulty_level", "question_type")
    search_fields = ("external_id", "question_text")
