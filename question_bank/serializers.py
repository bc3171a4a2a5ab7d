from rest_framework import serializers

from .models import BankQuestion, Tag


class TagSerializer(serializers.ModelSerializer):
    parent = serializers.CharField(source="parent.name", default=None, read_only=True)

    class Meta:
        model = Tag
        fields = ["id", "category", "name", "parent"]


class BankQuestionSerializer(serializers.ModelSerializer):
    id = serializers.CharField(source="external_id", read_only=True)
    pk = serializers.IntegerField(read_only=True)
    tags = serializers.SerializerMethodField()

    class Meta:
        model = BankQuestion
        fields = [
            "pk", "id", "question_text", "option_a", "option_b", "option_c", "option_d",
            "correct_answer", "explanation", "image_url", "option_a_image_url", "option_b_image_url",
            "option_c_image_url", "option_d_image_url", "explanation_image_url", "tags",
            "created_at", "updated_at",
        ]

    def get_tags(self, obj):
        return {
            "exam_type": obj.exam_type,
            "subject": obj.subject,
            "chapter": obj.chapter,
            "topic": obj.topic,
            "difficulty_level": obj.difficulty_level,
            "question_type": obj.question_type,
            "source": obj.source,
        }
