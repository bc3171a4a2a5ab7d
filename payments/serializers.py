from rest_framework import serializers

from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True, default=None)

    class Meta:
        model = Transaction
        fields = [
            "id", "order_id", "razorpay_payment_id", "course", "course_title", "amount", "currency", "status",
            "metadata", "enrollment", "created_at", "completed_at",
        ]
        read_only_fields = fields
