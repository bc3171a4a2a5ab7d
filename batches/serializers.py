from rest_framework import serializers

from accounts.serializers import UserSerializer

from .models import Batch


class BatchSerializer(serializers.ModelSerializer):
    created_by = UserSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Batch
        fields = ["id", "name", "description", "active", "created_by", "member_count", "created_at", "updated_at"]
        read_only_fields = fields

    def get_member_count(self, obj):
        return obj.members.count()
