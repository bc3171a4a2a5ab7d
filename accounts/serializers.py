from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from batches.models import BatchSubscription

from .models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "first_name", "last_name", "email"]


# Adds the claims the frontend reads to the access and refresh tokens
class LmsTokenObtainPairSerializer(TokenObtainPairSerializer):

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["id"] = str(user.id)
        token["email"] = user.email
        token["name"] = user.get_full_name()
        token["role"] = user.role
        token["status"] = user.status
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        if self.user.status != User.Status.ACTIVE:
            raise serializers.ValidationError("Your account is inactive.")
        data["user"] = UserDetailSerializer(self.user).data
        return data


class BatchSubscriptionSerializer(serializers.ModelSerializer):
    batch_name = serializers.CharField(source="batch.name", read_only=True)

    class Meta:
        model = BatchSubscription
        fields = ["batch", "batch_name", "expires_on"]


# Exclude sensitive information from user details
class UserDetailSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="get_full_name", read_only=True)
    batches = serializers.SerializerMethodField()
    batch_subscriptions = BatchSubscriptionSerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            "id", "email", "first_name", "last_name", "name", "role", "status", "profile_picture",
            "join_date", "last_login", "calendar_integration_enabled", "batches", "batch_subscriptions",
        ]
        read_only_fields = fields

    def get_batches(self, obj):
        return [{"id": batch.id, "name": batch.name} for batch in obj.batches.all()]


class UpdateRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Role.choices)


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=User.Status.choices)


class UpdateBatchesSerializer(serializers.Serializer):
    batches = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    subscriptions = serializers.ListField(child=serializers.DictField(), required=False, default=list)


class BulkEmailSerializer(serializers.Serializer):
    subject = serializers.CharField()
    body = serializers.CharField()
    user_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
