from rest_framework import serializers

from accounts.serializers import UserSerializer

from .models import Invitation, InvitationSubscription


class InvitationSubscriptionSerializer(serializers.ModelSerializer):
    batch_name = serializers.CharField(source="batch.name", read_only=True)

    class Meta:
        model = InvitationSubscription
        fields = ["batch", "batch_name", "expires_on"]


class InvitationSerializer(serializers.ModelSerializer):
    invited_by = UserSerializer(read_only=True)
    batches = serializers.SerializerMethodField()
    batch_subscriptions = InvitationSubscriptionSerializer(many=True, read_only=True)

    class Meta:
        model = Invitation
        fields = [
            "id", "email", "role", "batches", "batch_subscriptions", "invited_by", "status", "expires_at",
            "accepted_at", "created_at",
        ]
        read_only_fields = fields

    def get_batches(self, obj):
        return [{"id": batch.id, "name": batch.name} for batch in obj.batches.all()]


# What an invitee sees before signing in; the token itself is not echoed
class PublicInvitationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Invitation
        fields = ["email", "role", "expires_at"]
        read_only_fields = fields
