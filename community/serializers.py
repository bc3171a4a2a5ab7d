from rest_framework import serializers

from accounts.serializers import UserSerializer

from .models import CommunityPost, PostAttachment, PostComment


class PostAttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = PostAttachment
        fields = ["id", "url", "type", "name"]


class PostCommentSerializer(serializers.ModelSerializer):
    author = UserSerializer(read_only=True)

    class Meta:
        model = PostComment
        fields = ["id", "author", "content", "created_at"]


class CommunityPostSerializer(serializers.ModelSerializer):
    author = UserSerializer(read_only=True)
    attachments = PostAttachmentSerializer(many=True, read_only=True)
    comments = PostCommentSerializer(many=True, read_only=True)

    class Meta:
        model = CommunityPost
        fields = ["id", "title", "content", "author", "tags", "likes", "attachments", "comments", "created_at", "updated_at"]
        read_only_fields = fields
