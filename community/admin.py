from django.contrib import admin

from .models import CommunityPost, PostAttachment, PostComment


class PostAttachmentInline(admin.TabularInline):
    model = PostAttachment
    extra = 0


class PostCommentInline(admin.TabularInline):
    model = PostComment
    extra = 0
    readonly_fields = ("created_at",)


@admin.register(CommunityPost)
class CommunityPostAdmin(admin.ModelAdmin):
    list_display = ("title", "author", "likes", "created_at")
    search_fields = ("title", "content")
    readonly_fields = ("likes",)
    inlines = [PostAttachmentInline, PostCommentInline]
