from django.contrib import admin

from .models import Invitation, InvitationSubscription


class InvitationSubscriptionInline(admin.TabularInline):
    model = InvitationSubscription
    extra = 0


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ("email", "role", "status", "invited_by", "expires_at", "accepted_at")
    list_filter = ("status", "role")
    search_fields = ("email",)
    readonly_fields = ("token", "created_at", "accepted_at")
    inlines = [InvitationSubscriptionInline]
