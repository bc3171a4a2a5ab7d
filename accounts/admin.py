from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("id", "email", "first_name", "last_name", "role", "status", "join_date")
    list_filter = ("role", "status", "is_staff")
    search_fields = ("email", "first_name", "last_name")
    ordering = ("-join_date",)
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("first_name", "last_name", "profile_picture", "google_id")}),
        ("Access", {"fields": ("role", "status", "is_active", "is_staff", "is_superuser")}),
        ("Google Calendar", {"fields": ("calendar_integration_enabled", "google_token_expiry")}),
        ("Dates", {"fields": ("join_date", "last_login")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "first_name", "role", "password1", "password2")}),
    )
    readonly_fields = ("join_date", "last_login")
