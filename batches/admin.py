from django.contrib import admin

from .models import Batch, BatchCourse, BatchSubscription


class BatchCourseInline(admin.TabularInline):
    model = BatchCourse
    extra = 0
    autocomplete_fields = ("course",)


class BatchSubscriptionInline(admin.TabularInline):
    model = BatchSubscription
    extra = 0
    autocomplete_fields = ("user",)


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "active", "created_by", "created_at")
    list_filter = ("active",)
    search_fields = ("name", "description")
    filter_horizontal = ("members",)
    inlines = [BatchCourseInline, BatchSubscriptionInline]


@admin.register(BatchSubscription)
class BatchSubscriptionAdmin(admin.ModelAdmin):
    list_display = ("user", "batch", "expires_on", "created_at")
    list_filter = ("batch",)
    search_fields = ("user__email", "batch__name")
