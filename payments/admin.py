from django.contrib import admin

from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "course", "amount", "currency", "status", "created_at", "completed_at")
    list_filter = ("status", "currency", "created_at")
    search_fields = ("user__email", "course__title", "order_id", "razorpay_order_id", "razorpay_payment_id")
    readonly_fields = ("created_at", "updated_at", "completed_at")
