from django.contrib import admin

from .models import Receipt


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = ("payment_id", "booking", "amount", "currency", "method", "status", "captured_at")
    list_filter = ("status", "method", "currency")
    search_fields = ("payment_id", "booking__id")
    readonly_fields = ("created_at",)
