"""Admin registrations for reviews."""

from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('equipment', 'renter', 'rating', 'created_at')
    list_filter = ('rating',)
    search_fields = ('equipment__name', 'renter__email', 'comment')
    readonly_fields = ('booking', 'created_at')
