"""Django admin configuration for offerings."""

from django.contrib import admin

from .models import Offering, OfferingDraftRecord


@admin.register(OfferingDraftRecord)
class OfferingDraftRecordAdmin(admin.ModelAdmin):
    """Admin for autosaved drafts. Read-only: drafts are written by autosave."""

    list_display = ['id', 'name', 'tenant_id', 'product_type', 'revision', 'updated_at']
    list_filter = ['product_type']
    search_fields = ['name', 'tenant_id']
    readonly_fields = [
        'id',
        'tenant_id',
        'name',
        'product_type',
        'form_data',
        'revision',
        'created_at',
        'updated_at',
    ]

    def has_add_permission(self, request):
        return False


@admin.register(Offering)
class OfferingAdmin(admin.ModelAdmin):
    """Admin for Offering model."""

    list_display = [
        'name',
        'product_type',
        'status',
        'currency',
        'base_price',
        'publish_at',
        'published_at',
        'created_at',
    ]
    list_filter = ['status', 'product_type', 'currency']
    search_fields = ['name', 'tenant_id']
    readonly_fields = ['id', 'draft_id', 'payload', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
