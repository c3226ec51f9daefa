from django.contrib import admin

from .models import AuditLogEntry


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'actor_type', 'actor_name', 'action_label', 'target_type', 'target_id', 'target_label')
    list_filter = ('action', 'actor_type', 'target_type')
    search_fields = ('actor_id', 'actor_name', 'target_id', 'target_label')
    readonly_fields = (
        'actor_type', 'actor_id', 'actor_name', 'action', 'action_label',
        'target_type', 'target_id', 'target_label', 'changes', 'details', 'created_at',
    )
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
