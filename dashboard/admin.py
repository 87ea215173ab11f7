"""
Django admin registrations for the dashboard models.

Only staff accounts and the audit trail live in the local database, so
this is all the admin site needs to show.
"""

from django.contrib import admin

from .models import AuditEvent, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id',)
    readonly_fields = ('user', 'action', 'object_type', 'object_id', 'detail', 'created_at')
