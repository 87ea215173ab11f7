"""
Database models for the dashboard backend.

Care records (residents, meals, welfare checks, incidents, baskets and
removal requests) are owned by the care backend and never stored here.
The local database only holds dashboard staff accounts and an audit
trail of the actions they forwarded.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Dashboard staff account with a role.

    Roles mirror the dashboard roles: 'viewer' users may only browse the
    tables, 'staff' and above may also submit actions to the care backend.
    """
    ROLE_CHOICES = [
        ('viewer', 'Viewer'),
        ('staff', 'Staff'),
        ('manager', 'Manager'),
        ('admin', 'Administrator'),
    ]

    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='viewer')

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    # Care backend identifiers are opaque strings
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='dashboard_a_action_5d2f1c_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='dashboard_a_object__8b7e3a_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.object_type}:{self.object_id}"
