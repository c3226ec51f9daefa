from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from audit.constants import ACTOR_TYPE_CHOICES


class AuditLogEntry(models.Model):
    """
    One record per state-changing action on player progression.

    Entries are append-only: once written they are never updated or deleted
    through the ORM instance API. ``changes`` holds only the fields that
    differed, as ``{"before": {...}, "after": {...}}``.
    """
    actor_type = models.CharField(max_length=10, choices=ACTOR_TYPE_CHOICES, db_index=True)
    actor_id = models.CharField(max_length=64, db_index=True)
    actor_name = models.CharField(max_length=150, blank=True)
    action = models.CharField(max_length=50, db_index=True)
    action_label = models.CharField(max_length=100)
    target_type = models.CharField(max_length=30)
    target_id = models.CharField(max_length=64, null=True, blank=True)
    target_label = models.CharField(max_length=150, null=True, blank=True)
    changes = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    details = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['target_type', 'target_id'], name='audit_target_idx'),
            models.Index(fields=['actor_type', 'actor_id'], name='audit_actor_idx'),
        ]
        verbose_name = "Audit Log Entry"
        verbose_name_plural = "Audit Log Entries"

    def __str__(self):
        return f"{self.actor_name or self.actor_id} {self.action} {self.target_type}:{self.target_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Audit log entries are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Audit log entries are append-only")
