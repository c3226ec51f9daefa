"""
Audit service - Change diffs and failure-isolated audit recording.

This service provides:
- Snapshot diffing with loose value comparison
- Normalization of change and detail payloads for JSON storage
- Recording of audit entries that never raise into the caller
- A post-commit hook so audit writes run after the primary mutation commits
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import transaction

from audit.constants import (
    ACTOR_ADMIN, ACTOR_PLAYER, ACTOR_SYSTEM, EXCLUDED_DIFF_KEYS, get_action_label,
)
from audit.storage import Document, as_document, normalize_for_storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditActor:
    """Who performed an audited action."""
    actor_type: str
    actor_id: str
    display_name: str = ''

    @classmethod
    def for_admin(cls, user):
        """
        Build an admin actor from an authenticated Django user.

        Returns None for missing or anonymous users so callers can reject
        the action before touching any state.
        """
        if user is None or not getattr(user, 'is_authenticated', False) or user.pk is None:
            return None
        return cls(ACTOR_ADMIN, str(user.pk), user.get_username())

    @classmethod
    def for_player(cls, player_id):
        return cls(ACTOR_PLAYER, str(player_id), str(player_id))

    @classmethod
    def for_system(cls, name='system'):
        return cls(ACTOR_SYSTEM, name, name)

    @property
    def is_admin(self):
        return self.actor_type == ACTOR_ADMIN and bool(self.actor_id)


def _coerce_scalar(value):
    """Coerce a scalar to a comparable numeric form where it looks numeric."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return value
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(Decimal(text))
        except (InvalidOperation, ValueError):
            return value
    return value


def loosely_equal(left, right):
    """
    Compare two snapshot values the way form-submitted data needs.

    Numeric strings compare equal to the numbers they spell (``"1" == 1``),
    booleans compare as 0/1, and collections compare element-wise.
    """
    if left == right:
        return True
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if set(left.keys()) != set(right.keys()):
            return False
        return all(loosely_equal(left[k], right[k]) for k in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(loosely_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, (Mapping, list, tuple)) or isinstance(right, (Mapping, list, tuple)):
        return False
    # None only equals None, never 0 or ""
    if left is None or right is None:
        return False
    return _coerce_scalar(left) == _coerce_scalar(right)


def diff(before, after, exclude=None):
    """
    Return only the keys that changed between two snapshots.

    Args:
        before: Mapping of field values before the change (or None)
        after: Mapping of field values after the change (or None)
        exclude: Optional extra keys to ignore on top of EXCLUDED_DIFF_KEYS

    Returns:
        Document: ``{'before': Document, 'after': Document}``. Both sides are
        documents even when nothing changed.
    """
    before = before or {}
    after = after or {}
    excluded = EXCLUDED_DIFF_KEYS | frozenset(exclude or ())

    changed_before = Document()
    changed_after = Document()

    for key in dict.fromkeys([*before.keys(), *after.keys()]):
        if key in excluded:
            continue
        old_value = before.get(key)
        new_value = after.get(key)
        if not loosely_equal(old_value, new_value):
            changed_before[str(key)] = normalize_for_storage(old_value)
            changed_after[str(key)] = normalize_for_storage(new_value)

    return Document(before=changed_before, after=changed_after)


def _normalize_changes(changes):
    """Accept a diff() result or a ``{'before', 'after'}`` mapping; anything else is empty."""
    if isinstance(changes, Mapping) and 'before' in changes and 'after' in changes:
        return Document(
            before=as_document(changes['before']),
            after=as_document(changes['after']),
        )
    return Document(before=Document(), after=Document())


def record(actor, action, target_type, target_id=None, target_label=None,
           changes=None, details=None):
    """
    Write one audit log entry.

    Never raises: a failure here is logged and swallowed so it cannot abort
    the operation being described. The insert runs in its own savepoint so a
    failed write does not poison an enclosing transaction.

    Returns:
        AuditLogEntry or None if the write failed.
    """
    from audit.models import AuditLogEntry

    try:
        with transaction.atomic():
            entry = AuditLogEntry.objects.create(
                actor_type=getattr(actor, 'actor_type', None) or ACTOR_SYSTEM,
                actor_id=str(getattr(actor, 'actor_id', None) or 'unknown'),
                actor_name=getattr(actor, 'display_name', None) or 'unknown',
                action=action,
                action_label=get_action_label(action),
                target_type=target_type,
                target_id=str(target_id) if target_id is not None else None,
                target_label=target_label,
                changes=_normalize_changes(changes),
                details=as_document(details),
            )
    except Exception as e:
        logger.error(
            f"Audit record failed for action={action} target={target_type}:{target_id}: {e}",
            exc_info=True,
        )
        return None

    return entry


def record_on_commit(actor, action, target_type, target_id=None, target_label=None,
                     changes=None, details=None):
    """
    Schedule an audit entry for after the current transaction commits.

    Outside a transaction the entry is written immediately. If the
    surrounding transaction rolls back, nothing is recorded.
    """
    transaction.on_commit(
        lambda: record(
            actor, action, target_type,
            target_id=target_id,
            target_label=target_label,
            changes=changes,
            details=details,
        )
    )
