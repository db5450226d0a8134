"""
Optimistic-concurrency writes for departments.

Every write is checked against the version the caller last saw. Instead of
raising on a conflict, each operation returns one of the outcome objects
below so the request layer can decide how to render it:

    Applied             the write committed; carries the new version
    RecordGone          the department no longer exists
    ValidationConflict  a business rule failed (one administrator per instructor)
    VersionConflict     someone else saved first; carries a per-field diff

The compare-and-swap is a conditional UPDATE on ``version``; the database
serializes concurrent writers.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from django.db import transaction, InterfaceError, OperationalError
from django.db.models import F

from app.school.models import Department

logger = logging.getLogger(__name__)

# Fields written on every update (full-row semantics) and compared on conflict
TRACKED_FIELDS = ('name', 'budget', 'start_date', 'administrator')


class StoreUnavailable(Exception):
    """The database could not be reached; safe to retry the whole operation."""


@dataclass(frozen=True)
class Applied:
    version: int
    department_id: Optional[int] = None


@dataclass(frozen=True)
class RecordGone:
    pass


@dataclass(frozen=True)
class ValidationConflict:
    field: str
    message: str
    colliding: Department


@dataclass(frozen=True)
class FieldDiff:
    field: str
    proposed: Any
    current: Any


@dataclass(frozen=True)
class VersionConflict:
    diff: List[FieldDiff] = field(default_factory=list)
    current: Dict[str, Any] = field(default_factory=dict)

    @property
    def current_version(self) -> Optional[int]:
        return self.current.get('version')


Outcome = Union[Applied, RecordGone, ValidationConflict, VersionConflict]


@contextmanager
def _store_guard(action: str, department_id):
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        logger.exception("Store unavailable during %s of department %s", action, department_id)
        raise StoreUnavailable(str(e)) from e


def _pk(value):
    """Instructor instance, raw pk or None -> pk or None."""
    return getattr(value, 'pk', value)


def _full_row(proposed_fields: Dict[str, Any]) -> Dict[str, Any]:
    missing = [name for name in TRACKED_FIELDS if name not in proposed_fields]
    if missing:
        raise ValueError(f"Full-row write is missing fields: {', '.join(missing)}")
    return {name: proposed_fields[name] for name in TRACKED_FIELDS}


def _load(department_id) -> Optional[Department]:
    return Department.objects.select_related('administrator').filter(pk=department_id).first()


def current_values(department: Department) -> Dict[str, Any]:
    """Stored values of every tracked field plus the version."""
    values = {name: getattr(department, name) for name in TRACKED_FIELDS}
    values['version'] = department.version
    return values


def _differs(name: str, proposed, current) -> bool:
    if name == 'administrator':
        return _pk(proposed) != _pk(current)
    return proposed != current


def diff_fields(proposed_fields: Dict[str, Any], stored: Dict[str, Any]) -> List[FieldDiff]:
    """Fields whose proposed value differs from the stored one, in tracked order."""
    return [
        FieldDiff(name, proposed_fields[name], stored[name])
        for name in TRACKED_FIELDS
        if _differs(name, proposed_fields[name], stored[name])
    ]


def _version_conflict(stored: Department, fields: Dict[str, Any]) -> VersionConflict:
    current = current_values(stored)
    diff = diff_fields(fields, current)
    logger.warning(
        "Version conflict on department %s (stored version %s): %s",
        stored.pk,
        stored.version,
        [d.field for d in diff],
    )
    return VersionConflict(diff=diff, current=current)


def _check_administrator(department_id, administrator) -> Optional[ValidationConflict]:
    """An instructor may administer at most one department."""
    administrator_id = _pk(administrator)
    if administrator_id is None:
        return None
    duplicate = (
        Department.objects.select_related('administrator')
        .filter(administrator_id=administrator_id)
        .exclude(pk=department_id)
        .first()
    )
    if duplicate is None:
        return None
    message = (
        f"Instructor {duplicate.administrator.first_mid_name} {duplicate.administrator.last_name} "
        f"is already administrator of the {duplicate.name} department."
    )
    logger.warning("Rejected administrator %s for department %s: %s", administrator_id, department_id, message)
    return ValidationConflict(field='administrator', message=message, colliding=duplicate)


def _row_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'name': fields['name'],
        'budget': fields['budget'],
        'start_date': fields['start_date'],
        'administrator_id': _pk(fields['administrator']),
    }


def create_department(proposed_fields: Dict[str, Any]) -> Outcome:
    """Insert a new department at version 1, enforcing administrator uniqueness."""
    fields = _full_row(proposed_fields)
    with _store_guard('create', None), transaction.atomic():
        collision = _check_administrator(None, fields['administrator'])
        if collision:
            return collision
        department = Department.objects.create(version=1, **_row_values(fields))
    logger.info("Created department %s (%s)", department.pk, department.name)
    return Applied(version=department.version, department_id=department.pk)


def propose_update(department_id, proposed_fields: Dict[str, Any], proposed_version) -> Outcome:
    """
    Write ``proposed_fields`` to the department if ``proposed_version`` is
    still current.

    The diff in a VersionConflict lists only fields whose proposed value
    differs from the stored one. No outcome other than Applied mutates the row.
    """
    fields = _full_row(proposed_fields)
    with _store_guard('update', department_id), transaction.atomic():
        stored = _load(department_id)
        if stored is None:
            logger.warning("Update of department %s rejected: record gone", department_id)
            return RecordGone()

        collision = _check_administrator(department_id, fields['administrator'])
        if collision:
            return collision

        if stored.version != proposed_version:
            return _version_conflict(stored, fields)

        updated = Department.objects.filter(pk=department_id, version=proposed_version).update(
            version=F('version') + 1,
            **_row_values(fields),
        )
        if not updated:
            # Another writer committed between the load and the conditional update
            stored = _load(department_id)
            if stored is None:
                logger.warning("Update of department %s rejected: record gone", department_id)
                return RecordGone()
            return _version_conflict(stored, fields)

    new_version = proposed_version + 1
    logger.info("Updated department %s to version %s", department_id, new_version)
    return Applied(version=new_version, department_id=stored.pk)


def propose_delete(department_id, proposed_version) -> Outcome:
    """Delete the department if ``proposed_version`` is still current."""
    with _store_guard('delete', department_id), transaction.atomic():
        stored = _load(department_id)
        if stored is None:
            logger.warning("Delete of department %s rejected: record gone", department_id)
            return RecordGone()

        if stored.version != proposed_version:
            logger.warning(
                "Delete of department %s rejected: version %s is stale (stored %s)",
                department_id,
                proposed_version,
                stored.version,
            )
            return VersionConflict(current=current_values(stored))

        # Claim the row with a conditional update; the cascade delete below
        # then runs against a row no other writer can change.
        claimed = Department.objects.filter(pk=department_id, version=proposed_version).update(
            version=F('version') + 1,
        )
        if not claimed:
            stored = _load(department_id)
            if stored is None:
                return RecordGone()
            return VersionConflict(current=current_values(stored))

        Department.objects.filter(pk=department_id).delete()

    logger.info("Deleted department %s", department_id)
    return Applied(version=proposed_version + 1, department_id=department_id)


def release_administrators(instructor_ids) -> int:
    """Clear the administrator of departments run by these instructors, advancing their versions."""
    released = Department.objects.filter(administrator_id__in=list(instructor_ids)).update(
        administrator=None,
        version=F('version') + 1,
    )
    if released:
        logger.info("Released administrator on %s department(s)", released)
    return released
