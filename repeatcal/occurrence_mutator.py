"""Edit and delete occurrences with "this event only" / "all events" scope.

Both operations return a new list. Occurrences are frozen, so entries that
are not touched are the very same objects in the result.
"""

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Optional, Union

from .repeat_exceptions import RepeatValidationError
from .repeat_models import Occurrence

logger = logging.getLogger(__name__)

# Ids are never reassigned and group membership follows the scope
PROTECTED_FIELDS = frozenset({"id", "repeat"})


class MutationScope(str, Enum):
    """How far an edit or delete reaches."""

    SINGLE = "single"
    ALL = "all"


def coerce_scope(scope: Union[MutationScope, str]) -> MutationScope:
    """Normalize a scope given as enum member or plain string.

    Raises:
        RepeatValidationError: If the scope is not ``single`` or ``all``
    """
    try:
        return MutationScope(scope)
    except ValueError as exc:
        raise RepeatValidationError(
            f"Unknown mutation scope: {scope!r} (expected 'single' or 'all')"
        ) from exc


def _find(occurrences: Sequence[Occurrence], target_id: str) -> Optional[Occurrence]:
    return next((o for o in occurrences if o.id == target_id), None)


def _clean_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    bad_keys = [k for k in changes if not isinstance(k, str)]
    if bad_keys:
        raise RepeatValidationError(
            f"Change field names must be strings, got {', '.join(map(repr, bad_keys))}"
        )
    cleaned = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}
    dropped = sorted(set(changes) - set(cleaned))
    if dropped:
        logger.debug("Ignoring protected fields in change set: %s", ", ".join(dropped))
    return cleaned


def update(
    occurrences: Sequence[Occurrence],
    target_id: str,
    changes: Mapping[str, Any],
    scope: Union[MutationScope, str] = MutationScope.SINGLE,
) -> Sequence[Occurrence]:
    """Apply ``changes`` to one occurrence or to its whole group.

    - Unknown ``target_id``: the input is returned as-is.
    - Target without a group: only the target changes, whatever the scope.
    - ``single`` on a grouped target: the target changes and leaves its group
      (its rule becomes ``none``, the group id is dropped). Siblings are
      untouched.
    - ``all`` on a grouped target: every member of the group changes and
      stays in the group.

    Args:
        occurrences: Current occurrence collection
        target_id: Id of the occurrence the user edited
        changes: Field values to apply, by field or wire name
        scope: ``single`` or ``all``

    Returns:
        The updated collection

    Raises:
        RepeatValidationError: If the scope is unknown or a change is invalid
    """
    scope = coerce_scope(scope)
    target = _find(occurrences, target_id)
    if target is None:
        logger.debug("Update target %s not found; collection unchanged", target_id)
        return occurrences

    cleaned = _clean_changes(changes)
    group_id = target.group_id

    if group_id is None:
        updated = target.apply_changes(cleaned)
        return [updated if o.id == target_id else o for o in occurrences]

    if scope is MutationScope.SINGLE:
        detached = target.apply_changes({**cleaned, "repeat": target.repeat.detached()})
        logger.debug("Detached occurrence %s from group %s", target_id, group_id)
        return [detached if o.id == target_id else o for o in occurrences]

    result = [o.apply_changes(cleaned) if o.group_id == group_id else o for o in occurrences]
    logger.debug(
        "Updated %d occurrence(s) of group %s",
        sum(1 for o in occurrences if o.group_id == group_id),
        group_id,
    )
    return result


def remove(
    occurrences: Sequence[Occurrence],
    target_id: str,
    scope: Union[MutationScope, str] = MutationScope.SINGLE,
) -> Sequence[Occurrence]:
    """Remove one occurrence or its whole group.

    ``all`` on an occurrence without a group removes just that occurrence.
    Unknown ``target_id`` returns the input as-is.

    Raises:
        RepeatValidationError: If the scope is unknown
    """
    scope = coerce_scope(scope)
    target = _find(occurrences, target_id)
    if target is None:
        logger.debug("Delete target %s not found; collection unchanged", target_id)
        return occurrences

    group_id = target.group_id
    if scope is MutationScope.SINGLE or group_id is None:
        return [o for o in occurrences if o.id != target_id]

    remaining = [o for o in occurrences if o.group_id != group_id]
    logger.debug(
        "Removed %d occurrence(s) of group %s",
        len(occurrences) - len(remaining),
        group_id,
    )
    return remaining


delete = remove


def group_members(occurrences: Sequence[Occurrence], target_id: str) -> list[Occurrence]:
    """Return the occurrences an ``all``-scope action on ``target_id`` would touch.

    That is the target's whole group, the target alone when it has no group,
    or nothing when the id is unknown.
    """
    target = _find(occurrences, target_id)
    if target is None:
        return []
    if target.group_id is None:
        return [target]
    return [o for o in occurrences if o.group_id == target.group_id]
