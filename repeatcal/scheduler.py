"""Mapping-level facade used by the event form and the event store.

Collaborators exchange plain dictionaries (camelCase keys, ISO dates, HH:MM
times). This module validates them into models, runs the expander or the
mutator, and serializes the result back.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from . import occurrence_mutator
from .config_loader import Config, load_config
from .id_factory import IdFactory, build_id_factory
from .occurrence_mutator import MutationScope
from .repeat_exceptions import RepeatValidationError
from .repeat_expander import RepeatExpanderConfig, expand
from .repeat_logging import configure_logging
from .repeat_models import EventDefinition, Occurrence

logger = logging.getLogger(__name__)

EventDict = dict[str, Any]


def _parse_occurrences(events: Sequence[Mapping[str, Any]]) -> list[Occurrence]:
    parsed = []
    for index, event in enumerate(events):
        try:
            parsed.append(Occurrence.from_dict(event))
        except RepeatValidationError as exc:
            raise RepeatValidationError(
                f"Invalid event at position {index}: {exc}", errors=exc.errors
            ) from exc
    return parsed


class RepeatScheduler:
    """Create, edit and delete repeating events on wire-format collections."""

    def __init__(self, config: Optional[Config] = None, id_factory: Optional[IdFactory] = None):
        """Initialize the scheduler.

        Args:
            config: Configuration (defaults to ``Config()``)
            id_factory: Identifier generator; when omitted one is built from
                ``config.id_strategy``
        """
        self.config = config or Config()
        self.id_factory = id_factory or build_id_factory(
            self.config.id_strategy, self.config.id_prefix
        )
        self.expander_config = RepeatExpanderConfig.from_settings(self.config)

    @classmethod
    def from_config_file(cls, path: Optional[str] = None) -> "RepeatScheduler":
        """Load configuration, set up console logging at its level and build a scheduler."""
        from . import _init_logging  # noqa: PLC0415

        config = load_config(path)
        _init_logging(config.log_level)
        configure_logging(
            debug_mode=config.log_level.upper() == "DEBUG", level_name=config.log_level
        )
        return cls(config)

    def create(self, form: Mapping[str, Any]) -> list[EventDict]:
        """Expand a submitted event form into the events to store.

        Returns:
            Event dicts in ascending date order; empty when the rule has no
            end date or ends before it starts

        Raises:
            RepeatValidationError: If the form is malformed
        """
        definition = EventDefinition.from_dict(form)
        occurrences = expand(definition, self.id_factory, self.expander_config)
        logger.info(
            "Created %d event(s) for %r (%s)",
            len(occurrences),
            definition.title,
            definition.repeat.type,
        )
        return [o.to_dict() for o in occurrences]

    def edit(
        self,
        events: Sequence[Mapping[str, Any]],
        event_id: str,
        changes: Mapping[str, Any],
        scope: Union[MutationScope, str] = MutationScope.SINGLE,
    ) -> list[EventDict]:
        """Apply an edit to the stored events.

        Raises:
            RepeatValidationError: If the events, changes or scope are invalid
        """
        occurrences = _parse_occurrences(events)
        updated = occurrence_mutator.update(occurrences, event_id, changes, scope)
        return [o.to_dict() for o in updated]

    def delete(
        self,
        events: Sequence[Mapping[str, Any]],
        event_id: str,
        scope: Union[MutationScope, str] = MutationScope.SINGLE,
    ) -> list[EventDict]:
        """Delete one event or its whole series from the stored events.

        Raises:
            RepeatValidationError: If the events or scope are invalid
        """
        occurrences = _parse_occurrences(events)
        remaining = occurrence_mutator.remove(occurrences, event_id, scope)
        removed = len(occurrences) - len(remaining)
        if removed:
            logger.info("Deleted %d event(s) starting from %s", removed, event_id)
        return [o.to_dict() for o in remaining]

    def group_members(
        self, events: Sequence[Mapping[str, Any]], event_id: str
    ) -> list[EventDict]:
        """Events an ``all``-scope edit or delete of ``event_id`` would touch."""
        occurrences = _parse_occurrences(events)
        return [o.to_dict() for o in occurrence_mutator.group_members(occurrences, event_id)]
