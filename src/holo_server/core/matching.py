"""Locating the live object that belongs to a stored hologram.

Live objects carry no reference back to their record, so removal has to
find them by what they show. ``StrippedTextMatcher`` compares the
record's rendered text and each nearby object's displayed text with all
markers stripped, and destroys the first object whose text is equal.

The walk is a small state machine::

    SEARCHING -> MATCHED   -> DONE
    SEARCHING -> EXHAUSTED -> DONE

Two holograms with the same visible text placed close together cannot be
told apart; whichever the world yields first is destroyed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from holo_server.core.types import HologramRecord, ObjectHandle, Radius, WorldAdapter
from holo_server.markup.codes import strip_markers

logger = logging.getLogger(__name__)


class MatchState(str, Enum):
    SEARCHING = "searching"
    MATCHED = "matched"
    EXHAUSTED = "exhausted"
    DONE = "done"


@dataclass(frozen=True)
class MatchOutcome:
    """Result of one removal attempt.

    Attributes:
        matched:    True if a live object was found and destroyed.
        handle:     The destroyed object, or ``None``.
        candidates: Number of candidates inspected before stopping.
        trail:      States visited, ending in ``DONE``.
    """

    matched: bool
    handle: ObjectHandle | None
    candidates: int
    trail: tuple[MatchState, ...]


class RemovalMatcher(Protocol):
    def remove_match(
        self, world: WorldAdapter, record: HologramRecord, radius: Radius
    ) -> MatchOutcome: ...


class StrippedTextMatcher:
    """Destroy the first nearby object whose stripped text equals the record's."""

    def remove_match(
        self, world: WorldAdapter, record: HologramRecord, radius: Radius
    ) -> MatchOutcome:
        key = strip_markers(record.rendered_message)
        trail = [MatchState.SEARCHING]
        logger.info(
            "Looking for hologram %s at %s with message %r",
            record.id,
            record.location,
            record.rendered_message,
        )

        inspected = 0
        found: ObjectHandle | None = None
        for candidate in world.find_near(record.location, radius):
            inspected += 1
            shown = world.displayed_text(candidate)
            logger.debug("Candidate %r shows %r", candidate, shown)
            if strip_markers(shown) == key:
                world.destroy(candidate)
                found = candidate
                break

        if found is not None:
            trail.append(MatchState.MATCHED)
            logger.info("Hologram %s removed from the world", record.id)
        else:
            trail.append(MatchState.EXHAUSTED)
            logger.warning(
                "Could not find hologram entity at %s with message %r (%d candidates)",
                record.location,
                record.rendered_message,
                inspected,
            )
        trail.append(MatchState.DONE)

        return MatchOutcome(
            matched=found is not None,
            handle=found,
            candidates=inspected,
            trail=tuple(trail),
        )
