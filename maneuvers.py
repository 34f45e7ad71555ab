"""Turn-by-turn guidance derived from look-ahead heading analysis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from geo_math import heading_difference
from route_model import Coordinate

ARRIVAL_INSTRUCTION = "You have reached your destination"
NO_MANEUVER_INSTRUCTION = "Continue straight"
NO_MANEUVER_UPCOMING = "Proceed to destination"
DEFAULT_MANEUVER_THRESHOLD_DEG = 30.0


class TurnDirection(Enum):
    """Direction of a detected maneuver."""

    RIGHT = "Turn right"
    LEFT = "Turn left"
    U_TURN = "Make a U-turn"
    STRAIGHT = "Continue straight"


@dataclass(frozen=True)
class Guidance:
    """Instruction panel content for one simulation tick."""

    current_instruction: str
    upcoming_maneuver: str
    distance_to_next_maneuver: float
    direction: Optional[TurnDirection] = None
    maneuver_index: Optional[int] = None  # route index where the turn happens


def classify_turn(heading_delta: float) -> TurnDirection:
    """Classify a signed heading change in degrees (positive is clockwise)."""

    angle = heading_difference(heading_delta, 0.0)
    if 45 < angle < 135:
        return TurnDirection.RIGHT
    if angle >= 135 or angle <= -135:
        return TurnDirection.U_TURN
    if -135 < angle < -45:
        return TurnDirection.LEFT
    return TurnDirection.STRAIGHT


def _segment_start(
    coordinates: Sequence[Coordinate], index: int, current_index: int, position: Coordinate
) -> Coordinate:
    # The vehicle is somewhere inside the segment it is driving on.
    return position if index == current_index else coordinates[index]


def derive_guidance(
    coordinates: Sequence[Coordinate],
    current_index: int,
    position: Coordinate,
    heading: float,
    remaining_distance: float,
    threshold_deg: float = DEFAULT_MANEUVER_THRESHOLD_DEG,
) -> Guidance:
    """Scan ahead of the vehicle for the first significant heading change.

    Parameters
    ----------
    coordinates:
        Route coordinates, unmodified.
    current_index:
        Index of the route coordinate the vehicle last passed.
    position:
        Interpolated vehicle position inside segment ``current_index``.
    heading:
        Current vehicle heading in degrees.
    remaining_distance:
        Used as the maneuver distance when no turn lies ahead.
    threshold_deg:
        Heading change that counts as a maneuver.
    """

    if current_index >= len(coordinates) - 2:
        return Guidance(ARRIVAL_INSTRUCTION, "", 0.0)

    last_heading = heading
    lookahead = current_index
    while lookahead < len(coordinates) - 2:
        start = _segment_start(coordinates, lookahead, current_index, position)
        segment_heading = start.bearing_to(coordinates[lookahead + 1])
        delta = heading_difference(segment_heading, last_heading)
        if abs(delta) > threshold_deg:
            distance = sum(
                _segment_start(coordinates, i, current_index, position).distance_to(coordinates[i + 1])
                for i in range(current_index, lookahead)
            )
            direction = classify_turn(delta)
            meters = int(distance)
            return Guidance(
                current_instruction=f"Continue straight for {meters} meters",
                upcoming_maneuver=f"{direction.value} in {meters} meters",
                distance_to_next_maneuver=distance,
                direction=direction,
                maneuver_index=lookahead,
            )
        last_heading = segment_heading
        lookahead += 1

    return Guidance(NO_MANEUVER_INSTRUCTION, NO_MANEUVER_UPCOMING, max(0.0, remaining_distance))


__all__ = [
    "ARRIVAL_INSTRUCTION",
    "Guidance",
    "TurnDirection",
    "classify_turn",
    "derive_guidance",
]
