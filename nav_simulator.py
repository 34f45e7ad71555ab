"""
Navigation Simulation Engine for NavSim.
Moves a simulated vehicle along a route on a fixed-interval timer, derives
distance, ETA, heading and turn guidance, and publishes immutable
navigation state snapshots through Qt signals.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from PySide6.QtCore import QObject, QTimer, Signal

from geo_math import interpolate
from logger import LogCategory, LoggableMixin
from maneuvers import Guidance, TurnDirection, derive_guidance
from nav_settings import SimulatorSettings
from route_model import Coordinate, Route


class InvalidRouteError(ValueError):
    """Raised when navigation is started on a route without coordinates."""


@dataclass(frozen=True)
class NavigationState:
    """Snapshot of a navigation session, replaced on every tick."""

    is_navigating: bool = False
    route_coordinates: Tuple[Coordinate, ...] = ()
    current_coordinate_index: int = 0
    car_position: Optional[Coordinate] = None
    car_heading: float = 0.0
    total_distance: float = 0.0
    remaining_distance: float = 0.0
    distance_traveled: float = 0.0
    estimated_time_remaining: float = 0.0  # seconds
    current_speed: float = 0.0  # m/s
    current_instruction: str = ""
    upcoming_maneuver: str = ""
    distance_to_next_maneuver: float = 0.0
    maneuver_direction: Optional[TurnDirection] = None
    maneuver_index: Optional[int] = None
    tick_count: int = 0

    @property
    def last_index(self) -> int:
        return len(self.route_coordinates) - 1

    @property
    def has_arrived(self) -> bool:
        """True once the vehicle reached the last route coordinate."""
        return bool(self.route_coordinates) and self.current_coordinate_index >= self.last_index

    @property
    def progress(self) -> float:
        """Fraction of the route already driven, 0.0 to 1.0."""
        if self.total_distance <= 0:
            return 1.0 if self.has_arrived else 0.0
        return min(1.0, max(0.0, self.distance_traveled / self.total_distance))

    def to_dict(self) -> Dict[str, Any]:
        position = None
        if self.car_position is not None:
            position = {
                "latitude": self.car_position.latitude,
                "longitude": self.car_position.longitude,
            }
        return {
            "is_navigating": self.is_navigating,
            "route_points": len(self.route_coordinates),
            "current_coordinate_index": self.current_coordinate_index,
            "car_position": position,
            "car_heading": self.car_heading,
            "total_distance": self.total_distance,
            "remaining_distance": self.remaining_distance,
            "distance_traveled": self.distance_traveled,
            "estimated_time_remaining": self.estimated_time_remaining,
            "current_speed": self.current_speed,
            "current_instruction": self.current_instruction,
            "upcoming_maneuver": self.upcoming_maneuver,
            "distance_to_next_maneuver": self.distance_to_next_maneuver,
            "maneuver_direction": self.maneuver_direction.value if self.maneuver_direction else None,
            "tick_count": self.tick_count,
        }


def _distance_traveled(
    coordinates: Tuple[Coordinate, ...], index: int, position: Coordinate
) -> float:
    # Completed segments plus the part of the current segment already driven.
    completed = sum(coordinates[i].distance_to(coordinates[i + 1]) for i in range(index))
    return completed + coordinates[index].distance_to(position)


def _guidance_fields(guidance: Guidance) -> Dict[str, Any]:
    return {
        "current_instruction": guidance.current_instruction,
        "upcoming_maneuver": guidance.upcoming_maneuver,
        "distance_to_next_maneuver": guidance.distance_to_next_maneuver,
        "maneuver_direction": guidance.direction,
        "maneuver_index": guidance.maneuver_index,
    }


def initial_state(
    route: Route, start_location: Coordinate, settings: SimulatorSettings
) -> NavigationState:
    """Session state placing the vehicle on the route point closest to ``start_location``."""

    if route.is_empty:
        raise InvalidRouteError("Cannot start navigation on a route without coordinates")
    coordinates = tuple(route.coordinates)
    index, _ = route.closest_index(start_location)
    position = coordinates[index]
    heading = position.bearing_to(coordinates[index + 1]) if index < len(coordinates) - 1 else 0.0
    total = route.total_distance
    guidance = derive_guidance(
        coordinates, index, position, heading, total, settings.maneuver_threshold_deg
    )
    return NavigationState(
        is_navigating=True,
        route_coordinates=coordinates,
        current_coordinate_index=index,
        car_position=position,
        car_heading=heading,
        total_distance=total,
        remaining_distance=total,
        distance_traveled=0.0,
        estimated_time_remaining=total / settings.average_speed_mps,
        **_guidance_fields(guidance),
    )


def advance_state(state: NavigationState, settings: SimulatorSettings) -> NavigationState:
    """Apply one simulation tick and return the new state.

    Pure function: ``state`` is left untouched. States that are not
    navigating, or already at the last coordinate, are returned as is.
    """

    if not state.is_navigating or state.has_arrived or state.car_position is None:
        return state

    coordinates = state.route_coordinates
    index = state.current_coordinate_index
    position = state.car_position
    target = coordinates[index + 1]

    segment_distance = position.distance_to(target)
    # A zero-length segment has no direction; keep the previous heading.
    heading = position.bearing_to(target) if segment_distance > 0 else state.car_heading

    if segment_distance <= settings.step_distance_m:
        index += 1
        new_position = target
        moved = segment_distance
    else:
        latitude, longitude = interpolate(
            position.latitude,
            position.longitude,
            target.latitude,
            target.longitude,
            settings.step_distance_m / segment_distance,
        )
        new_position = Coordinate(latitude, longitude)
        moved = position.distance_to(new_position)

    traveled = _distance_traveled(coordinates, index, new_position)
    remaining = max(0.0, state.total_distance - traveled)
    guidance = derive_guidance(
        coordinates, index, new_position, heading, remaining, settings.maneuver_threshold_deg
    )
    return replace(
        state,
        current_coordinate_index=index,
        car_position=new_position,
        car_heading=heading,
        remaining_distance=remaining,
        distance_traveled=traveled,
        estimated_time_remaining=remaining / settings.average_speed_mps,
        current_speed=moved / settings.tick_interval_s,
        tick_count=state.tick_count + 1,
        **_guidance_fields(guidance),
    )


def _guidance_key(state: NavigationState) -> Tuple[Optional[int], Optional[TurnDirection], str]:
    # Maneuver strings embed the shrinking distance, so compare on identity instead.
    if state.maneuver_index is not None:
        return (state.maneuver_index, state.maneuver_direction, "")
    return (None, None, state.upcoming_maneuver)


class NavigationSimulator(QObject, LoggableMixin):
    """Simulated turn-by-turn navigation along a fixed route.

    ``state_changed`` fires exactly once when a session starts, once per
    tick, and once when the session stops. With ``timer_driven=False`` no
    timer is created and the caller advances the simulation through
    :meth:`manual_step`.
    """
    state_changed = Signal(object)  # NavigationState
    navigation_started = Signal(object)  # NavigationState
    navigation_stopped = Signal(str)  # reason: "stopped", "arrived", "superseded"

    def __init__(
        self,
        settings: Optional[SimulatorSettings] = None,
        timer_driven: bool = True,
        parent: Optional[QObject] = None,
    ):
        QObject.__init__(self, parent)
        LoggableMixin.__init__(self)
        self.settings = settings if settings is not None else SimulatorSettings()
        self._state = NavigationState()
        self._route: Optional[Route] = None
        self._timer: Optional[QTimer] = None
        if timer_driven:
            self._timer = QTimer(self)
            self._timer.setInterval(self.settings.tick_interval_ms)
            self._timer.timeout.connect(self.tick)
        self.log_debug(
            "Simulator ready",
            category=LogCategory.SIMULATION,
            interval_ms=self.settings.tick_interval_ms,
            timer_driven=timer_driven,
        )

    @property
    def state(self) -> NavigationState:
        """The latest published snapshot."""
        return self._state

    @property
    def route(self) -> Optional[Route]:
        return self._route

    @property
    def is_navigating(self) -> bool:
        return self._state.is_navigating

    @property
    def is_timer_active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def start(self, route: Route, start_location: Coordinate) -> NavigationState:
        """Begin a session on ``route`` from the point closest to ``start_location``.

        An active session is stopped with reason ``"superseded"`` first.
        Raises ``InvalidRouteError`` for an empty route, leaving any active
        session running.
        """
        if route.is_empty:
            self.log_warning(
                "Refusing to start navigation on an empty route",
                category=LogCategory.ROUTE,
                route_id=route.id,
            )
            raise InvalidRouteError("Cannot start navigation on a route without coordinates")
        if self._state.is_navigating:
            self.stop("superseded")

        state = initial_state(route, start_location, self.settings)
        self._route = route
        self._state = state
        self.log_navigation_event(
            "Navigation started",
            route_id=route.id,
            title=route.title,
            points=len(route),
            start_index=state.current_coordinate_index,
            total_distance_m=round(route.total_distance, 1),
        )
        self.state_changed.emit(state)
        self.navigation_started.emit(state)
        if self._timer is not None:
            self._timer.start()
        return state

    def stop(self, reason: str = "stopped") -> None:
        """End the session and cancel future ticks. Safe to call repeatedly."""
        if self._timer is not None:
            self._timer.stop()
        if not self._state.is_navigating:
            return
        self._state = replace(self._state, is_navigating=False)
        self.log_navigation_event(
            "Navigation stopped",
            reason=reason,
            ticks=self._state.tick_count,
            remaining_m=round(self._state.remaining_distance, 1),
        )
        self.state_changed.emit(self._state)
        self.navigation_stopped.emit(reason)

    def tick(self) -> NavigationState:
        """Run one simulation step; connected to the timer."""
        previous = self._state
        if not previous.is_navigating:
            return previous
        if previous.has_arrived:
            self.stop("arrived")
            return self._state

        state = advance_state(previous, self.settings)
        self._state = state
        self.log_trace(
            "Tick",
            category=LogCategory.SIMULATION,
            tick=state.tick_count,
            index=state.current_coordinate_index,
            remaining_m=round(state.remaining_distance, 1),
        )
        if _guidance_key(state) != _guidance_key(previous):
            self.log_guidance(
                state.current_instruction,
                state.upcoming_maneuver,
                state.distance_to_next_maneuver,
                index=state.current_coordinate_index,
            )
        self.state_changed.emit(state)

        if state.has_arrived:
            self.log_navigation_event(
                "Destination reached",
                ticks=state.tick_count,
                distance_m=round(state.distance_traveled, 1),
            )
            self.stop("arrived")
        return self._state

    def manual_step(self) -> NavigationState:
        """Advance one tick immediately (useful for tests and manual replay)."""
        return self.tick()


__all__ = [
    "InvalidRouteError",
    "NavigationSimulator",
    "NavigationState",
    "advance_state",
    "initial_state",
]
