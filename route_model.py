"""Route data structures and route feed loading for NavSim."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from geo_math import closest_index, haversine_distance, initial_bearing


class RouteFeedError(ValueError):
    """Raised when a route feed cannot be turned into coordinates."""


@dataclass(frozen=True)
class Coordinate:
    """Geographic coordinate in decimal degrees (WGS84, not range checked)."""

    latitude: float
    longitude: float

    def distance_to(self, other: "Coordinate") -> float:
        """Great-circle distance to ``other`` in meters."""
        return haversine_distance(self.latitude, self.longitude, other.latitude, other.longitude)

    def bearing_to(self, other: "Coordinate") -> float:
        """Initial bearing to ``other`` in degrees ``[0, 360)``."""
        return initial_bearing(self.latitude, self.longitude, other.latitude, other.longitude)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class BoundingBox:
    """Latitude/longitude extent of a route."""

    min_latitude: float
    min_longitude: float
    max_latitude: float
    max_longitude: float

    @property
    def southwest(self) -> Coordinate:
        return Coordinate(self.min_latitude, self.min_longitude)

    @property
    def northeast(self) -> Coordinate:
        return Coordinate(self.max_latitude, self.max_longitude)

    @property
    def center(self) -> Coordinate:
        return Coordinate(
            (self.min_latitude + self.max_latitude) / 2,
            (self.min_longitude + self.max_longitude) / 2,
        )

    def contains(self, coordinate: Coordinate) -> bool:
        return (
            self.min_latitude <= coordinate.latitude <= self.max_latitude
            and self.min_longitude <= coordinate.longitude <= self.max_longitude
        )


@dataclass
class Route:
    """Ordered sequence of coordinates to follow.

    The total distance and bounding box are computed once at construction;
    the coordinates are stored as a tuple and never modified afterwards.
    """

    coordinates: Sequence[Coordinate] = ()
    title: Optional[str] = None
    id: str = ""
    total_distance: float = field(init=False, default=0.0)
    bounding_box: Optional[BoundingBox] = field(init=False, default=None)

    def __post_init__(self):
        if not self.id:
            self.id = str(uuid.uuid4())
        self.coordinates = tuple(self.coordinates)
        self.total_distance = sum(self.segment_distances())
        if self.coordinates:
            latitudes = [c.latitude for c in self.coordinates]
            longitudes = [c.longitude for c in self.coordinates]
            self.bounding_box = BoundingBox(
                min(latitudes), min(longitudes), max(latitudes), max(longitudes)
            )

    def __len__(self) -> int:
        return len(self.coordinates)

    @property
    def is_empty(self) -> bool:
        return not self.coordinates

    @property
    def start(self) -> Optional[Coordinate]:
        return self.coordinates[0] if self.coordinates else None

    @property
    def destination(self) -> Optional[Coordinate]:
        return self.coordinates[-1] if self.coordinates else None

    def segment_distances(self) -> List[float]:
        """Distances between consecutive coordinates in meters."""
        return [
            self.coordinates[i].distance_to(self.coordinates[i + 1])
            for i in range(len(self.coordinates) - 1)
        ]

    def distance_between(self, start_index: int, end_index: int) -> float:
        """Distance along the route from ``start_index`` to ``end_index``."""
        start_index = max(0, start_index)
        end_index = min(end_index, len(self.coordinates) - 1)
        return sum(
            self.coordinates[i].distance_to(self.coordinates[i + 1])
            for i in range(start_index, end_index)
        )

    def closest_index(self, coordinate: Coordinate) -> Tuple[int, float]:
        """Index of the route coordinate closest to ``coordinate`` and its distance."""
        return closest_index(
            (c.as_tuple() for c in self.coordinates), coordinate.latitude, coordinate.longitude
        )

    @staticmethod
    def from_feed(
        feed_source: Union[
            Sequence[Coordinate],
            Sequence[Tuple[float, float]],
            Sequence[Dict[str, Any]],
            Mapping[str, Any],
            Path,
            str,
        ],
        title: Optional[str] = None,
    ) -> "Route":
        """Create a route from a variety of sources.

        Parameters
        ----------
        feed_source:
            ``Coordinate`` objects, ``(lat, lon)`` pairs, dictionaries with
            ``latitude``/``longitude`` or ``lat``/``lng`` keys, a routing
            service response (``{"routing": [...], "distance": ...}``, also
            accepted nested under ``"map"``), a ``{"coordinates": [...]}``
            document, or a filesystem path to a JSON file containing any of
            these.
        title:
            Optional display title. A ``"title"`` key in a document is used
            when this is not given.
        """
        if isinstance(feed_source, (str, Path)):
            path = Path(feed_source)
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except OSError as exc:
                raise RouteFeedError(f"Cannot read route feed {path}: {exc}") from exc
            except json.JSONDecodeError as exc:
                raise RouteFeedError(f"Route feed {path} is not valid JSON: {exc}") from exc
            if title is None and isinstance(data, Mapping):
                title = data.get("title")
            return Route.from_feed(data, title=title or path.stem)
        if isinstance(feed_source, Mapping):
            title = title or feed_source.get("title")
        return Route(coordinates=Route._normalize_feed(feed_source), title=title)

    @staticmethod
    def _normalize_feed(feed_source: Any) -> List[Coordinate]:
        if isinstance(feed_source, Mapping):
            if "map" in feed_source and isinstance(feed_source["map"], Mapping):
                return Route._normalize_feed(feed_source["map"])
            for key in ("routing", "coordinates", "points"):
                if key in feed_source:
                    return Route._normalize_feed(feed_source[key])
            raise RouteFeedError("Unsupported dictionary structure in route feed")
        if isinstance(feed_source, (str, bytes)) or not isinstance(feed_source, Sequence):
            raise RouteFeedError(
                f"Unsupported route feed type: {type(feed_source)!r}"
            )
        coordinates: List[Coordinate] = []
        for entry in feed_source:
            coordinates.append(Route._parse_entry(entry))
        return coordinates

    @staticmethod
    def _parse_entry(entry: Any) -> Coordinate:
        if isinstance(entry, Coordinate):
            return entry
        if isinstance(entry, Mapping):
            if "latitude" in entry and "longitude" in entry:
                return Route._to_coordinate(entry["latitude"], entry["longitude"], entry)
            if "lat" in entry and ("lng" in entry or "lon" in entry):
                longitude = entry["lng"] if "lng" in entry else entry["lon"]
                return Route._to_coordinate(entry["lat"], longitude, entry)
            if "coordinate" in entry:
                return Route._parse_entry(entry["coordinate"])
            raise RouteFeedError(f"Route point is missing latitude/longitude: {dict(entry)!r}")
        if isinstance(entry, Sequence) and not isinstance(entry, (str, bytes)) and len(entry) == 2:
            return Route._to_coordinate(entry[0], entry[1], entry)
        raise RouteFeedError(
            f"Unsupported route point type: {type(entry)!r}"
        )

    @staticmethod
    def _to_coordinate(latitude: Any, longitude: Any, entry: Any) -> Coordinate:
        try:
            return Coordinate(float(latitude), float(longitude))
        except (TypeError, ValueError) as exc:
            raise RouteFeedError(f"Invalid route point {entry!r}: {exc}") from exc


__all__ = ["Coordinate", "BoundingBox", "Route", "RouteFeedError"]
