"""Grid-bucket spatial index over geographic points."""

from __future__ import annotations

import math
from typing import Iterator

from pet_registry.geo.distance import central_angle
from pet_registry.models.base import GeoPoint

# Absorbs float error so a point exactly on the radius is included
ANGLE_EPSILON = 1e-12

Cell = tuple[int, int]


class GeoCellIndex:
    """Bucket points into fixed-size latitude/longitude cells.

    A radius query visits only the cells overlapping the bounding box
    of the spherical cap, then keeps the points whose exact haversine
    central angle to the centre is within the radius.

    Not thread-safe; the owning store serializes access.

    Parameters
    ----------
    cell_size_deg : float
        Cell edge length in degrees (default 0.25, roughly 28 km of
        latitude).
    """

    def __init__(self, cell_size_deg: float = 0.25) -> None:
        if not 0 < cell_size_deg <= 90:
            raise ValueError("cell_size_deg must be in (0, 90]")
        self.cell_size_deg = cell_size_deg
        self._rows = math.ceil(180 / cell_size_deg)
        self._cols = math.ceil(360 / cell_size_deg)
        self._cells: dict[Cell, dict[str, GeoPoint]] = {}
        self._positions: dict[str, Cell] = {}

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    @property
    def populated_cells(self) -> int:
        return len(self._cells)

    def add(self, key: str, point: GeoPoint) -> None:
        """Index ``point`` under ``key``, replacing any previous entry."""
        self.discard(key)
        cell = self.cell_of(point)
        self._cells.setdefault(cell, {})[key] = point
        self._positions[key] = cell

    def discard(self, key: str) -> None:
        """Remove ``key`` if present."""
        cell = self._positions.pop(key, None)
        if cell is None:
            return
        bucket = self._cells[cell]
        del bucket[key]
        if not bucket:
            del self._cells[cell]

    def clear(self) -> None:
        self._cells.clear()
        self._positions.clear()

    def cell_of(self, point: GeoPoint) -> Cell:
        """Return the (row, col) cell containing ``point``."""
        row = min(self._row(point.latitude), self._rows - 1)
        col = min(self._col(point.longitude), self._cols - 1)
        return row, col

    def within(self, center: GeoPoint, radius: float) -> list[tuple[str, float]]:
        """Find points within a central angle of ``center``.

        Parameters
        ----------
        center : GeoPoint
            Query centre.
        radius : float
            Maximum central angle in radians (inclusive).

        Returns
        -------
        list[tuple[str, float]]
            ``(key, central_angle)`` pairs, unordered.
        """
        if radius < 0:
            return []
        limit = radius + ANGLE_EPSILON
        matches = []
        for bucket in self._candidate_buckets(center, radius):
            for key, point in bucket.items():
                angle = central_angle(center, point)
                if angle <= limit:
                    matches.append((key, angle))
        return matches

    def _row(self, latitude: float) -> int:
        return int(math.floor((latitude + 90.0) / self.cell_size_deg))

    def _col(self, longitude: float) -> int:
        return int(math.floor((longitude + 180.0) / self.cell_size_deg))

    def _candidate_buckets(self, center: GeoPoint, radius: float) -> Iterator[dict[str, GeoPoint]]:
        rows, cols = self._covering_cells(center, radius)
        n_cols = self._cols if cols is None else len(cols)

        # Walking the grid costs more than scanning what is populated
        if len(rows) * n_cols > len(self._cells):
            for (row, col), bucket in self._cells.items():
                if row in rows and (cols is None or col in cols):
                    yield bucket
            return

        for row in rows:
            for col in cols if cols is not None else range(self._cols):
                bucket = self._cells.get((row, col))
                if bucket:
                    yield bucket

    def _covering_cells(self, center: GeoPoint, radius: float) -> tuple[range, set[int] | None]:
        """Rows and columns overlapping the cap's bounding box.

        Columns are ``None`` when the cap spans every longitude (it
        reaches a pole or is wider than the parallel it sits on).
        """
        lat_delta = math.degrees(radius)
        lat_min = center.latitude - lat_delta
        lat_max = center.latitude + lat_delta
        rows = range(
            max(0, self._row(max(lat_min, -90.0))),
            min(self._rows - 1, self._row(min(lat_max, 90.0))) + 1,
        )

        if lat_min <= -90.0 or lat_max >= 90.0 or radius >= math.pi / 2:
            return rows, None

        ratio = math.sin(radius) / math.cos(math.radians(center.latitude))
        if ratio >= 1.0:
            return rows, None
        lon_delta = math.degrees(math.asin(ratio))

        cols: set[int] = set()
        for start, end in _split_longitudes(center.longitude - lon_delta, center.longitude + lon_delta):
            first = self._col(start)
            last = min(self._col(end), self._cols - 1)
            cols.update(range(first, last + 1))
        return rows, cols


def _split_longitudes(lon_min: float, lon_max: float) -> list[tuple[float, float]]:
    """Split a longitude interval crossing the antimeridian into in-range parts."""
    if lon_min <= -180.0:
        return [(lon_min + 360.0, 180.0), (-180.0, lon_max)]
    if lon_max >= 180.0:
        return [(lon_min, 180.0), (-180.0, lon_max - 360.0)]
    return [(lon_min, lon_max)]
