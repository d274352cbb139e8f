# -*- coding: utf-8 -*-
"""
traffic_ca/road.py (ver.1.0 / 2026-10-17)

道路状態コンテナ:
- Road: 車線数・道路長・走行中車両リスト・占有グリッドを保持
- create_road: 寸法を検証して Road を生成
- is_occupied: 占有グリッドの三値クエリ (FREE / OCCUPIED / OUT_OF_RANGE)
- ConfigurationError: 設定範囲外エラー

占有グリッド:
- shape = (lanes, length) の numpy 配列、値は車両スロット番号、空きは -1
- 毎ティック更新エンジンがクリアし、車両の確定位置を順に書き込む
"""

from typing import List, Optional, Tuple
import numpy as np

from .limits import LIMITS, EMPTY_CELL, Occupancy
from .vehicle import Vehicle, VehicleClass, VehicleStatus


class ConfigurationError(ValueError):
    """Raised when road or simulation settings are outside the allowed range."""


class Road:
    """
    Multi-lane road with a dense occupancy grid.

    Dimensions are fixed after creation. Vehicles are appended by the
    generator and mutated in place by the update engine.
    """

    def __init__(self, lanes: int, length: int):
        if not 1 <= lanes <= LIMITS.MAX_LANES:
            raise ConfigurationError(
                f"Number of lanes must be between 1 and {LIMITS.MAX_LANES} (got {lanes})")
        if not 1 <= length <= LIMITS.MAX_ROAD_LENGTH:
            raise ConfigurationError(
                f"Road length must be between 1 and {LIMITS.MAX_ROAD_LENGTH} (got {length})")

        self._lanes = int(lanes)
        self._length = int(length)

        self.vehicles: List[Vehicle] = []
        self.total_generated = 0
        self.total_exited = 0

        self.grid = np.full((self._lanes, self._length), EMPTY_CELL, dtype=np.int32)

    @property
    def lanes(self) -> int:
        return self._lanes

    @property
    def length(self) -> int:
        return self._length

    @property
    def vehicles_count(self) -> int:
        """Number of vehicles currently on the road"""
        return len(self.vehicles)

    @property
    def is_full(self) -> bool:
        return len(self.vehicles) >= LIMITS.MAX_VEHICLES

    # ------------------------------------------------------------------
    # Grid maintenance
    # ------------------------------------------------------------------

    def clear_grid(self):
        self.grid.fill(EMPTY_CELL)

    def place(self, slot: int, vehicle: Vehicle):
        """Write a vehicle's slot index at its current cell."""
        self.grid[vehicle.lane, vehicle.position] = slot

    def occupant(self, lane: int, position: int) -> Optional[Vehicle]:
        """Vehicle recorded in the grid at (lane, position), or None."""
        if is_occupied(self, lane, position) is not Occupancy.OCCUPIED:
            return None
        return self.vehicles[int(self.grid[lane, position])]

    def compact(self) -> int:
        """
        Drop exited vehicles, keeping the order of the rest.

        Grid entries are remapped to the new slot indices so the grid keeps
        pointing at the right vehicles after the list shrinks.

        Returns:
            Number of vehicles removed
        """
        remap = np.full(len(self.vehicles), EMPTY_CELL, dtype=self.grid.dtype)
        kept: List[Vehicle] = []
        for slot, vehicle in enumerate(self.vehicles):
            if vehicle.status is not VehicleStatus.EXITED:
                remap[slot] = len(kept)
                kept.append(vehicle)

        removed = len(self.vehicles) - len(kept)
        if removed:
            mask = self.grid != EMPTY_CELL
            self.grid[mask] = remap[self.grid[mask]]
            self.vehicles = kept
        return removed

    # ------------------------------------------------------------------
    # Read-only accessors for presentation
    # ------------------------------------------------------------------

    def vehicle_snapshot(self) -> List[Tuple[int, int, int, VehicleClass, VehicleStatus]]:
        """(id, position, lane, class, status) for every vehicle on the road"""
        return [(v.id, v.position, v.lane, v.vehicle_class, v.status) for v in self.vehicles]

    def counters(self) -> dict:
        return {
            'lanes': self._lanes,
            'length': self._length,
            'total_generated': self.total_generated,
            'total_exited': self.total_exited,
            'active': len(self.vehicles),
        }

    def __repr__(self) -> str:
        return (f"Road(lanes={self._lanes}, length={self._length}, "
                f"active={len(self.vehicles)}, generated={self.total_generated}, "
                f"exited={self.total_exited})")


def create_road(lanes: int, length: int) -> Road:
    """
    Create an empty road.

    Args:
        lanes: Number of lanes [1, MAX_LANES]
        length: Road length in cells [1, MAX_ROAD_LENGTH]

    Returns:
        New Road instance

    Raises:
        ConfigurationError: lanes or length out of range
    """
    return Road(lanes, length)


def is_occupied(road: Optional[Road], lane: int, position: int) -> Occupancy:
    """
    Check whether a cell holds a vehicle.

    Out-of-range coordinates (and a missing road) return OUT_OF_RANGE,
    which callers must treat as "do not consider", never as FREE.
    """
    if road is None or not 0 <= lane < road.lanes or not 0 <= position < road.length:
        return Occupancy.OUT_OF_RANGE
    if road.grid[lane, position] != EMPTY_CELL:
        return Occupancy.OCCUPIED
    return Occupancy.FREE
