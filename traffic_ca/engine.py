# -*- coding: utf-8 -*-
"""
traffic_ca/engine.py (ver.1.0 / 2026-10-17)

交通更新エンジン（1ティック分の状態遷移）:
1. 占有グリッドを全クリア
2. 車両リスト順に各車両を解決
   a. 前方ブロック判定 (position+1 .. position+speed)
   b. ブロック時 40% の確率で隣接車線 (lane-1 → lane+1) への車線変更を試行
      - 側方セル空き、後方2セル（死角）空き、前方1セル以上空き
   c. 実現速度 = 最初の障害物手前までのセル数（なければ公称速度）
   d. 位置更新、道路端を越えたら退出
3. 退出車両を除去（順序保持）

グリッドは解決済み車両の新位置だけを反映するため、更新は車両順序に依存する。
同期型セルオートマトンではない。
"""

from dataclasses import dataclass
from typing import Optional
import numpy as np

from .limits import LIMITS, Occupancy
from .road import Road, is_occupied
from .utils import get_adjacent_lanes
from .vehicle import Vehicle, VehicleStatus

# Debug flag (can be overridden by importing module)
ENABLE_DEBUG_OUTPUT = False


@dataclass
class TickReport:
    """Per-tick summary returned by update()"""

    moved_cells: int = 0      # sum of realized speeds of vehicles still on the road
    blocked: int = 0          # vehicles that saw an obstacle ahead
    lane_changes: int = 0
    exited: int = 0
    active: int = 0           # vehicles left after compaction

    @property
    def mean_speed(self) -> float:
        return self.moved_cells / self.active if self.active else 0.0


def _is_blocked(road: Road, vehicle: Vehicle) -> bool:
    last = min(vehicle.position + vehicle.speed, road.length - 1)
    for pos in range(vehicle.position + 1, last + 1):
        if is_occupied(road, vehicle.lane, pos) is Occupancy.OCCUPIED:
            return True
    return False


def _is_lane_safe(road: Road, vehicle: Vehicle, candidate_lane: int) -> bool:
    """
    Lane-change safety check for one adjacent lane.

    Safe when the side cell is free, no vehicle sits within the blind spot
    behind, and at least the first cell ahead is free.
    """
    position = vehicle.position

    # Side
    if is_occupied(road, candidate_lane, position) is not Occupancy.FREE:
        return False

    # Blind spot
    for pos in range(position - 1, max(position - LIMITS.BLIND_SPOT_CELLS, 0) - 1, -1):
        if is_occupied(road, candidate_lane, pos) is Occupancy.OCCUPIED:
            return False

    # Space ahead
    return _free_cells_ahead(road, candidate_lane, vehicle) > 0


def _free_cells_ahead(road: Road, lane: int, vehicle: Vehicle) -> int:
    """Free cells in front of the vehicle, up to its speed and the road end"""
    free = 0
    last = min(vehicle.position + vehicle.speed, road.length - 1)
    for pos in range(vehicle.position + 1, last + 1):
        if is_occupied(road, lane, pos) is Occupancy.OCCUPIED:
            break
        free += 1
    return free


def find_safe_lane(road: Road, vehicle: Vehicle) -> Optional[int]:
    """First safe adjacent lane (lane-1 checked before lane+1), or None"""
    for candidate_lane in get_adjacent_lanes(vehicle.lane, road.lanes):
        if _is_lane_safe(road, vehicle, candidate_lane):
            return candidate_lane
    return None


def realized_speed(road: Road, vehicle: Vehicle) -> int:
    """
    Cells the vehicle advances this tick in its current lane.

    Stops in front of the first occupied cell; with nothing in the way the
    full speed is used, which may carry the vehicle past the road end.
    """
    last = min(vehicle.position + vehicle.speed, road.length - 1)
    for pos in range(vehicle.position + 1, last + 1):
        if is_occupied(road, vehicle.lane, pos) is Occupancy.OCCUPIED:
            return pos - vehicle.position - 1
    return vehicle.speed


def update(road: Optional[Road], rng: np.random.Generator) -> TickReport:
    """
    Advance the road by one tick, in place.

    Args:
        road: Road to update (None is a no-op)
        rng: Random source for lane-change decisions

    Returns:
        TickReport with movement and lane-change counts
    """
    report = TickReport()
    if road is None:
        return report

    road.clear_grid()

    for slot, vehicle in enumerate(road.vehicles):
        if vehicle.status is VehicleStatus.EXITED:
            continue

        blocked = _is_blocked(road, vehicle)
        if blocked:
            report.blocked += 1

        # Draw only for blocked vehicles
        if blocked and int(rng.integers(0, 100)) < LIMITS.LANE_CHANGE_PERCENT:
            new_lane = find_safe_lane(road, vehicle)
            if new_lane is not None:
                if ENABLE_DEBUG_OUTPUT:
                    print(f"[LC] V{vehicle.id}: lane {vehicle.lane} -> {new_lane} at x={vehicle.position}")
                vehicle.lane = new_lane
                report.lane_changes += 1

        speed = realized_speed(road, vehicle)
        new_position = vehicle.position + speed

        if new_position >= road.length:
            vehicle.mark_exited()
            road.total_exited += 1
            report.exited += 1
        else:
            vehicle.position = new_position
            road.place(slot, vehicle)
            report.moved_cells += speed

    road.compact()
    report.active = road.vehicles_count
    return report
