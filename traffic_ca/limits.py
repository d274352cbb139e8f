# -*- coding: utf-8 -*-
"""
traffic_ca/limits.py (v1.0 / 2026-10-17)

道路容量・車両性能の上限値を一元管理するモジュール
================================

目的:
    道路サイズ、車両数、速度、車線変更ルールの定数を単一の場所に定義し、
    ジェネレータ・更新エンジン・CLI で同じ値を参照する。
================================================================================
"""

from dataclasses import dataclass
from enum import Enum


# ============================================================================
# Capacity / Rule Constants (Centralized Definition)
# ============================================================================

@dataclass(frozen=True)
class RoadLimits:
    """
    Immutable limits used throughout the simulator.

    Road dimensions are validated against these at creation time; the
    generator and the update engine read the vehicle and rule values.
    """

    # === Capacity ===
    MAX_VEHICLES: int = 500         # active vehicles per road
    MAX_LANES: int = 10
    MAX_ROAD_LENGTH: int = 1000     # [cells]

    # === Vehicle ===
    MAX_SPEED: int = 5              # [cells/tick]
    VEHICLE_CLASS_COUNT: int = 3    # Car, Truck, Motorcycle

    # === Lane change ===
    LANE_CHANGE_PERCENT: int = 40   # chance per tick for a blocked vehicle
    BLIND_SPOT_CELLS: int = 2       # cells checked behind in the target lane

    # === Generator ===
    MIN_PROBABILITY: int = 0
    MAX_PROBABILITY: int = 100


LIMITS = RoadLimits()

# Grid marker for a free cell
EMPTY_CELL = -1


# ============================================================================
# Enumerations
# ============================================================================

class Occupancy(Enum):
    """Result of an occupancy query."""
    FREE = 0
    OCCUPIED = 1
    OUT_OF_RANGE = -1   # lane or position outside the road
