# -*- coding: utf-8 -*-
"""
traffic_ca/generator.py (ver.1.0 / 2026-10-17)

車両生成:
- VehicleGenerator: 乱数源と流入確率を保持するジェネレータ
- configure_generator: シード設定と確率のクランプ（初期化時に一度だけ）
- generate: 確率 [0,100] に従い、ランダムな車線の位置0へ車両を追加

注意:
    生成セル (lane, 0) の既存車両との重なりはチェックしない。
    重なりは次ティックの前方ブロック判定で解消される。
"""

from typing import Optional
import numpy as np

from .limits import LIMITS
from .road import Road
from .vehicle import Vehicle, VehicleClass, VehicleStatus


def clamp_probability(probability: int) -> int:
    """Clamp an entry probability to [0, 100]"""
    if probability < LIMITS.MIN_PROBABILITY:
        return LIMITS.MIN_PROBABILITY
    if probability > LIMITS.MAX_PROBABILITY:
        return LIMITS.MAX_PROBABILITY
    return int(probability)


def generate(road: Optional[Road], probability: int, rng: np.random.Generator) -> bool:
    """
    Try to admit one vehicle at position 0 of a random lane.

    Args:
        road: Target road (None is a no-op)
        probability: Entry probability in percent
        rng: Random source shared with the update engine

    Returns:
        True if a vehicle was added, False otherwise (including a full road)
    """
    if road is None or road.is_full:
        return False

    draw = int(rng.integers(0, 100))
    if draw >= probability:
        return False

    # Draw order: speed, lane, class
    speed = 1 + int(rng.integers(0, LIMITS.MAX_SPEED))
    lane = int(rng.integers(0, road.lanes))
    vehicle_class = VehicleClass(int(rng.integers(0, LIMITS.VEHICLE_CLASS_COUNT)))

    vehicle = Vehicle(
        id=road.total_generated + 1,
        speed=speed,
        lane=lane,
        position=0,
        vehicle_class=vehicle_class,
        waiting_time=0,
        status=VehicleStatus.ACTIVE,
    )
    road.vehicles.append(vehicle)
    road.total_generated += 1
    return True


class VehicleGenerator:
    """
    Seeded vehicle source.

    The generator owns the session's random source; the update engine
    draws its lane-change decisions from the same ``rng``.
    """

    def __init__(self, seed: Optional[int] = None, entry_probability: int = 20):
        self.seed = seed
        self.entry_probability = clamp_probability(entry_probability)
        # seed=0 means "not specified" on the command line
        self.rng = np.random.default_rng(seed if seed else None)

    def generate(self, road: Optional[Road], probability: Optional[int] = None) -> bool:
        if probability is None:
            probability = self.entry_probability
        return generate(road, probability, self.rng)


def configure_generator(seed: Optional[int] = None, entry_probability: int = 20) -> VehicleGenerator:
    """
    Seed the random source and clamp the entry probability.

    Args:
        seed: Random seed (None or 0: seeded from OS entropy)
        entry_probability: Chance [%] of a new vehicle per tick

    Returns:
        Configured VehicleGenerator
    """
    clamped = clamp_probability(entry_probability)
    if clamped != entry_probability:
        print(f"[WARNING] Entry probability {entry_probability} clamped to {clamped}")

    generator = VehicleGenerator(seed=seed, entry_probability=clamped)
    print(f"[INFO] Traffic generator initialized with probability: {generator.entry_probability}%")
    return generator
