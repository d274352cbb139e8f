# -*- coding: utf-8 -*-
"""
traffic_ca/vehicle.py (ver.1.0 / 2026-10-17)

車両データクラスと関連列挙型:
- VehicleClass: 車種（描画サイズのみに影響、物理挙動には影響しない）
- VehicleStatus: 走行中 / 退出済み
- Vehicle: セル単位の位置・速度・車線を持つメイン車両データクラス
"""

from dataclasses import dataclass
from enum import Enum


class VehicleClass(Enum):
    """Vehicle type. Only the rendering footprint depends on it."""
    CAR = 0
    TRUCK = 1
    MOTORCYCLE = 2

    @property
    def label(self) -> str:
        return _CLASS_LABELS[self]

    @property
    def symbol(self) -> str:
        """Single character used by the console renderer"""
        return _CLASS_LABELS[self][0]


_CLASS_LABELS = {
    VehicleClass.CAR: "Car",
    VehicleClass.TRUCK: "Truck",
    VehicleClass.MOTORCYCLE: "Motorcycle",
}


class VehicleStatus(Enum):
    """Lifecycle flag of a vehicle on the road."""
    ACTIVE = 0
    EXITED = 1


@dataclass
class Vehicle:
    """
    Main vehicle dataclass

    Attributes:
        id: 一意のID（生成順に単調増加、再利用なし）
        position: 現在のセル位置 (0 <= position < road.length)
        speed: 公称速度 [cells/tick]、生成時に固定
        lane: 現在の車線 (0 <= lane < road.lanes)
        vehicle_class: 車種
        waiting_time: 予約フィールド（どのルールからも参照されない）
        status: ACTIVE / EXITED
    """

    # Required fields (no defaults)
    id: int
    speed: int
    lane: int

    position: int = 0
    vehicle_class: VehicleClass = VehicleClass.CAR
    waiting_time: int = 0
    status: VehicleStatus = VehicleStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is VehicleStatus.ACTIVE

    def mark_exited(self):
        self.status = VehicleStatus.EXITED

    def __repr__(self) -> str:
        return (f"Vehicle(id={self.id}, lane={self.lane}, pos={self.position}, "
                f"speed={self.speed}, class={self.vehicle_class.label}, "
                f"status={self.status.name})")
