# -*- coding: utf-8 -*-
"""
traffic_ca/parameters.py

SimulationParameters: シミュレーション実行設定のデータクラス

パラメータカテゴリ:
- 道路設定: 車線数、道路長
- 生成設定: 流入確率 [%]、乱数シード
- ループ設定: ティック間隔 [ms]、最大ステップ数
- 表示設定: グラフィック表示 / テキスト表示、ハートビート間隔
- 記録設定: 軌跡記録（プロット・動画出力用）
"""

import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .limits import LIMITS
from .road import ConfigurationError
from .generator import clamp_probability


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class SimulationParameters:

    # 道路設定
    lanes: int = 3
    road_length: int = 100   # [cells]

    # 生成設定
    entry_probability: int = 20   # [%] per tick, clamped to [0, 100]
    seed: Optional[int] = None    # None / 0: time-derived

    # ループ設定
    delay_ms: int = 200
    max_steps: Optional[int] = None   # None: run until stopped

    # 表示設定
    use_graphics: bool = True
    heartbeat_interval: int = 50   # [ticks] text-free modes only

    # 記録設定
    record_trajectories: bool = False

    def __post_init__(self):
        self._clamp_probability()

    def _clamp_probability(self):
        # Non-integer values are left for validate() to reject
        if _is_int(self.entry_probability):
            self.entry_probability = clamp_probability(self.entry_probability)

    def validate(self):
        """
        Reject settings the simulation cannot start with.

        Raises:
            ConfigurationError: non-integer values, lanes/length out of range,
                negative seed, delay or steps
        """
        for name in ('lanes', 'road_length', 'entry_probability', 'delay_ms'):
            value = getattr(self, name)
            if not _is_int(value):
                raise ConfigurationError(f"{name} must be an integer (got {value!r})")
        for name in ('seed', 'max_steps'):
            value = getattr(self, name)
            if value is not None and not _is_int(value):
                raise ConfigurationError(f"{name} must be an integer (got {value!r})")

        if not 1 <= self.lanes <= LIMITS.MAX_LANES:
            raise ConfigurationError(
                f"Number of lanes must be between 1 and {LIMITS.MAX_LANES}")
        if not 1 <= self.road_length <= LIMITS.MAX_ROAD_LENGTH:
            raise ConfigurationError(
                f"Road length must be between 1 and {LIMITS.MAX_ROAD_LENGTH}")
        if self.seed is not None and self.seed < 0:
            raise ConfigurationError(f"Seed must be non-negative (got {self.seed})")
        if self.delay_ms < 0:
            raise ConfigurationError(f"Delay must be non-negative (got {self.delay_ms})")
        if self.max_steps is not None and self.max_steps < 0:
            raise ConfigurationError(f"Step count must be non-negative (got {self.max_steps})")

    def apply_overrides(self, overrides: Dict[str, Any]) -> int:
        """
        Apply parameter overrides key by key.

        Unknown keys are reported and skipped.

        Returns:
            Number of keys applied
        """
        known = {f.name for f in fields(self)}
        applied = 0
        for k, v in overrides.items():
            if k in known:
                old_val = getattr(self, k)
                setattr(self, k, v)
                print(f"  - {k}: {old_val} -> {v}")
                applied += 1
            else:
                print(f"  - [WARNING] Unknown parameter: {k}")
        # Re-clamp in case the override touched the probability
        self._clamp_probability()
        return applied

    def load_overrides(self, config_path: str) -> int:
        """Apply overrides from a JSON file (see apply_overrides)"""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Config file not found: {config_path}")
        with open(config_path, 'r', encoding='utf-8') as f:
            overrides = json.load(f)
        if not isinstance(overrides, dict):
            raise ConfigurationError(f"Config file must contain a JSON object: {config_path}")

        print(f"\n[CONFIG] Applying overrides from {config_path}:")
        return self.apply_overrides(overrides)

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000.0
