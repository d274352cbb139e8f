# -*- coding: utf-8 -*-
"""
traffic_ca/utils.py (ver.1.0 / 2026-10-17)

シミュレータのユーティリティクラスとヘルパー関数:
- Logger: ターミナルとログファイルへの二重出力
- SCRIPT_NAME: スクリプトバージョン識別子
- 隣接車線ヘルパー関数
"""

import sys
import os
from typing import List
from datetime import datetime

# スクリプト識別
SCRIPT_NAME = "traffic_ca"
SCRIPT_VERSION = f"{SCRIPT_NAME} v1.0"


class Logger:
    """
    シミュレーション結果用デュアル出力ロガー。

    ターミナルとログファイルの両方に即時フラッシュで出力。
    """

    def __init__(self, filename: str, script_name: str = SCRIPT_VERSION):
        self.terminal = sys.stdout
        # buffering=1 for line buffering
        self.log = open(filename, 'w', encoding='utf-8', buffering=1)
        self.closed = False
        self.log.write(f"Simulation Log - {script_name}\n")
        self.log.write(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
        self.log.write("=" * 80 + "\n")
        self.flush()

    def write(self, message):
        if self.closed:
            return
        try:
            self.terminal.write(message)
            self.terminal.flush()
        except OSError:
            pass  # Ignore console errors

        self.log.write(message)
        self.log.flush()
        os.fsync(self.log.fileno())

    def flush(self):
        if not self.closed:
            self.terminal.flush()
            self.log.flush()
            os.fsync(self.log.fileno())

    def close(self):
        if not self.closed:
            self.flush()
            self.closed = True
            self.log.close()


# ============================================================================
# Lane Adjacency Helper Functions
# ============================================================================

def get_adjacent_lanes(lane: int, lanes: int) -> List[int]:
    """
    Get adjacent lanes in lane-change order (left neighbour first).

    Args:
        lane: Current lane index
        lanes: Number of lanes on the road

    Returns:
        List of valid neighbour lane indices

    Examples:
        >>> get_adjacent_lanes(1, 3)
        [0, 2]
        >>> get_adjacent_lanes(0, 3)
        [1]
        >>> get_adjacent_lanes(0, 1)
        []
    """
    return [candidate for candidate in (lane - 1, lane + 1) if 0 <= candidate < lanes]


def format_stats_line(time_step: int, road) -> str:
    """One-line status used by both renderers"""
    return (f"Time step: {time_step} | Vehicles: {road.vehicles_count} | "
            f"Total created: {road.total_generated} | Total exited: {road.total_exited}")
