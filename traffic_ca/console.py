# -*- coding: utf-8 -*-
"""
traffic_ca/console.py

テキスト表示:
- render_road: 凡例・車線ごとの占有行・車両詳細（最大5台）を文字列化
- render_frame: 画面クリア + ステータス行 + render_road
- ConsoleRenderer: シミュレーションループ用の描画アダプタ
"""

import sys
from typing import List, Optional, TextIO

from .limits import EMPTY_CELL
from .road import Road
from .utils import format_stats_line

CLEAR_SCREEN = "\033[2J\033[H"
LEGEND = "Legend: [C]=Car  [T]=Truck  [M]=Motorcycle  [ ]=Empty"
MAX_DETAIL_ROWS = 5


def render_road(road: Road) -> str:
    """Text picture of the road built from the occupancy grid."""
    lines: List[str] = [LEGEND, ""]
    border = "=" * (road.length + 2)

    lines.append(border)
    for lane in range(road.lanes):
        cells = []
        for slot in road.grid[lane]:
            if slot == EMPTY_CELL:
                cells.append(" ")
            else:
                cells.append(road.vehicles[int(slot)].vehicle_class.symbol)
        lines.append("|" + "".join(cells) + "|")
    lines.append(border)

    lines.append("")
    lines.append(f"Vehicle details (showing up to {MAX_DETAIL_ROWS}):")
    for v in road.vehicles[:MAX_DETAIL_ROWS]:
        lines.append(f"ID: {v.id:3d} | Type: {v.vehicle_class.label:<10s} | "
                     f"Lane: {v.lane} | Pos: {v.position:3d} | Speed: {v.speed}")
    if road.vehicles_count > MAX_DETAIL_ROWS:
        lines.append(f"... and {road.vehicles_count - MAX_DETAIL_ROWS} more vehicles")

    return "\n".join(lines) + "\n"


def render_frame(road: Road, time_step: int, clear: bool = True) -> str:
    header = format_stats_line(time_step, road)
    return (CLEAR_SCREEN if clear else "") + header + "\n\n" + render_road(road)


class ConsoleRenderer:
    """Text-mode presentation adapter"""

    def __init__(self, stream: Optional[TextIO] = None, clear: bool = True):
        self.stream = stream
        self.clear = clear

    def open(self, road: Optional[Road] = None) -> bool:
        return True

    def render(self, road: Road, time_step: int):
        out = self.stream if self.stream is not None else sys.stdout
        out.write(render_frame(road, time_step, clear=self.clear))
        out.flush()

    def close(self):
        pass
