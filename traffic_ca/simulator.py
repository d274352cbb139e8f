# -*- coding: utf-8 -*-
"""
traffic_ca/simulator.py (ver.1.0 / 2026-10-17)

シミュレーションセッション:
- SimulationSession: 道路・ジェネレータ・描画アダプタを所有し、固定レートのティックループを実行
- 停止フラグ (running) はティック境界でのみ確認（ティック途中で中断しない）
- SIGINT / SIGTERM ハンドラ、ウィンドウのクローズイベントから stop() を呼ぶ

主要機能:
- ティックごとの統計履歴 (pandas DataFrame)
- 軌跡記録（プロット・動画出力用、オプション）
- 最終統計の表示と JSON 用統計辞書
"""

import signal
import sys
import time
from typing import Callable, Dict, List, Optional
import numpy as np
import pandas as pd

from .engine import TickReport, update
from .generator import VehicleGenerator, configure_generator
from .parameters import SimulationParameters
from .road import Road, create_road
from .utils import SCRIPT_VERSION


class SimulationSession:
    """
    One simulation run.

    Owns its road and random source; nothing is shared between sessions.
    Presentation adapters only read the road after a tick has completed.
    """

    def __init__(self,
                 params: SimulationParameters,
                 renderer=None,
                 generator: Optional[VehicleGenerator] = None):
        """
        Initialize session

        Args:
            params: Simulation parameters (validated here)
            renderer: Presentation adapter with render(road, time_step), or None
            generator: Pre-configured generator (default: built from params)
        """
        params.validate()
        self.params = params
        self.road: Road = create_road(params.lanes, params.road_length)
        self.generator = generator or configure_generator(params.seed, params.entry_probability)
        self.renderer = renderer

        self.running = False
        self.time_step = 0
        self.stop_reason: Optional[str] = None

        # Statistics
        self.history: List[Dict[str, float]] = []
        self.trajectories: List[Dict[str, int]] = []
        self.lane_change_total = 0
        self.last_report: Optional[TickReport] = None

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def stop(self, reason: str = "stop requested"):
        """Request a stop; observed at the next tick boundary."""
        if self.running:
            self.stop_reason = reason
        self.running = False

    def install_signal_handlers(self) -> dict:
        """
        Route SIGINT / SIGTERM to stop().

        Returns:
            Previous handlers, for restore_signal_handlers()
        """
        def handle_signal(signum, frame):
            print("\nShutting down traffic simulator...")
            self.stop(f"signal {signum}")

        previous = {}
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, handle_signal)
        return previous

    @staticmethod
    def restore_signal_handlers(previous: dict):
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)

    def step(self) -> TickReport:
        """Run one tick: generate, update, record."""
        self.time_step += 1
        generated = self.generator.generate(self.road)
        report = update(self.road, self.generator.rng)
        self.last_report = report
        self.lane_change_total += report.lane_changes
        self._record(report, generated)
        return report

    def run(self, max_steps: Optional[int] = None,
            sleep: Callable[[float], None] = time.sleep):
        """
        Run the tick loop until stopped or max_steps is reached.

        Args:
            max_steps: Tick limit (default: params.max_steps, None = unbounded)
            sleep: Inter-tick delay function
        """
        if max_steps is None:
            max_steps = self.params.max_steps

        print(f"\n{'='*80}")
        print(f"[Simulation Start - {SCRIPT_VERSION}]")
        print(f"  Road configuration: {self.road.lanes} lanes, {self.road.length} units long")
        print(f"  Entry probability: {self.generator.entry_probability}%")
        print(f"  Tick delay: {self.params.delay_ms}ms")
        if max_steps is not None:
            print(f"  Max steps: {max_steps}")
        else:
            print("  Press Ctrl+C to stop the simulation")
        print(f"{'='*80}\n")
        sys.stdout.flush()

        self.running = True
        delay = self.params.delay_seconds
        while self.running:
            if max_steps is not None and self.time_step >= max_steps:
                self.stop_reason = "step limit reached"
                break

            report = self.step()

            if self.renderer is not None:
                self.renderer.render(self.road, self.time_step)
            elif (self.params.heartbeat_interval > 0
                  and self.time_step % self.params.heartbeat_interval == 0):
                print(f"[HEARTBEAT] t={self.time_step} | Vehicles: {self.road.vehicles_count} | "
                      f"Generated: {self.road.total_generated} | Exited: {self.road.total_exited} | "
                      f"Avg v={report.mean_speed:.2f} cells/tick | LC: {report.lane_changes}",
                      flush=True)

            if delay > 0:
                sleep(delay)

        self.running = False

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def _record(self, report: TickReport, generated: bool):
        self.history.append({
            'tick': self.time_step,
            'active': self.road.vehicles_count,
            'generated': self.road.total_generated,
            'exited': self.road.total_exited,
            'spawned': int(generated),
            'lane_changes': report.lane_changes,
            'blocked': report.blocked,
            'mean_speed': report.mean_speed,
        })
        if self.params.record_trajectories:
            for v in self.road.vehicles:
                self.trajectories.append({
                    'tick': self.time_step,
                    'id': v.id,
                    'lane': v.lane,
                    'position': v.position,
                    'vehicle_class': v.vehicle_class.value,
                })

    def history_frame(self) -> pd.DataFrame:
        """Per-tick history as a DataFrame indexed by tick"""
        columns = ['tick', 'active', 'generated', 'exited', 'spawned',
                   'lane_changes', 'blocked', 'mean_speed']
        df = pd.DataFrame(self.history, columns=columns)
        return df.set_index('tick')

    def trajectory_frame(self) -> pd.DataFrame:
        columns = ['tick', 'id', 'lane', 'position', 'vehicle_class']
        return pd.DataFrame(self.trajectories, columns=columns)

    @property
    def flow_rate(self) -> float:
        """Exited vehicles per time step"""
        return self.road.total_exited / self.time_step if self.time_step > 0 else 0.0

    def get_statistics(self) -> dict:
        """Return a dictionary of key simulation statistics."""
        speeds = [h['mean_speed'] for h in self.history if h['active'] > 0]
        densities = [h['active'] / (self.road.lanes * self.road.length) for h in self.history]
        return {
            'time_steps': self.time_step,
            'lanes': self.road.lanes,
            'length': self.road.length,
            'total_generated': self.road.total_generated,
            'total_exited': self.road.total_exited,
            'active': self.road.vehicles_count,
            'flow_rate': self.flow_rate,
            'lane_changes': self.lane_change_total,
            'avg_speed': float(np.mean(speeds)) if speeds else 0.0,
            'avg_density': float(np.mean(densities)) if densities else 0.0,
            'stop_reason': self.stop_reason,
        }

    def print_summary(self):
        print("\nSimulation Summary:")
        print(f"Total time steps: {self.time_step}")
        print(f"Total vehicles generated: {self.road.total_generated}")
        print(f"Total vehicles that exited: {self.road.total_exited}")
        print(f"Vehicles still on road: {self.road.vehicles_count}")
        print(f"Average flow rate: {self.flow_rate:.2f} vehicles/time step")
        sys.stdout.flush()
