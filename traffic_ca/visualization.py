# -*- coding: utf-8 -*-
"""
traffic_ca/visualization.py

可視化関数:
- WindowRenderer: matplotlib ウィンドウへのリアルタイム描画（ウィンドウを閉じるとセッション停止）
- vehicle_rectangles: 車両矩形（位置・サイズ・色）の計算
- plot_space_time: 時空間図と流量統計の 2x2 プロット
- export_video: 軌跡アニメーションの MP4 エクスポート (GIF フォールバック)
"""

from typing import TYPE_CHECKING, Callable, List, Optional, Tuple
import matplotlib
import matplotlib.pyplot as plt
from matplotlib import animation
from matplotlib.collections import PatchCollection
from matplotlib.patches import Rectangle
import numpy as np

from .road import Road
from .utils import format_stats_line
from .vehicle import VehicleClass

if TYPE_CHECKING:
    from .simulator import SimulationSession


# Window geometry [px]
WINDOW_WIDTH = 1200
WINDOW_HEIGHT = 600
LANE_HEIGHT = 50
VEHICLE_WIDTH = 30
VEHICLE_HEIGHT = 20
DASH_LENGTH = 20   # [cells]

BACKGROUND_COLOR = (50 / 255, 50 / 255, 50 / 255)
LANE_MARKER_COLOR = 'white'
VEHICLE_COLORS = {
    VehicleClass.CAR: (0.0, 100 / 255, 1.0),           # Blue
    VehicleClass.TRUCK: (1.0, 100 / 255, 0.0),         # Orange
    VehicleClass.MOTORCYCLE: (0.0, 200 / 255, 0.0),    # Green
}
CLASS_WIDTH_FACTOR = {
    VehicleClass.CAR: 1.0,
    VehicleClass.TRUCK: 1.5,
    VehicleClass.MOTORCYCLE: 0.5,
}

NON_INTERACTIVE_BACKENDS = ('agg', 'cairo', 'pdf', 'pgf', 'ps', 'svg', 'template')


def _lanes_top(road: Road) -> int:
    return (WINDOW_HEIGHT - road.lanes * LANE_HEIGHT) // 2


def vehicle_rectangles(road: Road) -> List[Tuple[int, int, int, int, Tuple[float, float, float]]]:
    """
    Screen rectangles (x, y, w, h, color) for active vehicles.

    Trucks are 1.5x and motorcycles 0.5x the width of a car.
    """
    scale_factor = WINDOW_WIDTH / road.length
    start_y = _lanes_top(road)
    rects = []
    for v in road.vehicles:
        if not v.is_active:
            continue
        x = int(v.position * scale_factor)
        y = start_y + v.lane * LANE_HEIGHT + (LANE_HEIGHT - VEHICLE_HEIGHT) // 2
        w = int(VEHICLE_WIDTH * CLASS_WIDTH_FACTOR[v.vehicle_class])
        rects.append((x, y, w, VEHICLE_HEIGHT, VEHICLE_COLORS[v.vehicle_class]))
    return rects


class WindowRenderer:
    """
    Real-time road view in a matplotlib window.

    Closing the window calls ``on_close`` (the session's stop()).
    """

    def __init__(self, on_close: Optional[Callable[[], None]] = None, pause: float = 0.001):
        self.on_close = on_close
        self.pause = pause
        self.fig = None
        self.ax = None
        self._collection: Optional[PatchCollection] = None

    @staticmethod
    def is_available() -> bool:
        backend = matplotlib.get_backend().lower()
        return backend not in NON_INTERACTIVE_BACKENDS

    def open(self, road: Road) -> bool:
        """
        Create the window and draw the lane markings.

        Returns:
            False when no interactive backend is available
        """
        if not self.is_available():
            print(f"[WARNING] Matplotlib backend '{matplotlib.get_backend()}' is not interactive")
            return False

        plt.ion()
        self.fig, self.ax = plt.subplots(figsize=(12, 6))
        self.fig.canvas.manager.set_window_title("Traffic Simulator")
        self.fig.patch.set_facecolor(BACKGROUND_COLOR)
        self.ax.set_facecolor(BACKGROUND_COLOR)
        self.ax.set_xlim(0, WINDOW_WIDTH)
        self.ax.set_ylim(WINDOW_HEIGHT, 0)
        self.ax.set_xticks([])
        self.ax.set_yticks([])

        start_y = _lanes_top(road)
        # Lane dividers
        for i in range(road.lanes + 1):
            y = start_y + i * LANE_HEIGHT
            self.ax.plot([0, WINDOW_WIDTH], [y, y], color=LANE_MARKER_COLOR, linewidth=1)

        # Dashed centre lines only if the road is long enough
        if road.length > 20:
            scale_factor = WINDOW_WIDTH / road.length
            for lane in range(road.lanes):
                y = start_y + lane * LANE_HEIGHT + LANE_HEIGHT // 2
                for x in range(0, road.length, DASH_LENGTH * 2):
                    self.ax.plot([x * scale_factor, (x + DASH_LENGTH) * scale_factor], [y, y],
                                 color=LANE_MARKER_COLOR, linewidth=0.8, alpha=0.7)

        self.fig.canvas.mpl_connect('close_event', self._handle_close)
        plt.show(block=False)
        print("[INFO] Graphics initialized successfully.")
        return True

    def _handle_close(self, event):
        self.fig = None
        if self.on_close is not None:
            self.on_close()

    def render(self, road: Road, time_step: int):
        if self.fig is None:
            return

        if self._collection is not None:
            self._collection.remove()

        rects = vehicle_rectangles(road)
        patches = [Rectangle((x, y), w, h) for (x, y, w, h, _) in rects]
        self._collection = PatchCollection(patches, edgecolor='black', linewidth=1)
        self._collection.set_facecolor([color for (*_, color) in rects])
        self.ax.add_collection(self._collection)

        self.ax.set_title(format_stats_line(time_step, road), color='white')
        self.fig.canvas.draw_idle()
        plt.pause(self.pause)

    def close(self):
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
            print("[INFO] Graphics resources cleaned up.")


def plot_space_time(session: 'SimulationSession', output_filename: str):
    """
    Plot space-time diagram and flow statistics.

    Args:
        session: Finished simulation session
        output_filename: Output plot file path

    Note:
        This function creates a 2x2 subplot with:
        - (a) Space-time diagram (needs recorded trajectories)
        - (b) Active vehicles per tick
        - (c) Cumulative generated / exited vehicles
        - (d) Lane changes and mean realized speed per tick
    """
    history = session.history_frame()
    if history.empty:
        print("[WARNING] No history to plot")
        return

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))

    # Plot 1: Space-time diagram
    ax1 = axes[0, 0]
    traj = session.trajectory_frame()
    if not traj.empty:
        for lane, lane_df in traj.groupby('lane'):
            ax1.scatter(lane_df['position'], lane_df['tick'], s=4, alpha=0.6, label=f'Lane {lane}')
        ax1.legend(fontsize=8)
    else:
        ax1.text(0.5, 0.5, 'No trajectories recorded', va='center', ha='center', transform=ax1.transAxes)
    ax1.set_xlabel('Position (cell)', fontsize=12)
    ax1.set_ylabel('Time step', fontsize=12)
    ax1.set_title('(a) Space-Time Diagram', fontsize=14, fontweight='bold')
    ax1.set_xlim([0, session.road.length])
    ax1.invert_yaxis()
    ax1.grid(True, alpha=0.3)

    # Plot 2: Vehicles on road
    ax2 = axes[0, 1]
    ax2.plot(history.index, history['active'], color='tab:blue')
    ax2.set_xlabel('Time step', fontsize=12)
    ax2.set_ylabel('Vehicles', fontsize=12)
    ax2.set_title('(b) Vehicles on Road', fontsize=14, fontweight='bold')
    ax2.grid(True, alpha=0.3)

    # Plot 3: Cumulative counts
    ax3 = axes[1, 0]
    ax3.plot(history.index, history['generated'], label='Generated', color='green')
    ax3.plot(history.index, history['exited'], label='Exited', color='red')
    ax3.set_xlabel('Time step', fontsize=12)
    ax3.set_ylabel('Vehicles', fontsize=12)
    ax3.set_title('(c) Cumulative Flow', fontsize=14, fontweight='bold')
    ax3.legend()
    ax3.grid(True, alpha=0.3)

    # Plot 4: Lane changes and speed
    ax4 = axes[1, 1]
    ax4.bar(history.index, history['lane_changes'], alpha=0.7, color='orange',
            edgecolor='black', label='Lane changes')
    ax4.set_xlabel('Time step')
    ax4.set_ylabel('Lane changes')
    ax4_speed = ax4.twinx()
    ax4_speed.plot(history.index, history['mean_speed'], color='tab:purple', label='Mean speed')
    ax4_speed.set_ylabel('Mean realized speed (cells/tick)')
    ax4.set_title('(d) Lane Changes and Speed', fontsize=14, fontweight='bold')
    ax4.grid(axis='y', alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_filename, dpi=150, bbox_inches='tight')
    print(f"[PASS] Space-time plot saved to {output_filename}")
    plt.close(fig)


def export_video(session: 'SimulationSession',
                 output_filename: str,
                 fps: int = 10) -> None:
    """Export a trajectory animation video (mp4) from recorded trajectories.

    Shows vehicles as points moving along the road (x) on their lane (y).

    Args:
        session: Finished simulation session with record_trajectories enabled
        output_filename: Output video file path (e.g., outputs/sim_anim.mp4)
        fps: Frames per second for the video (default: 10)
    """
    traj = session.trajectory_frame()
    if traj.empty:
        print("[WARNING] No trajectories recorded; skipping video export")
        return

    ticks = np.sort(traj['tick'].unique())
    frames = {tick: frame_df for tick, frame_df in traj.groupby('tick')}

    fig, ax = plt.subplots(figsize=(12, 2 + session.road.lanes * 0.5))
    ax.set_xlim(0, session.road.length)
    ax.set_ylim(session.road.lanes - 0.5, -0.5)
    ax.set_xlabel('Position (cell)')
    ax.set_ylabel('Lane')
    ax.set_yticks(range(session.road.lanes))
    ax.grid(True, alpha=0.2)

    scat = ax.scatter([], [], s=30, alpha=0.9)
    class_colors = np.array([VEHICLE_COLORS[c] for c in VehicleClass])

    def init():
        scat.set_offsets(np.empty((0, 2)))
        return (scat,)

    def update(frame_idx: int):
        tick = ticks[frame_idx]
        frame_df = frames[tick]
        scat.set_offsets(np.column_stack((frame_df['position'], frame_df['lane'])))
        scat.set_color(class_colors[frame_df['vehicle_class'].to_numpy()])
        ax.set_title(f'Traffic Animation - t={tick}')
        return (scat,)

    ani = animation.FuncAnimation(fig, update, frames=len(ticks), init_func=init,
                                  blit=True, interval=1000.0 / max(1, fps))

    try:
        writer = animation.FFMpegWriter(fps=fps, bitrate=1800)
        ani.save(output_filename, writer=writer)
        print(f"[PASS] Video saved to {output_filename}")
    except (FileNotFoundError, RuntimeError, OSError):
        # Fallback: save as GIF using PillowWriter
        gif_out = output_filename.rsplit('.', 1)[0] + '.gif'
        try:
            ani.save(gif_out, writer=animation.PillowWriter(fps=fps))
            print(f"[WARNING] FFmpeg unavailable, saved GIF instead: {gif_out}")
        except (RuntimeError, OSError, ValueError) as e2:
            print(f"[ERROR] Failed to export video: {e2}")
    plt.close(fig)
