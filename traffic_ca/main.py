#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
多車線セルオートマトン交通シミュレータ - メインエントリポイント
==================================================

バージョン: v1.0
日付: 2026-10-17

実行方法:
    # セルフテスト（基本シナリオの確認）
    python -m traffic_ca.main --selftest

    # テキスト表示で 200 ステップ
    python -m traffic_ca.main -l 3 -r 100 -p 20 -g 0 -n 200

    # グラフィック表示（Ctrl+C またはウィンドウを閉じて終了）
    python -m traffic_ca.main -l 4 -r 200 -p 35 -s 42

    # パラメータオーバーライド + 統計 JSON のみ出力
    python -m traffic_ca.main -n 1000 -t 0 --config params.json --silent
"""

import argparse
import io
import json
import os
import sys
from typing import Optional

import numpy as np

from .console import ConsoleRenderer
from .engine import update
from .generator import configure_generator, generate
from .limits import LIMITS
from .parameters import SimulationParameters
from .road import ConfigurationError, create_road
from .simulator import SimulationSession
from .vehicle import Vehicle, VehicleStatus


# ============================================================================
# Self-test scenarios
# ============================================================================

def _check(label: str, condition: bool) -> bool:
    print(f"  [{'PASS' if condition else 'FAIL'}] {label}")
    return condition


def selftest() -> bool:
    """基本シナリオのセルフテスト"""
    print("=" * 80)
    print("Traffic update engine self-test")
    print("=" * 80)
    rng = np.random.default_rng(1)
    ok = True

    print("\n### Scenario A: single vehicle leaves a short road ###")
    road = create_road(1, 5)
    road.vehicles.append(Vehicle(id=1, speed=5, lane=0))
    road.total_generated = 1
    update(road, rng)
    ok &= _check("vehicle exited", road.vehicles_count == 0 and road.total_exited == 1)

    print("\n### Scenario B: rear vehicle stops behind the resolved front vehicle ###")
    road = create_road(1, 20)
    front = Vehicle(id=1, speed=3, lane=0, position=2)
    rear = Vehicle(id=2, speed=5, lane=0, position=0)
    road.vehicles.extend([front, rear])
    update(road, rng)
    ok &= _check(f"front at 5 (got {front.position}), rear at 4 (got {rear.position})",
                 front.position == 5 and rear.position == 4)

    print("\n### Scenario C: entry probability bounds ###")
    road = create_road(2, 50)
    added = sum(generate(road, 0, rng) for _ in range(1000))
    ok &= _check("probability=0 never adds", added == 0 and road.vehicles_count == 0)
    results = [generate(road, 100, rng) for _ in range(LIMITS.MAX_VEHICLES + 5)]
    ok &= _check("probability=100 fills to capacity",
                 all(results[:LIMITS.MAX_VEHICLES]) and not any(results[LIMITS.MAX_VEHICLES:]))

    print("\n### Scenario D: no safe neighbour lane ###")
    road = create_road(3, 20)
    blocker = Vehicle(id=1, speed=1, lane=1, position=4)
    left = Vehicle(id=2, speed=1, lane=0, position=1)
    right = Vehicle(id=3, speed=1, lane=2, position=0)
    ego = Vehicle(id=4, speed=5, lane=1, position=2)
    road.vehicles.extend([blocker, left, right, ego])
    update(road, rng)
    ok &= _check(f"ego stays in lane 1 at 4 (got lane {ego.lane}, x={ego.position})",
                 ego.lane == 1 and ego.position == 4 and ego.status is VehicleStatus.ACTIVE)

    print("\n" + "=" * 80)
    print("[SUCCESS] All self-tests passed!" if ok else "[FAILED] Some self-tests failed")
    print("=" * 80)
    return ok


# ============================================================================
# Simulation mode
# ============================================================================

def simulation_mode(params: SimulationParameters,
                    plot_path: Optional[str] = None,
                    video_path: Optional[str] = None,
                    log_path: Optional[str] = None,
                    silent: bool = False) -> bool:
    """
    フルシミュレーションモード

    引数:
        params: 検証前のシミュレーションパラメータ
        plot_path: 時空間プロットの出力先
        video_path: アニメーション動画の出力先
        log_path: ログファイル（ターミナルと二重出力）
        silent: サイレントモード (JSON_STATSのみ出力)
    """
    original_stdout = sys.stdout
    if silent:
        sys.stdout = io.StringIO()

    logger = None
    if log_path and not silent:
        from .utils import Logger
        log_dir = os.path.dirname(os.path.abspath(log_path))
        os.makedirs(log_dir, exist_ok=True)
        logger = Logger(log_path)
        sys.stdout = logger

    if plot_path or video_path:
        params.record_trajectories = True

    try:
        try:
            session = SimulationSession(params)
        except ConfigurationError as e:
            sys.stdout = original_stdout
            print(f"[ERROR] {e}")
            return False

        renderer = None
        if params.use_graphics and not silent:
            from .visualization import WindowRenderer
            window = WindowRenderer(on_close=lambda: session.stop("window closed"))
            if window.open(session.road):
                renderer = window
            else:
                print("Failed to initialize graphics, falling back to text mode.")
                params.use_graphics = False
        if renderer is None and not silent and params.delay_ms > 0:
            renderer = ConsoleRenderer()
        session.renderer = renderer

        previous_handlers = session.install_signal_handlers()
        try:
            session.run()
        finally:
            session.restore_signal_handlers(previous_handlers)
            if renderer is not None:
                renderer.close()

        session.print_summary()

        stats = session.get_statistics()
        if silent:
            sys.stdout = original_stdout
        print("\n[JSON_STATS] " + json.dumps(stats))
        sys.stdout.flush()

        if plot_path or video_path:
            from .visualization import plot_space_time, export_video
            if plot_path:
                plot_space_time(session, plot_path)
            if video_path:
                export_video(session, video_path)
    finally:
        if logger is not None:
            logger.close()
            sys.stdout = original_stdout
        elif silent:
            sys.stdout = original_stdout

    if log_path and not silent:
        print(f"\nSimulation completed. Log saved to: {log_path}")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="多車線セルオートマトン交通シミュレータ v1.0",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
実行例:
  python -m traffic_ca.main --selftest
  python -m traffic_ca.main -l 3 -r 100 -p 20 -g 0 -n 200
  python -m traffic_ca.main -n 500 -t 0 -g 0 --plot outputs/space_time.png
        """
    )
    parser.add_argument('-l', '--lanes', type=int, default=3,
                        help=f'車線数 (1-{LIMITS.MAX_LANES}、デフォルト: 3)')
    parser.add_argument('-r', '--length', type=int, default=100,
                        help=f'道路長 [セル] (1-{LIMITS.MAX_ROAD_LENGTH}、デフォルト: 100)')
    parser.add_argument('-p', '--probability', type=int, default=20,
                        help='流入確率 [%%] (0-100、デフォルト: 20)')
    parser.add_argument('-s', '--seed', type=int, default=0,
                        help='乱数シード (0 = 時刻ベース、デフォルト: 0)')
    parser.add_argument('-t', '--delay', type=int, default=200,
                        help='ステップ間の待ち時間 [ms] (デフォルト: 200)')
    parser.add_argument('-g', '--graphics', type=int, choices=[0, 1], default=1,
                        help='グラフィック表示 (0=off, 1=on、デフォルト: 1)')
    parser.add_argument('-n', '--steps', type=int, default=None,
                        help='最大ステップ数 (デフォルト: Ctrl+C まで継続)')
    parser.add_argument('--config', type=str, default=None,
                        help='パラメータオーバーライド用JSON設定ファイルのパス')
    parser.add_argument('--log', type=str, default=None,
                        help='ログファイルのパス (ターミナルと二重出力)')
    parser.add_argument('--plot', type=str, default=None,
                        help='時空間プロットの出力先 (PNG)')
    parser.add_argument('--export_video', type=str, default=None,
                        help='軌跡アニメーション動画の出力先 (MP4、FFmpegなしの場合はGIF)')
    parser.add_argument('--silent', action='store_true',
                        help='サイレントモード: JSON_STATSのみ標準出力')
    parser.add_argument('--selftest', action='store_true',
                        help='基本シナリオのセルフテストを実行して終了')
    return parser


def main(argv: Optional[list] = None) -> int:
    """メインエントリポイント"""
    args = build_parser().parse_args(argv)

    if args.selftest:
        return 0 if selftest() else 1

    params = SimulationParameters(
        lanes=args.lanes,
        road_length=args.length,
        entry_probability=args.probability,
        seed=args.seed or None,
        delay_ms=args.delay,
        max_steps=args.steps,
        use_graphics=bool(args.graphics),
    )

    try:
        if args.config:
            params.load_overrides(args.config)
        params.validate()
    except (ConfigurationError, json.JSONDecodeError) as e:
        print(f"[ERROR] {e}")
        return 1

    success = simulation_mode(params,
                              plot_path=args.plot,
                              video_path=args.export_video,
                              log_path=args.log,
                              silent=args.silent)
    if not success:
        print("\n" + "=" * 80)
        print("[FAILED] Simulation failed to run")
        print("=" * 80)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
