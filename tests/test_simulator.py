import signal

import pytest

from traffic_ca.parameters import SimulationParameters
from traffic_ca.road import ConfigurationError
from traffic_ca.simulator import SimulationSession


def _params(**overrides):
    values = dict(lanes=3, road_length=40, entry_probability=50, seed=21,
                  delay_ms=0, heartbeat_interval=0)
    values.update(overrides)
    return SimulationParameters(**values)


class StopAfter:
    """Renderer that requests a stop once a given tick has been shown"""

    def __init__(self, session, tick):
        self.session = session
        self.tick = tick
        self.frames = []

    def render(self, road, time_step):
        self.frames.append((time_step, road.vehicles_count))
        if time_step == self.tick:
            self.session.stop("renderer")


def test_run_stops_at_step_limit():
    session = SimulationSession(_params())

    session.run(max_steps=25)

    assert session.time_step == 25
    assert session.running is False
    assert session.stop_reason == "step limit reached"
    assert len(session.history) == 25


def test_max_steps_from_parameters():
    session = SimulationSession(_params(max_steps=7))
    session.run()
    assert session.time_step == 7


def test_stop_is_observed_at_tick_boundary():
    session = SimulationSession(_params())
    renderer = StopAfter(session, tick=3)
    session.renderer = renderer

    session.run()

    assert session.time_step == 3
    assert [frame[0] for frame in renderer.frames] == [1, 2, 3]
    assert session.stop_reason == "renderer"


def test_delay_between_ticks():
    session = SimulationSession(_params(delay_ms=150))
    sleeps = []

    session.run(max_steps=4, sleep=sleeps.append)

    assert sleeps == [0.15] * 4


def test_heartbeat_printed_without_renderer(capsys):
    session = SimulationSession(_params(heartbeat_interval=5))
    session.run(max_steps=10)

    out = capsys.readouterr().out
    assert out.count("[HEARTBEAT]") == 2
    assert "[Simulation Start" in out


def test_invalid_parameters_are_rejected():
    with pytest.raises(ConfigurationError):
        SimulationSession(_params(lanes=0))
    with pytest.raises(ConfigurationError):
        SimulationSession(_params(road_length=2000))


def test_history_frame_tracks_counters():
    session = SimulationSession(_params())
    session.run(max_steps=60)

    df = session.history_frame()

    assert list(df.columns) == ['active', 'generated', 'exited', 'spawned',
                                'lane_changes', 'blocked', 'mean_speed']
    assert list(df.index) == list(range(1, 61))
    assert df['generated'].is_monotonic_increasing
    assert df['exited'].is_monotonic_increasing
    assert (df['exited'] <= df['generated']).all()
    assert df['spawned'].sum() == session.road.total_generated
    assert df['active'].iloc[-1] == session.road.vehicles_count


def test_statistics_and_flow_rate():
    session = SimulationSession(_params(entry_probability=100, road_length=10))
    session.run(max_steps=50)

    stats = session.get_statistics()

    assert stats['time_steps'] == 50
    assert stats['total_generated'] == session.road.total_generated
    assert stats['total_exited'] == session.road.total_exited
    assert stats['total_exited'] > 0
    assert stats['flow_rate'] == pytest.approx(session.road.total_exited / 50)
    assert 0.0 <= stats['avg_density'] <= 1.0
    assert stats['lane_changes'] == session.history_frame()['lane_changes'].sum()


def test_flow_rate_is_zero_before_any_tick():
    session = SimulationSession(_params())
    assert session.flow_rate == 0.0


def test_trajectories_recorded_on_request():
    session = SimulationSession(_params(record_trajectories=True))
    session.run(max_steps=20)

    traj = session.trajectory_frame()

    assert not traj.empty
    assert set(traj['tick']) <= set(range(1, 21))
    assert (traj['position'] < session.road.length).all()
    assert SimulationSession(_params()).trajectory_frame().empty


def test_sessions_with_same_seed_match():
    a = SimulationSession(_params(record_trajectories=True))
    b = SimulationSession(_params(record_trajectories=True))
    a.run(max_steps=80)
    b.run(max_steps=80)

    assert a.trajectory_frame().equals(b.trajectory_frame())
    assert a.road.vehicle_snapshot() == b.road.vehicle_snapshot()


def test_signal_handler_requests_stop():
    session = SimulationSession(_params())
    previous = session.install_signal_handlers()
    try:
        handler = signal.getsignal(signal.SIGINT)
        session.running = True
        handler(signal.SIGINT, None)
        assert session.running is False
        assert session.stop_reason == f"signal {signal.SIGINT}"
    finally:
        session.restore_signal_handlers(previous)

    assert signal.getsignal(signal.SIGINT) is previous[signal.SIGINT]


def test_print_summary(capsys):
    session = SimulationSession(_params())
    session.run(max_steps=10)
    capsys.readouterr()

    session.print_summary()

    out = capsys.readouterr().out
    assert "Total time steps: 10" in out
    assert f"Total vehicles generated: {session.road.total_generated}" in out
    assert f"Average flow rate: {session.flow_rate:.2f} vehicles/time step" in out
