import numpy as np

from traffic_ca.generator import VehicleGenerator, clamp_probability, configure_generator, generate
from traffic_ca.limits import LIMITS
from traffic_ca.road import create_road
from traffic_ca.vehicle import VehicleClass, VehicleStatus

from conftest import FixedDraws


def test_zero_probability_never_adds_a_vehicle():
    road = create_road(3, 50)
    rng = np.random.default_rng(3)

    results = [generate(road, 0, rng) for _ in range(1000)]

    assert not any(results)
    assert road.vehicles_count == 0
    assert road.total_generated == 0


def test_full_probability_adds_until_capacity():
    road = create_road(3, 50)
    rng = np.random.default_rng(3)

    results = [generate(road, 100, rng) for _ in range(LIMITS.MAX_VEHICLES + 10)]

    assert all(results[:LIMITS.MAX_VEHICLES])
    assert not any(results[LIMITS.MAX_VEHICLES:])
    assert road.vehicles_count == LIMITS.MAX_VEHICLES
    assert road.total_generated == LIMITS.MAX_VEHICLES


def test_capacity_is_never_exceeded():
    road = create_road(2, 20)
    rng = np.random.default_rng(11)
    for i in range(3000):
        generate(road, 70, rng)
        assert road.vehicles_count <= LIMITS.MAX_VEHICLES


def test_full_road_consumes_no_random_draw():
    road = create_road(1, 10)
    rng = np.random.default_rng(0)
    for _ in range(LIMITS.MAX_VEHICLES):
        generate(road, 100, rng)

    draws = FixedDraws()
    assert generate(road, 100, draws) is False
    assert draws.calls == 0


def test_new_vehicle_fields_follow_draw_order():
    road = create_road(4, 30)
    road.total_generated = 9
    # entry draw, speed draw, lane draw, class draw
    draws = FixedDraws([5, 2, 3, 1])

    assert generate(road, 20, draws) is True

    vehicle = road.vehicles[-1]
    assert vehicle.id == 10
    assert vehicle.position == 0
    assert vehicle.speed == 3
    assert vehicle.lane == 3
    assert vehicle.vehicle_class is VehicleClass.TRUCK
    assert vehicle.status is VehicleStatus.ACTIVE
    assert vehicle.waiting_time == 0
    assert road.total_generated == 10


def test_draw_at_probability_is_rejected():
    road = create_road(1, 10)
    assert generate(road, 20, FixedDraws([20])) is False
    assert generate(road, 20, FixedDraws([19, 0, 0, 0])) is True


def test_generated_values_stay_in_range():
    road = create_road(3, 40)
    rng = np.random.default_rng(5)
    for _ in range(300):
        generate(road, 100, rng)

    assert {v.speed for v in road.vehicles} <= set(range(1, LIMITS.MAX_SPEED + 1))
    assert {v.lane for v in road.vehicles} <= {0, 1, 2}
    assert {v.vehicle_class for v in road.vehicles} == set(VehicleClass)
    assert [v.id for v in road.vehicles] == list(range(1, 301))


def test_spawn_cell_is_not_checked_for_occupants():
    road = create_road(1, 10)
    rng = np.random.default_rng(2)

    assert generate(road, 100, rng)
    assert generate(road, 100, rng)
    assert [(v.lane, v.position) for v in road.vehicles] == [(0, 0), (0, 0)]


def test_missing_road_is_a_no_op():
    assert generate(None, 100, FixedDraws()) is False


def test_clamp_probability():
    assert clamp_probability(-5) == 0
    assert clamp_probability(0) == 0
    assert clamp_probability(55) == 55
    assert clamp_probability(100) == 100
    assert clamp_probability(250) == 100


def test_configure_generator_clamps_and_reports(capsys):
    generator = configure_generator(seed=4, entry_probability=150)

    out = capsys.readouterr().out
    assert generator.entry_probability == 100
    assert "[WARNING] Entry probability 150 clamped to 100" in out
    assert "Traffic generator initialized with probability: 100%" in out


def test_same_seed_gives_same_vehicles():
    road_a, road_b = create_road(3, 50), create_road(3, 50)
    gen_a = VehicleGenerator(seed=42, entry_probability=50)
    gen_b = VehicleGenerator(seed=42, entry_probability=50)
    for _ in range(100):
        gen_a.generate(road_a)
        gen_b.generate(road_b)

    assert road_a.vehicle_snapshot() == road_b.vehicle_snapshot()
    assert [v.speed for v in road_a.vehicles] == [v.speed for v in road_b.vehicles]


def test_zero_seed_uses_entropy():
    generator = VehicleGenerator(seed=0, entry_probability=100)
    road = create_road(2, 10)
    assert generator.generate(road) is True


def test_explicit_probability_overrides_configured_one():
    generator = VehicleGenerator(seed=1, entry_probability=100)
    road = create_road(2, 10)
    assert generator.generate(road, probability=0) is False
    assert road.vehicles_count == 0
