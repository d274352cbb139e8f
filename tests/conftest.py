import matplotlib

matplotlib.use("Agg")

import pytest

from traffic_ca.road import create_road
from traffic_ca.vehicle import Vehicle


class FixedDraws:
    """Scripted stand-in for numpy's Generator.integers()"""

    def __init__(self, values=()):
        self.values = list(values)
        self.calls = 0

    def integers(self, low, high=None):
        self.calls += 1
        if not self.values:
            raise AssertionError("unexpected random draw")
        return self.values.pop(0)


@pytest.fixture
def fixed_draws():
    return FixedDraws


def build_road(lanes, length, *specs):
    """Road with vehicles given as (lane, position, speed) in sequence order."""
    road = create_road(lanes, length)
    for lane, position, speed in specs:
        road.total_generated += 1
        road.vehicles.append(Vehicle(id=road.total_generated, speed=speed, lane=lane, position=position))
    return road
