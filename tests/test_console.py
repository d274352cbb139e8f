import io

from traffic_ca.console import CLEAR_SCREEN, ConsoleRenderer, render_frame, render_road
from traffic_ca.road import create_road
from traffic_ca.vehicle import Vehicle, VehicleClass


def _road_with(*vehicles, lanes=2, length=5):
    road = create_road(lanes, length)
    for slot, vehicle in enumerate(vehicles):
        road.vehicles.append(vehicle)
        road.place(slot, vehicle)
    road.total_generated = len(vehicles)
    return road


def test_render_road_layout():
    road = _road_with(
        Vehicle(id=1, speed=3, lane=0, position=2, vehicle_class=VehicleClass.TRUCK),
        Vehicle(id=2, speed=1, lane=1, position=0, vehicle_class=VehicleClass.MOTORCYCLE),
    )

    expected = (
        "Legend: [C]=Car  [T]=Truck  [M]=Motorcycle  [ ]=Empty\n"
        "\n"
        "=======\n"
        "|  T  |\n"
        "|M    |\n"
        "=======\n"
        "\n"
        "Vehicle details (showing up to 5):\n"
        "ID:   1 | Type: Truck      | Lane: 0 | Pos:   2 | Speed: 3\n"
        "ID:   2 | Type: Motorcycle | Lane: 1 | Pos:   0 | Speed: 1\n"
    )
    assert render_road(road) == expected


def test_render_road_limits_detail_rows():
    vehicles = [Vehicle(id=i + 1, speed=1, lane=0, position=i) for i in range(7)]
    road = _road_with(*vehicles, lanes=1, length=10)

    text = render_road(road)

    assert "|CCCCCCC   |" in text
    assert text.count("ID: ") == 5
    assert "... and 2 more vehicles" in text


def test_render_frame_header():
    road = _road_with(Vehicle(id=1, speed=2, lane=0, position=1))
    road.total_exited = 4

    frame = render_frame(road, 12)

    assert frame.startswith(CLEAR_SCREEN)
    assert "Time step: 12 | Vehicles: 1 | Total created: 1 | Total exited: 4\n\n" in frame
    assert not render_frame(road, 12, clear=False).startswith(CLEAR_SCREEN)


def test_console_renderer_writes_to_stream():
    stream = io.StringIO()
    renderer = ConsoleRenderer(stream=stream, clear=False)
    road = _road_with()

    assert renderer.open(road) is True
    renderer.render(road, 1)
    renderer.close()

    assert stream.getvalue().startswith("Time step: 1 | Vehicles: 0")
