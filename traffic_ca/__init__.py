"""
Multi-lane Cellular-Automaton Traffic Simulator - v1.0
======================================================

Discrete-time traffic flow on a multi-lane road with local collision
avoidance and lane changes.

Modules:
    - limits: Capacity and rule constants, Occupancy enum
    - vehicle: Vehicle dataclass, VehicleClass / VehicleStatus
    - road: Road state, occupancy grid, create_road / is_occupied
    - generator: Seeded vehicle generator
    - engine: Per-tick traffic update
    - parameters: SimulationParameters
    - simulator: SimulationSession (tick loop and statistics)
    - console: Text renderer
    - visualization: Window renderer, plots and animation export
    - utils: Logger and helpers
    - main: Command-line entry point

Version: v1.0
Date: 2026-10-17
"""

# Core simulation components
from .limits import LIMITS, RoadLimits, Occupancy, EMPTY_CELL
from .vehicle import Vehicle, VehicleClass, VehicleStatus
from .road import Road, ConfigurationError, create_road, is_occupied
from .generator import VehicleGenerator, configure_generator, generate, clamp_probability
from .engine import TickReport, update, find_safe_lane, realized_speed
from .parameters import SimulationParameters
from .simulator import SimulationSession
from .console import ConsoleRenderer, render_road, render_frame
from .utils import Logger, SCRIPT_NAME, SCRIPT_VERSION, get_adjacent_lanes

__version__ = "1.0.0"
__all__ = [
    # Limits
    "LIMITS",
    "RoadLimits",
    "Occupancy",
    "EMPTY_CELL",
    # Vehicle and road
    "Vehicle",
    "VehicleClass",
    "VehicleStatus",
    "Road",
    "ConfigurationError",
    "create_road",
    "is_occupied",
    # Generator
    "VehicleGenerator",
    "configure_generator",
    "generate",
    "clamp_probability",
    # Engine
    "TickReport",
    "update",
    "find_safe_lane",
    "realized_speed",
    # Session
    "SimulationParameters",
    "SimulationSession",
    # Presentation
    "ConsoleRenderer",
    "render_road",
    "render_frame",
    # Utils
    "Logger",
    "SCRIPT_NAME",
    "SCRIPT_VERSION",
    "get_adjacent_lanes",
]
