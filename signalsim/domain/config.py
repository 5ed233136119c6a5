# Simulation Configuration

# Canvas / Geometry
CANVAS_WIDTH = 800.0
CANVAS_HEIGHT = 800.0
ROAD_WIDTH = 120.0       # Two lanes, one per travel direction
STOP_LINE_OFFSET = 70.0  # Distance from intersection center to stop line
SPAWN_MARGIN = 20.0      # Vehicles are born just outside the canvas
EXIT_MARGIN = 50.0       # Vehicles retire once this far beyond the canvas

# Signal Timings (ms)
GREEN_DURATION = 10000.0
YELLOW_DURATION = 3000.0
ALL_RED_DURATION = 2000.0
MIN_GREEN_TIME = 5000.0

# Vehicle Physics
CAR_SPEED = 60.0               # units/s
APPROACH_ACCELERATION = 30.0   # units/s^2
CROSSING_ACCELERATION = 40.0   # units/s^2
CROSSING_SPEED_FACTOR = 1.2
TURN_RATE = 2.0                # turn progress per simulated second
TURN_INTERPOLATION_GAIN = 3.0

# Traffic Rules
FOLLOWING_GAP = 35.0     # Stop if the car ahead is closer than this
STOP_THRESHOLD = 30.0    # Distance to the stop line at which a red is obeyed
SPAWN_CLEARANCE = 60.0   # No spawn while a same-approach car is this close

# Spawning / Sensors
CAR_SPAWN_RATE = 5.0         # vehicles per 10 simulated seconds
DETECTOR_DISTANCE = 150.0

# Kernel
TICK_SECONDS = 0.05
DEFAULT_SEED = 42
