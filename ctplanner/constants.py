"""Application-wide constants."""

APP_NAME = "CT Geometry Planner"
APP_VERSION = "0.1.0"
APP_ORGANIZATION = "MSS"

# Window constraints
MIN_WINDOW_WIDTH = 1180
MIN_WINDOW_HEIGHT = 760

# Start-up geometry
DEFAULT_SYSTEM_ID = "CoreTOM"
DEFAULT_DETECTOR_ID = "3K"
DEFAULT_SOD_MM = 100.0
DEFAULT_BINNING = 1
BINNING_OPTIONS = [1, 2, 3]

# Raw projection data estimate
PROJECTIONS_PER_PIXEL = 1.5  # angular samples per effective horizontal pixel
BYTES_PER_SAMPLE = 2  # 16-bit detector readout

# Display
DISPLAY_DECIMALS = 2

# SOD sweep
DEFAULT_SWEEP_MAX_SOD_MM = 300.0
DEFAULT_SWEEP_STEP_MM = 10.0
SWEEP_EPSILON = 1e-9
MAX_SWEEP_POINTS = 100_000

# CSV export
CSV_HEADER = ["SOD (mm)", "Maximum diameter (mm)", "Voxel size (µm)", "FOV (mm)"]
CSV_DEFAULT_FILENAME = "resolution_table.csv"
