"""Application-wide constants and default values."""

# Scene object paths
ENVIRONMENT_PATH = "Environment"
SHIP_PATH = "Environment/HangarShip"
CLOSET_PATH = "Environment/HangarShip/StorageCloset"
FILE_CABINET_PATH = "Environment/HangarShip/FileCabinet"
BUNKBEDS_PATH = "Environment/HangarShip/Bunkbeds"

# Raycast layer masks (bit per layer index)
SHIP_SURFACE_MASK = 268437761  # same mask the game uses for item floor positions
CLOSET_SURFACE_MASK = 1073744640  # shelves and cupboard interiors
RAYCAST_DISTANCE = 80.0  # meters

# Placement tweaks (meters)
PARENT_SURFACE_SINK = 0.05  # items in a parent sit slightly into the shelf
PUT_TARGET_LIFT = 0.2  # height above the hit point stored by the put command

AUTO_ROTATION = -1  # tells the placement primitive to keep its own rotation
CLONE_SUFFIX = "(Clone)"

# Sort cadence
MIN_THROTTLED_DELAY_MS = 10  # delays below this sort everything in one batch

# Category default positions (ship-relative unless anchored)
DEFAULT_ONE_HANDED = "-2.25,2,-5.25,0,0.1"
DEFAULT_TWO_HANDED = "-4.5,2,-5.25,0,0.1"
DEFAULT_TOOLS = "closet:-0.3+0.12,2.5,0.3,90:CPX"
