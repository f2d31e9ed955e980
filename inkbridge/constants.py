"""Constants for the inkbridge pen stream."""

from pathlib import Path

# ============================================================================
# Wire format
# ============================================================================

FRAME_SIZE = 14  # [tool:u8][action:u8][x:i32][y:i32][pressure:i32], little-endian
PRESSURE_SCALE = 1000

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# ============================================================================
# Transport defaults
# ============================================================================

DEFAULT_CONNECT_TIMEOUT_MS = 5000
DEFAULT_POLL_INTERVAL_SEC = 1.0

# Linux USB accessory gadget (f_accessory) device node
DEFAULT_ACCESSORY_DEVICE = Path("/dev/usb_accessory")

# ============================================================================
# Warnings shown to the user
# ============================================================================

NOT_CONNECTED_MESSAGE = (
    "Usb link not established. Make sure your device is connected to the PC "
    "and launch the usb-host application."
)
INVALID_HOST_MESSAGE = "Please enter a valid host IP."
INVALID_PORT_MESSAGE = "Please enter a valid port."
