"""Application-wide constants."""

from pathlib import Path

APP_NAME = "ha-ui"
APP_VERSION = "0.1.0"
APP_ORGANIZATION = "fhdo7100003"

# Backend
DEFAULT_ENDPOINT = "http://localhost:8000"
DEFAULT_TIMEOUT_S = 30.0
SIMULATION_PATH = "/simulation"

# Logging
DEFAULT_LOG_LEVEL = "INFO"
LOGGER_NAME = "haui"

# UI language
DEFAULT_LANGUAGE = "en"

# Integer ranges of the wire contract
I32_MIN = -(2 ** 31)
I32_MAX = 2 ** 31 - 1
U32_MAX = 2 ** 32 - 1
I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1

# Source display indentation (pretty-printed JSON)
PRETTY_INDENT = 2

# Seed document for a new submission buffer
RESOURCES_DIR = Path(__file__).parent / "resources"
DEFAULT_SIMULATION_PATH = RESOURCES_DIR / "example_simulation.json"
