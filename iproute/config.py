"""
Design (config.py)
- Purpose: Centralize constants and defaults.
- Inputs: None.
- Outputs: Constants (thresholds, defaults, file names).
- Side effects: None.
- Thread-safety: N/A (read-only constants).
"""

# Duplicate writer: records buffered in memory before each write to disk
DUPLICATES_FLUSH_THRESHOLD = 10000

# Duplicate queue capacity; producers block (never drop) once it is full
DUPLICATES_QUEUE_SIZE = 50000

DUPLICATES_FILE_PREFIX = "route_duplicates_"
DUPLICATES_DIR = "/tmp"
DUPLICATES_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

# Upper bound on concurrent route-add calls when the config does not set one
DEFAULT_WORKER_COUNT = 100
DEFAULT_DEBUG = False

NOTIFY_TITLE = "Route Loader"
NOTIFY_TIMEOUT_SEC = 5

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
