# =============================================================================
# collab-bench -- Defaults and Wire Constants
# =============================================================================
#
# Every count and delay here is a default for BenchConfig, not a hard limit.
# =============================================================================

# -- Target --------------------------------------------------------------------

DEFAULT_ADDR = "localhost:1337"
DEFAULT_SCHEME = "wss"
SUPPORTED_SCHEMES = ("wss", "ws")

# -- Identity ------------------------------------------------------------------

SESSION_ID = "__bench_test"
USERNAME_TEMPLATE = "__test_{index}"

# -- Counts --------------------------------------------------------------------

CLIENT_COUNT = 100
MESSAGE_COUNT = 100  # per batch, two batches per client

# -- Timing (seconds) --------------------------------------------------------

SETTLE_DELAY = 5.0
FAST_INTERVAL = 0.1
PAUSE = 60.0
SLOW_INTERVAL = 1.0
FINAL_PAUSE = 60.0
OPEN_TIMEOUT = 10.0

# -- Change payload ------------------------------------------------------------

CHANGE_ACTION = "insert"
CHANGE_TEXT_TEMPLATE = "message ({index}, {seq})"
CHANGE_START = (0, 0)  # (row, column)
CHANGE_END = (1, 0)

# -- Messages ------------------------------------------------------------------

MAX_MESSAGE_SIZE = 1_048_576  # 1 MB, inbound frames

# -- WebSocket close codes -----------------------------------------------------

WS_CLOSE_NORMAL = 1000
