"""
Org Chart Kernel — Constants (Default Values)

All magic numbers and literal labels live here as module-level defaults.
"""

# --- Change classification ---
CHANGE_NONE: str = "none"
CHANGE_ADDED: str = "added"
CHANGE_MOVED: str = "moved"
CHANGE_REMOVED: str = "removed"

CHANGE_TYPES = (CHANGE_NONE, CHANGE_ADDED, CHANGE_MOVED, CHANGE_REMOVED)

# Change types that sort ahead of unchanged siblings.
SURFACED_CHANGE_TYPES = frozenset({CHANGE_ADDED, CHANGE_MOVED})

# --- FTE ---
DEFAULT_FTE: float = 1.0
MIN_FTE: float = 0.0
MAX_FTE: float = 2.0
FTE_DECIMALS: int = 2

# --- Validation report ---
ORPHAN_PREVIEW_LIMIT: int = 5
TEAM_SIZE_DECIMALS: int = 1
NO_DATA_ERROR: str = "No data found to validate"

# --- Comparison ---
UNKNOWN_MANAGER_NAME: str = "Unknown"

# --- Diagnostics ---
WIDE_SPAN_THRESHOLD: int = 15
