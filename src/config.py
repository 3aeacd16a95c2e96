"""Runtime configuration read from environment variables.

Environment variables:
    PROMPTOPS_STORAGE_PATH: SQLite file backing the key-value store
        (default: promptops.db next to the project root)
    PROMPTOPS_PLAN: plan tier used for import quotas (free, pro, team, enterprise)
    PROMPTOPS_LOG_LEVEL: logging level for the API process (default: INFO)
"""

import os
from pathlib import Path

_PROJECT_ROOT: Path = Path(__file__).parent.parent

STORAGE_PATH = Path(
    os.environ.get("PROMPTOPS_STORAGE_PATH", str(_PROJECT_ROOT / "promptops.db"))
)

PLAN = os.environ.get("PROMPTOPS_PLAN", "free")

LOG_LEVEL = os.environ.get("PROMPTOPS_LOG_LEVEL", "INFO").upper()
