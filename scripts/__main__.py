"""Allow `python -m scripts [bank.csv]` by running the seed script."""

import asyncio
import sys
from pathlib import Path

from scripts.seed import _run_seed

asyncio.run(_run_seed(Path(sys.argv[1]) if len(sys.argv) > 1 else None))
