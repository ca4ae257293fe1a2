"""
Root conftest.py for pytest configuration.

This ensures the swarm_trader package is importable without installation.
"""

import sys
from pathlib import Path

root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

pytest_plugins = ('pytest_asyncio',)
