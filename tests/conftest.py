"""
Shared pytest setup.

Makes the top-level packages (domain, services, repositories, api) and the
config module importable without installing the project.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
