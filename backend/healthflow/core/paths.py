"""
Centralized Path Configuration

Simple, consistent paths for the entire application.
"""

import os
from pathlib import Path

# Project root - the main project directory (not backend/)
_current_file = Path(__file__).resolve()
# backend/healthflow/core/paths.py -> backend/healthflow/core -> backend/healthflow -> backend -> project root
PROJECT_ROOT = _current_file.parent.parent.parent.parent

# Override with env var if set
if os.environ.get("PROJECT_ROOT"):
    PROJECT_ROOT = Path(os.environ["PROJECT_ROOT"])

# Key directories
DATA_DIR = PROJECT_ROOT / "data"

# Bundled reference file (country -> state -> procedures/hospitals)
REFERENCE_DATA_FILE = DATA_DIR / "healthcare_data.json"
