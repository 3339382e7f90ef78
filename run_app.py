#!/usr/bin/env python3
"""Launcher for the FinTrack Streamlit app.

This script launches Streamlit with the fintrack directory as the app root,
enabling automatic page discovery from the pages/ subdirectory.
"""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()
app_dir = project_root / "fintrack"

if __name__ == "__main__":
    # Streamlit discovers pages/ relative to the script's directory
    os.chdir(app_dir)
    sys.path.insert(0, str(project_root))
    raise SystemExit(subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        "Home.py",
    ] + sys.argv[1:]).returncode)
