#!/usr/bin/env python3
"""Direct launcher for the Mood Budget dashboard.

This script launches Streamlit with the mood_budget directory as the app root,
enabling automatic page discovery from the pages/ subdirectory.
"""

import os
import subprocess
import sys
from pathlib import Path

# Get the project root and mood_budget directory
project_root = Path(__file__).parent.resolve()
app_dir = project_root / "mood_budget"

if __name__ == "__main__":
    # Streamlit discovers pages/ relative to the entry script
    os.chdir(app_dir)
    sys.path.insert(0, str(project_root))
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        "Home.py",
        *sys.argv[1:],
    ])
