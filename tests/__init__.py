"""Test package initialisation for NavSim."""

from pathlib import Path
import sys

# The project is a flat set of top-level modules (``nav_simulator``,
# ``route_model`` ...). Make the repository root importable when tests run
# from another working directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
