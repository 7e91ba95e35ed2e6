"""
scansynth: hear a drawing through a sweeping scan line.

Each palette color drives one sustained voice whose loudness follows
how much of that color sits under the scanner.
"""

from scansynth.config import ScanConfig, load_config
from scansynth.engine import SonificationEngine

__version__ = "0.1.0"
