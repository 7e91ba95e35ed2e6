"""Interactive front ends for the scanner."""

from scansynth.visualizers.sketchpad import Sketchpad
