"""Tolerances shared by every boundary comparison in the snap engine."""

from __future__ import annotations

# Times this close to a segment start belong to that segment when snapping to the nearest beat.
BOUNDARY_EPSILON = 1e-3

# A directional snapped seek treats anything this close to a snap point as already on it.
# Capped per call at half the gap to the neighbouring snap points.
SEEK_TOLERANCE = 0.5
