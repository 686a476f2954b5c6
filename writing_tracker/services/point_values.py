"""Points awarded per completed fact, by tracking category.

Changing a value invalidates every cached ``points.total``; run
``scripts/recalculate_points.py`` afterwards.
"""

from types import MappingProxyType

LESSON_POINTS = 20
ACTIVITY_POINTS = 10
EVALUATION_POINTS = 10
COLLABORATIVE_POINTS = 10

POINT_VALUES = MappingProxyType({
    "lesson": LESSON_POINTS,
    "activity": ACTIVITY_POINTS,
    "evaluation": EVALUATION_POINTS,
    "collaborative": COLLABORATIVE_POINTS,
})
