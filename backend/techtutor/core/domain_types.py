"""Domain Types — enums and constants shared by the store, the content contract, and services.

Invariants:
    - All valid states encoded as Enums — no raw string matching
    - LEVELS is the single ordering of difficulty levels (beginner → advanced)
    - next_level() returns None for the last level

Design Decisions:
    - str Enums: serialize to JSON without custom encoders (ADR: snapshot is a JSON document)
"""

from enum import Enum


# ─── Learner State ───────────────────────────────────────────────

class DifficultyLevel(str, Enum):
    """The three levels every topic exposes, in unlock order."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ProgressStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class InteractionType(str, Enum):
    VOICE = "voice"
    TEXT = "text"
    ACTION = "action"
    VISUAL = "visual"


class InteractionMode(str, Enum):
    VOICE = "voice"
    CLICK = "click"
    BOTH = "both"


# ─── Learning Content ────────────────────────────────────────────

class ObjectKind(str, Enum):
    """Closed set of 3D primitives the browser renderer knows how to draw."""
    BOX = "box"
    SPHERE = "sphere"
    CYLINDER = "cylinder"
    CONE = "cone"
    TORUS = "torus"
    PLANE = "plane"
    LINE = "line"
    ARROW = "arrow"
    TEXT = "text"


class MovementType(str, Enum):
    TRANSLATE = "translate"
    ROTATE = "rotate"
    SCALE = "scale"
    PULSE = "pulse"


class ChartType(str, Enum):
    LINE = "line"
    SCATTER = "scatter"
    BAR = "bar"


class VisualTheme(str, Enum):
    DATABASE = "database"
    UI = "ui"
    NETWORK = "network"
    AI = "ai"
    SYSTEMS = "systems"


class GenerationSource(str, Enum):
    """Where a content package came from — template means FallbackGenerator."""
    TEMPLATE = "template"
    EXTERNAL = "external"


# ─── Constants ───────────────────────────────────────────────────

LEVELS: tuple[DifficultyLevel, ...] = (
    DifficultyLevel.BEGINNER,
    DifficultyLevel.INTERMEDIATE,
    DifficultyLevel.ADVANCED,
)

DEFAULT_PASSING_SCORE = 70


def next_level(level: DifficultyLevel) -> DifficultyLevel | None:
    """Level unlocked by completing `level`, or None after the last one."""
    index = LEVELS.index(level)
    if index == len(LEVELS) - 1:
        return None
    return LEVELS[index + 1]
