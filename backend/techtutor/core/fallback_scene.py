"""Fallback Scene — deterministic, topic-seeded 3D simulation steps.

Invariants:
    - All functions are PURE: identical (title, description, level) → identical steps
    - Object count bounded 5–10, derived from keyword count
    - Exactly three steps (setup, transform, validate), each with ≤ MAX_PHASE_MOVEMENTS
    - Every movement references an object declared in its own step
    - Every coordinate stays inside the content contract's ±COORDINATE_LIMIT

Design Decisions:
    - Rolling hash over the lower-cased title seeds palette, radius, and a
      random.Random instance for per-object choices: same topic, same layout
    - Objects sit evenly on a circle so no layout ever overlaps or leaves the stage
    - Overlays are keyword-triggered: numeric topics get math, graph topics get a chart
"""

import math
import random
import re

from techtutor.core.domain_types import (
    ChartType, DifficultyLevel, MovementType, ObjectKind,
)
from techtutor.schemas.content_contract import (
    ChartData, MathExpression, Movement, PointLabel, SceneObject,
    SimulationStep, Size3, Vec3,
)

MIN_OBJECTS = 5
MAX_OBJECTS = 10
MAX_PHASE_MOVEMENTS = 6
MAX_KEYWORDS = 10

PALETTES: tuple[tuple[str, ...], ...] = (
    ("#2563eb", "#38bdf8", "#0ea5e9", "#1e3a8a", "#93c5fd"),
    ("#16a34a", "#4ade80", "#15803d", "#a3e635", "#065f46"),
    ("#ea580c", "#f97316", "#facc15", "#b45309", "#fde68a"),
    ("#9333ea", "#c084fc", "#7c3aed", "#db2777", "#f0abfc"),
    ("#dc2626", "#f87171", "#64748b", "#0f172a", "#fca5a5"),
)

_SCENE_KINDS: tuple[ObjectKind, ...] = (
    ObjectKind.BOX, ObjectKind.SPHERE, ObjectKind.CYLINDER,
    ObjectKind.CONE, ObjectKind.TORUS,
)

_STOPWORDS = frozenset({
    "the", "and", "for", "with", "from", "into", "that", "this", "how",
    "what", "why", "are", "its", "via", "using", "about", "over", "under",
    "model", "generated", "simulation", "focused", "between", "your",
})

_WORD = re.compile(r"[a-z0-9]+")
NUMERIC_TOPIC = re.compile(
    r"\b(math\w*|algebra|equation\w*|calculus|probabilit\w*|statistic\w*"
    r"|matri(?:x|ces)|vectors?|formula\w*|complexity|big[- ]?o|arithmetic"
    r"|numbers?|numeric\w*|sort\w*|binary|logarithm\w*|hash\w*)\b",
)
GRAPH_TOPIC = re.compile(
    r"\b(graphs?|charts?|plot\w*|trends?|growth|curves?|latency|throughput"
    r"|distribution\w*|regression|metrics?|performance|scaling|benchmark\w*)\b",
)

_MOVEMENT_DURATION_MS = {
    DifficultyLevel.BEGINNER: 2400,
    DifficultyLevel.INTERMEDIATE: 1800,
    DifficultyLevel.ADVANCED: 1400,
}


def topic_seed(title: str) -> int:
    """Rolling hash of the normalized title (31-multiplier, 2^31-1 modulus)."""
    seed = 7
    for char in title.strip().lower():
        seed = (seed * 31 + ord(char)) % 2_147_483_647
    return seed


def extract_keywords(text: str) -> list[str]:
    """Distinct non-stopword tokens of 3+ chars, first-seen order."""
    keywords: list[str] = []
    for word in _WORD.findall(text.lower()):
        if len(word) < 3 or word in _STOPWORDS or word in keywords:
            continue
        keywords.append(word)
        if len(keywords) == MAX_KEYWORDS:
            break
    return keywords


def build_fallback_steps(
    title: str, description: str, level: DifficultyLevel,
) -> list[SimulationStep]:
    """Three-phase simulation for `title`, seeded only by its text."""
    seed = topic_seed(title)
    keywords = extract_keywords(f"{title} {description}")
    objects = _layout_objects(seed, keywords)
    groups = _partition(objects, 3)
    duration = _MOVEMENT_DURATION_MS[level]
    topic_text = f"{title} {description}".lower()

    setup = _phase_step(
        1, "Setup", f"identify the inputs and starting state of {title}.",
        objects, _pulse_movements(groups[0], duration),
    )
    transform = _phase_step(
        2, "Transform",
        f"watch how each part of {title} changes as decisions are applied.",
        objects, _transform_movements(groups[1], duration),
    )
    validate = _phase_step(
        3, "Validate",
        f"verify the output of {title} and compare it with an alternative approach.",
        objects, _scale_movements(groups[2], duration),
    )
    if NUMERIC_TOPIC.search(topic_text):
        transform.math_expressions = _math_overlay(len(objects), seed)
    if GRAPH_TOPIC.search(topic_text):
        validate.chart = _chart_overlay(title, len(objects), seed)
    return [setup, transform, validate]


# ─── Layout ──────────────────────────────────────────────────────

def _layout_objects(seed: int, keywords: list[str]) -> list[SceneObject]:
    count = min(MAX_OBJECTS, max(MIN_OBJECTS, len(keywords) + 3))
    palette = PALETTES[seed % len(PALETTES)]
    radius = 4.0 + seed % 5
    rng = random.Random(seed)

    objects = []
    for index in range(count):
        angle = 2 * math.pi * index / count
        side = round(0.8 + rng.random() * 0.8, 2)
        objects.append(SceneObject(
            id=f"obj-{index + 1}",
            kind=rng.choice(_SCENE_KINDS),
            color=palette[(index + rng.randrange(len(palette))) % len(palette)],
            size=Size3(x=side, y=side, z=side),
            position=Vec3(
                x=round(radius * math.cos(angle), 2),
                y=round(rng.uniform(0.0, 1.5), 2),
                z=round(radius * math.sin(angle), 2),
            ),
            rotation=Vec3(x=0.0, y=round(angle, 2), z=0.0),
            label=_object_label(keywords, index),
        ))
    return objects


def _object_label(keywords: list[str], index: int) -> str:
    if index < len(keywords):
        return keywords[index].capitalize()[:24]
    return f"Node {index + 1}"


def _partition(items: list, parts: int) -> list[list]:
    """Contiguous, near-equal chunks (sizes differ by at most one)."""
    bounds = [round(len(items) * k / parts) for k in range(parts + 1)]
    return [items[bounds[k]:bounds[k + 1]] for k in range(parts)]


def _phase_step(
    number: int, phase: str, sentence: str,
    objects: list[SceneObject], movements: list[Movement],
) -> SimulationStep:
    return SimulationStep(
        step=number,
        annotation=f"{phase}: {sentence}"[:400],
        objects=[o.model_copy(deep=True) for o in objects],
        movements=movements[:MAX_PHASE_MOVEMENTS],
        labels=[PointLabel(text=phase, position=Vec3(x=0.0, y=4.4, z=0.0))],
    )


# ─── Movements per phase ─────────────────────────────────────────

def _pulse_movements(group: list[SceneObject], duration: int) -> list[Movement]:
    return [
        Movement(object_id=o.id, type=MovementType.PULSE, duration_ms=duration, repeat=1)
        for o in group
    ]


def _transform_movements(group: list[SceneObject], duration: int) -> list[Movement]:
    movements = []
    for o in group:
        toward_centre = Vec3(
            x=round(o.position.x * 0.4, 2),
            y=o.position.y,
            z=round(o.position.z * 0.4, 2),
        )
        movements.append(Movement(
            object_id=o.id, type=MovementType.TRANSLATE,
            to=toward_centre, duration_ms=duration,
        ))
        movements.append(Movement(
            object_id=o.id, type=MovementType.ROTATE,
            axis=Vec3(x=0.0, y=1.0, z=0.0), duration_ms=duration,
        ))
    return movements


def _scale_movements(group: list[SceneObject], duration: int) -> list[Movement]:
    return [
        Movement(
            object_id=o.id, type=MovementType.SCALE,
            axis=Vec3(x=0.45, y=0.45, z=0.45), duration_ms=duration, repeat=1,
        )
        for o in group
    ]


# ─── Overlays ────────────────────────────────────────────────────

def _math_overlay(count: int, seed: int) -> list[MathExpression]:
    return [
        MathExpression(expression="n * log2(n)", variables={"n": float(count)}),
        MathExpression(
            expression="2 * pi * r", variables={"r": float(4 + seed % 5)},
        ),
    ]


def _chart_overlay(title: str, count: int, seed: int) -> ChartData:
    xs = [float(i + 1) for i in range(count)]
    ys = [round(1.5 * i + (seed >> i) % 7, 2) for i in range(count)]
    return ChartData(
        type=ChartType.LINE, title=f"{title} trend"[:120], x=xs, y=ys,
    )
