"""Content Contract — closed schema that generated learning content must satisfy.

Invariants:
    - Wire keys are camelCase (alias_generator), Python attributes snake_case
    - Unknown keys are ignored; every known key is bounded (length, range, enum)
    - Spatial coordinates stay within ±COORDINATE_LIMIT
    - Every number is finite: NaN and ±Infinity are rejected (allow_inf_nan=False)
    - Movements may reference undeclared objects here — referential repair is the
      Normalizer's job, not a rejection reason

Design Decisions:
    - Field-level bounds on Pydantic models: one declarative source for both
      validation of external payloads and construction of fallback content
    - SimulationStep is shared by the contract and the final ContentPackage, so the
      fallback generator can never build a step the validator would reject
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from techtutor.core.domain_types import (
    ChartType, DifficultyLevel, MovementType, ObjectKind,
)

COORDINATE_LIMIT = 30.0
MAX_OBJECT_SIZE = 20.0
HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"

MAX_STEPS = 12
MAX_OBJECTS_PER_STEP = 24
MAX_MOVEMENTS_PER_STEP = 60
MAX_LABELS_PER_STEP = 24
MAX_MATH_EXPRESSIONS = 6
MAX_CHART_POINTS = 64

NarrationLine = Annotated[str, Field(min_length=8, max_length=700)]
ChoiceText = Annotated[str, Field(min_length=1, max_length=260)]


class ContractModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
        allow_inf_nan=False,
    )


# ─── Scene ───────────────────────────────────────────────────────

class Vec3(ContractModel):
    x: float = Field(ge=-COORDINATE_LIMIT, le=COORDINATE_LIMIT)
    y: float = Field(ge=-COORDINATE_LIMIT, le=COORDINATE_LIMIT)
    z: float = Field(ge=-COORDINATE_LIMIT, le=COORDINATE_LIMIT)


class Size3(ContractModel):
    x: float = Field(gt=0, le=MAX_OBJECT_SIZE)
    y: float = Field(gt=0, le=MAX_OBJECT_SIZE)
    z: float = Field(gt=0, le=MAX_OBJECT_SIZE)


class SceneObject(ContractModel):
    id: str = Field(min_length=1, max_length=40)
    kind: ObjectKind
    color: str = Field(pattern=HEX_COLOR_PATTERN)
    size: Size3
    position: Vec3
    rotation: Vec3 | None = None
    label: str | None = Field(None, max_length=80)


class Movement(ContractModel):
    object_id: str = Field(min_length=1, max_length=40)
    type: MovementType
    to: Vec3 | None = None
    axis: Vec3 | None = None
    duration_ms: int = Field(ge=100, le=20_000)
    repeat: int = Field(0, ge=0, le=20)


class PointLabel(ContractModel):
    text: str = Field(min_length=1, max_length=120)
    color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    object_id: str | None = Field(None, max_length=40)
    position: Vec3 | None = None


class MathExpression(ContractModel):
    expression: str = Field(min_length=1, max_length=200)
    variables: dict[str, float] = Field(default_factory=dict)


class ChartData(ContractModel):
    type: ChartType
    title: str = Field(min_length=1, max_length=120)
    x: list[float] = Field(max_length=MAX_CHART_POINTS)
    y: list[float] = Field(max_length=MAX_CHART_POINTS)


class SimulationStep(ContractModel):
    step: int = Field(ge=1)
    annotation: str = Field(min_length=1, max_length=400)
    objects: list[SceneObject] = Field(
        min_length=1, max_length=MAX_OBJECTS_PER_STEP,
    )
    movements: list[Movement] = Field(
        default_factory=list, max_length=MAX_MOVEMENTS_PER_STEP,
    )
    labels: list[PointLabel] = Field(
        default_factory=list, max_length=MAX_LABELS_PER_STEP,
    )
    math_expressions: list[MathExpression] = Field(
        default_factory=list, max_length=MAX_MATH_EXPRESSIONS,
    )
    chart: ChartData | None = None


# ─── Generated payload ───────────────────────────────────────────

class GeneratedProblem(ContractModel):
    question: str = Field(min_length=10, max_length=700)
    choices: list[ChoiceText] = Field(min_length=2, max_length=10)
    answer: str = Field(min_length=1, max_length=260)
    explanation: str = Field(min_length=10, max_length=700)


class GeneratedProblemSet(ContractModel):
    level: DifficultyLevel
    passing_score: float = Field(ge=60, le=95)
    problems: list[GeneratedProblem] = Field(min_length=1, max_length=12)


class GeneratedContent(ContractModel):
    """Top-level object an external generator must return."""
    description: str = Field(min_length=20, max_length=1400)
    opening_message: str = Field(min_length=20, max_length=700)
    narration: list[NarrationLine] = Field(min_length=3, max_length=14)
    explanation_script: str | None = Field(None, max_length=2000)
    simulation_steps: Annotated[
        list[SimulationStep], Field(min_length=3, max_length=MAX_STEPS),
    ] | None = None
    problem_sets: list[GeneratedProblemSet] = Field(min_length=3, max_length=12)
