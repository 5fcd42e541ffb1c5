"""Content Package — the final, display-ready learning content served to a learner.

Invariants:
    - Every topic carries exactly one ProblemSet per DifficultyLevel, in LEVELS order
    - Every Problem's answer appears verbatim among its unique choices
    - Every Movement references an object declared in the same SimulationStep

Design Decisions:
    - Separate from content_contract.py: the contract describes what we accept from
      outside, this module describes what we promise to the browser
    - Reuses SimulationStep from the contract (one scene schema, one set of bounds)
"""

from pydantic import Field

from techtutor.core.domain_types import (
    DifficultyLevel, GenerationSource, VisualTheme,
)
from techtutor.schemas.content_contract import ContractModel, SimulationStep


class Topic(ContractModel):
    id: str
    title: str
    description: str
    narration: list[str]
    visual_theme: VisualTheme


class Problem(ContractModel):
    id: str
    question: str
    choices: list[str]
    answer: str
    explanation: str


class ProblemSet(ContractModel):
    topic_id: str
    level: DifficultyLevel
    passing_score: int
    problems: list[Problem]


class ContentPackage(ContractModel):
    topic: Topic
    opening_message: str
    explanation_script: str
    simulation_steps: list[SimulationStep] = Field(default_factory=list)
    problem_sets: list[ProblemSet] = Field(default_factory=list)
    generation_source: GenerationSource = GenerationSource.TEMPLATE

    def problem_set_for(self, level: DifficultyLevel) -> ProblemSet | None:
        return next((s for s in self.problem_sets if s.level == level), None)
