"""Content Normalizer — repairs validated external content into a display-ready package.

Invariants:
    - Output always satisfies ContentPackage invariants: one problem set per level,
      answer among unique choices, no movement or label pointing at an absent object
    - Substitution happens at the smallest granularity: a bad chart loses the chart,
      an empty level gets the fallback problems, never the whole package
    - Topic identity (id, title, theme) always comes from the fallback package
    - Pure: the fallback package passed in is never mutated

Design Decisions:
    - Runs after validation, so it repairs referential/cross-field problems the
      contract cannot express instead of re-checking bounds
    - Duplicate levels in the payload: the last entry wins
"""

import math

from techtutor.core.domain_types import LEVELS, DifficultyLevel, GenerationSource
from techtutor.schemas.content import ContentPackage, Problem, ProblemSet, Topic
from techtutor.schemas.content_contract import (
    MAX_OBJECTS_PER_STEP, MAX_STEPS, GeneratedContent, GeneratedProblem,
    GeneratedProblemSet, SimulationStep,
)

MAX_NARRATION_LINES = 8
MIN_NARRATION_LINES = 3
MAX_NARRATION_LINE_LENGTH = 260
MAX_MOVEMENTS_PER_STEP = 40
MAX_CHOICES = 6
MAX_CHOICE_LENGTH = 140
MAX_QUESTION_LENGTH = 300
MAX_EXPLANATION_LENGTH = 320
MIN_CHART_POINTS = 2


def normalize_content(
    generated: GeneratedContent, fallback: ContentPackage,
) -> ContentPackage:
    """Merge `generated` over `fallback`, repairing whatever the contract let through."""
    steps = normalize_steps(generated.simulation_steps or [])
    if not steps:
        steps = [s.model_copy(deep=True) for s in fallback.simulation_steps]

    narration = normalize_narration(generated.narration)
    if len(narration) < MIN_NARRATION_LINES:
        narration = list(fallback.topic.narration)

    topic = Topic(
        id=fallback.topic.id,
        title=fallback.topic.title,
        description=generated.description.strip(),
        narration=narration,
        visual_theme=fallback.topic.visual_theme,
    )
    script = (generated.explanation_script or "").strip()
    return ContentPackage(
        topic=topic,
        opening_message=generated.opening_message.strip(),
        explanation_script=script or " ".join(s.annotation for s in steps),
        simulation_steps=steps,
        problem_sets=normalize_problem_sets(
            topic.id, generated.problem_sets, fallback.problem_sets,
        ),
        generation_source=GenerationSource.EXTERNAL,
    )


def normalize_narration(lines: list[str]) -> list[str]:
    trimmed = (line.strip()[:MAX_NARRATION_LINE_LENGTH] for line in lines)
    return [line for line in trimmed if line][:MAX_NARRATION_LINES]


# ─── Simulation steps ────────────────────────────────────────────

def normalize_steps(steps: list[SimulationStep]) -> list[SimulationStep]:
    """Clip, de-duplicate, and drop dangling references; renumber 1..n."""
    repaired = []
    for step in steps[:MAX_STEPS]:
        objects, seen = [], set()
        for obj in step.objects:
            if obj.id in seen:
                continue
            seen.add(obj.id)
            objects.append(obj.model_copy(deep=True))
        objects = objects[:MAX_OBJECTS_PER_STEP]
        known = {o.id for o in objects}

        movements = [
            m.model_copy(deep=True) for m in step.movements if m.object_id in known
        ][:MAX_MOVEMENTS_PER_STEP]
        labels = [
            label.model_copy(deep=True) for label in step.labels
            if label.object_id is None or label.object_id in known
        ]
        chart = step.chart
        if chart is not None and (
            len(chart.x) != len(chart.y) or len(chart.x) < MIN_CHART_POINTS
        ):
            chart = None

        repaired.append(SimulationStep(
            step=len(repaired) + 1,
            annotation=step.annotation.strip() or f"Step {len(repaired) + 1}",
            objects=objects,
            movements=movements,
            labels=labels,
            math_expressions=[e.model_copy(deep=True) for e in step.math_expressions],
            chart=chart.model_copy(deep=True) if chart is not None else None,
        ))
    return repaired


# ─── Problem sets ────────────────────────────────────────────────

def normalize_problem_sets(
    topic_id: str,
    generated: list[GeneratedProblemSet],
    fallback: list[ProblemSet],
) -> list[ProblemSet]:
    """Exactly one set per level, in LEVELS order."""
    fallback_by_level = {s.level: s for s in fallback}
    generated_by_level = {s.level: s for s in generated}

    result = []
    for level in LEVELS:
        fallback_set = fallback_by_level[level]
        source = generated_by_level.get(level)
        if source is None:
            result.append(fallback_set.model_copy(deep=True))
            continue

        problems = [
            problem for index, item in enumerate(source.problems)
            if (problem := normalize_problem(topic_id, level, index, item)) is not None
        ]
        result.append(ProblemSet(
            topic_id=topic_id,
            level=level,
            passing_score=round_half_up(source.passing_score),
            problems=problems or [p.model_copy(deep=True) for p in fallback_set.problems],
        ))
    return result


def normalize_problem(
    topic_id: str, level: DifficultyLevel, index: int, problem: GeneratedProblem,
) -> Problem | None:
    """None when fewer than two distinct choices survive."""
    answer = problem.answer.strip()[:MAX_CHOICE_LENGTH]
    choices: list[str] = []
    for choice in problem.choices:
        text = choice.strip()[:MAX_CHOICE_LENGTH]
        if text and text not in choices:
            choices.append(text)

    if not answer:
        return None
    if answer not in choices[:MAX_CHOICES]:
        # make room so the answer survives the cap
        choices = choices[:MAX_CHOICES - 1] + [answer]
    choices = choices[:MAX_CHOICES]
    if len(choices) < 2:
        return None

    return Problem(
        id=f"{topic_id}-{level.value}-{index + 1}",
        question=problem.question.strip()[:MAX_QUESTION_LENGTH],
        choices=choices,
        answer=answer,
        explanation=problem.explanation.strip()[:MAX_EXPLANATION_LENGTH],
    )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
