"""Fallback Content — offline, deterministic, contract-valid content package.

Invariants:
    - All functions are PURE: build_fallback_content(topic, level) is byte-identical
      across calls (no clock, no uuid, no global RNG)
    - Output always has narration (5 lines), three simulation steps, and one
      problem set per level with the answer among the choices
    - Never depends on the external content service

Design Decisions:
    - Topic id derives from slug + title hash instead of a timestamp so retries and
      tests see the same id
    - This is the system's default content engine, not a placeholder: the pipeline
      serves it whenever external content is absent or rejected
"""

import re

from techtutor.core.domain_types import (
    DifficultyLevel, GenerationSource, VisualTheme,
)
from techtutor.core.fallback_scene import build_fallback_steps, topic_seed
from techtutor.schemas.content import ContentPackage, Problem, ProblemSet, Topic

_NARRATION_DEPTH = {
    DifficultyLevel.BEGINNER: "fundamental flow",
    DifficultyLevel.INTERMEDIATE: "key internal mechanisms",
    DifficultyLevel.ADVANCED: "tradeoffs, edge cases, and optimization strategy",
}

# Checked in order; first hit wins.
_THEME_KEYWORDS: tuple[tuple[VisualTheme, frozenset[str]], ...] = (
    (VisualTheme.DATABASE, frozenset({"sql", "database", "databases", "data", "index", "query"})),
    (VisualTheme.UI, frozenset({"react", "ui", "frontend", "css", "dom", "component"})),
    (VisualTheme.NETWORK, frozenset({"http", "network", "networking", "api", "tcp", "dns"})),
    (VisualTheme.AI, frozenset({"ai", "model", "models", "ml", "neural", "llm"})),
)


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")[:48]


def detect_visual_theme(text: str) -> VisualTheme:
    words = set(re.findall(r"[a-z0-9]+", text.lower()))
    for theme, keywords in _THEME_KEYWORDS:
        if words & keywords:
            return theme
    return VisualTheme.SYSTEMS


def fallback_topic_id(title: str) -> str:
    """Stable topic id for `title`; every package for the title carries it."""
    return f"custom-{slugify(title) or 'topic'}-{topic_seed(title):08x}"


def build_fallback_content(
    topic: str, level: DifficultyLevel, description: str | None = None,
) -> ContentPackage:
    """Complete content package for `topic` without any external dependency."""
    title = topic.strip()
    topic_model = build_fallback_topic(title, level, description)
    steps = build_fallback_steps(title, topic_model.description, level)
    return ContentPackage(
        topic=topic_model,
        opening_message=(
            f"Generated a live simulation plan for {title}. You can ask questions, "
            "drag objects, scroll, and use voice for continuous guidance."
        ),
        explanation_script=" ".join(step.annotation for step in steps),
        simulation_steps=steps,
        problem_sets=build_fallback_problem_sets(topic_model),
        generation_source=GenerationSource.TEMPLATE,
    )


def build_fallback_topic(
    title: str, level: DifficultyLevel, description: str | None = None,
) -> Topic:
    return Topic(
        id=fallback_topic_id(title),
        title=title,
        description=description or (
            f"Model-generated simulation for {title}, "
            f"focused on {_NARRATION_DEPTH[level]}."
        ),
        narration=[
            f"We are simulating {title} as a step-by-step system.",
            f"First, identify the input and starting state for {title}.",
            "Next, observe each transition and how decisions change outcomes in real time.",
            "Now verify the output, then compare this run against an alternative approach.",
            "As you drag and scroll, the tutor evaluates your operations and gives corrective feedback.",
        ],
        visual_theme=detect_visual_theme(title),
    )


def build_fallback_problem_sets(topic: Topic) -> list[ProblemSet]:
    """One baseline problem per level; passing scores 70 / 75 / 80."""
    title = topic.title
    return [
        ProblemSet(
            topic_id=topic.id,
            level=DifficultyLevel.BEGINNER,
            passing_score=70,
            problems=[Problem(
                id=f"{topic.id}-b-1",
                question=f"Which statement best describes the first step when learning {title}?",
                choices=[
                    "Define inputs and the initial state",
                    "Tune low-level optimizations immediately",
                    "Skip system flow and focus only on syntax",
                    "Start with final output and ignore transitions",
                ],
                answer="Define inputs and the initial state",
                explanation="A clear starting state is required before meaningful simulation analysis.",
            )],
        ),
        ProblemSet(
            topic_id=topic.id,
            level=DifficultyLevel.INTERMEDIATE,
            passing_score=75,
            problems=[Problem(
                id=f"{topic.id}-i-1",
                question=f"During a simulation of {title}, what should be tracked at each step?",
                choices=[
                    "Only visual colors",
                    "State transitions and decision points",
                    "Only execution end time",
                    "Unrelated external tools",
                ],
                answer="State transitions and decision points",
                explanation="Intermediate understanding depends on seeing why each transition happened.",
            )],
        ),
        ProblemSet(
            topic_id=topic.id,
            level=DifficultyLevel.ADVANCED,
            passing_score=80,
            problems=[Problem(
                id=f"{topic.id}-a-1",
                question=f"What is the best advanced review pattern for {title}?",
                choices=[
                    "Memorize one path only",
                    "Ignore tradeoffs for speed",
                    "Compare multiple strategies and justify tradeoffs",
                    "Avoid validating outcomes",
                ],
                answer="Compare multiple strategies and justify tradeoffs",
                explanation="Advanced mastery requires explicit tradeoff reasoning under different conditions.",
            )],
        ),
    ]
