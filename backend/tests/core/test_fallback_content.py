"""Fallback Content — tests for the offline, deterministic content package.

Tests cover:
    - Byte-identical output for identical input
    - Topic id format (slug + seed hex) and slug edge cases
    - Visual theme detection by whole words
    - Baseline problem sets: one per level, 70/75/80, answer among choices
    - The package itself satisfies the external content contract
"""

import re

from techtutor.core.domain_types import LEVELS, DifficultyLevel, GenerationSource, VisualTheme
from techtutor.core.fallback_content import (
    build_fallback_content,
    detect_visual_theme,
    fallback_topic_id,
    slugify,
)
from techtutor.core.validate_content import validate_generated_content


def test_identical_input_gives_identical_json():
    first = build_fallback_content("Message Queues", DifficultyLevel.INTERMEDIATE)
    second = build_fallback_content("Message Queues", DifficultyLevel.INTERMEDIATE)
    assert first.model_dump_json() == second.model_dump_json()


def test_topic_id_is_slug_plus_seed_hex():
    package = build_fallback_content("Message Queues", DifficultyLevel.BEGINNER)
    assert re.fullmatch(r"custom-message-queues-[0-9a-f]{8}", package.topic.id)


def test_topic_id_is_stable_across_levels():
    ids = {build_fallback_content("Message Queues", level).topic.id for level in LEVELS}
    assert len(ids) == 1


def test_symbol_only_title_uses_placeholder_slug():
    package = build_fallback_content("!!!", DifficultyLevel.BEGINNER)
    assert package.topic.id.startswith("custom-topic-")


def test_slugify_collapses_and_truncates():
    assert slugify("  C++ & Rust: Memory  ") == "c-rust-memory"
    assert len(slugify("x" * 100)) == 48


def test_generation_source_is_template():
    package = build_fallback_content("Message Queues", DifficultyLevel.BEGINNER)
    assert package.generation_source == GenerationSource.TEMPLATE


def test_description_reflects_level_depth():
    beginner = build_fallback_content("Caching", DifficultyLevel.BEGINNER)
    advanced = build_fallback_content("Caching", DifficultyLevel.ADVANCED)
    assert beginner.topic.description.endswith("focused on fundamental flow.")
    assert "tradeoffs" in advanced.topic.description


def test_explicit_description_is_kept():
    package = build_fallback_content(
        "Caching", DifficultyLevel.BEGINNER, description="Keeping hot data close.",
    )
    assert package.topic.description == "Keeping hot data close."


def test_narration_and_opening_message_mention_title():
    package = build_fallback_content("Caching", DifficultyLevel.BEGINNER)
    assert len(package.topic.narration) == 5
    assert "Caching" in package.topic.narration[0]
    assert package.opening_message.startswith("Generated a live simulation plan for Caching.")


def test_problem_sets_one_per_level_with_passing_scores():
    package = build_fallback_content("Caching", DifficultyLevel.BEGINNER)
    assert [s.level for s in package.problem_sets] == list(LEVELS)
    assert [s.passing_score for s in package.problem_sets] == [70, 75, 80]
    for problem_set in package.problem_sets:
        assert problem_set.topic_id == package.topic.id
        for problem in problem_set.problems:
            assert problem.answer in problem.choices
            assert len(set(problem.choices)) == len(problem.choices)


def test_problem_ids_use_level_initial():
    package = build_fallback_content("Caching", DifficultyLevel.BEGINNER)
    ids = [s.problems[0].id for s in package.problem_sets]
    assert ids == [f"{package.topic.id}-{suffix}-1" for suffix in ("b", "i", "a")]


def test_problem_set_for_level():
    package = build_fallback_content("Caching", DifficultyLevel.BEGINNER)
    assert package.problem_set_for(DifficultyLevel.ADVANCED).passing_score == 80


def test_fallback_satisfies_content_contract():
    package = build_fallback_content("Sorting latency trends", DifficultyLevel.ADVANCED)
    payload = {
        "description": package.topic.description,
        "openingMessage": package.opening_message,
        "narration": package.topic.narration,
        "explanationScript": package.explanation_script,
        "simulationSteps": [
            s.model_dump(mode="json", by_alias=True, exclude_none=True)
            for s in package.simulation_steps
        ],
        "problemSets": [
            {
                "level": s.level.value,
                "passingScore": s.passing_score,
                "problems": [
                    p.model_dump(include={"question", "choices", "answer", "explanation"})
                    for p in s.problems
                ],
            }
            for s in package.problem_sets
        ],
    }
    validate_generated_content(payload)


# ─── Visual theme ────────────────────────────────────────────────

def test_detect_visual_theme_by_keyword():
    assert detect_visual_theme("SQL indexing") == VisualTheme.DATABASE
    assert detect_visual_theme("React hooks") == VisualTheme.UI
    assert detect_visual_theme("TCP handshake") == VisualTheme.NETWORK
    assert detect_visual_theme("Neural networks") == VisualTheme.AI
    assert detect_visual_theme("Operating system schedulers") == VisualTheme.SYSTEMS


def test_detect_visual_theme_matches_whole_words_only():
    # "candidate" contains "data", "building" contains "ui"
    assert detect_visual_theme("Candidate building") == VisualTheme.SYSTEMS


def test_fallback_topic_id_matches_built_topic():
    package = build_fallback_content("  Message Queues ", DifficultyLevel.ADVANCED)
    assert fallback_topic_id("Message Queues") == package.topic.id
