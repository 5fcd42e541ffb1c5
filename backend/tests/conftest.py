"""Root conftest — shared test configuration and content payloads."""

import copy
import os

import pytest

# Ensure tests never reach a real content service or database
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("CONTENT_MODEL", "")
os.environ.setdefault("DATABASE_URL", "")
os.environ.setdefault("LOG_FORMAT", "text")


def _step(number: int) -> dict:
    return {
        "step": number,
        "annotation": f"Step {number}: messages move from the queue to a worker.",
        "objects": [
            {
                "id": "queue", "kind": "box", "color": "#2563eb",
                "size": {"x": 2, "y": 1, "z": 1},
                "position": {"x": 0, "y": 0, "z": 0},
                "label": "Queue",
            },
            {
                "id": "worker", "kind": "sphere", "color": "#16a34a",
                "size": {"x": 1, "y": 1, "z": 1},
                "position": {"x": 4, "y": 0, "z": 0},
            },
        ],
        "movements": [
            {
                "objectId": "queue", "type": "translate",
                "to": {"x": 2, "y": 0, "z": 0}, "durationMs": 1200,
            },
        ],
        "labels": [{"text": "Broker", "objectId": "queue"}],
    }


def _problem_set(level: str, passing_score: float) -> dict:
    return {
        "level": level,
        "passingScore": passing_score,
        "problems": [
            {
                "question": f"What happens first in a {level} queue run?",
                "choices": ["Enqueue", "Dequeue", "Drop", "Retry"],
                "answer": "Enqueue",
                "explanation": "Items must be enqueued before anything consumes them.",
            },
        ],
    }


VALID_PAYLOAD = {
    "description": "How a message queue buffers work between producers and consumers.",
    "openingMessage": "Let's watch a message queue absorb bursts of traffic.",
    "narration": [
        "Producers push messages into the queue.",
        "The queue holds messages until a worker is free.",
        "Workers acknowledge each message once it is processed.",
        "Unacknowledged messages are redelivered after a timeout.",
    ],
    "explanationScript": "Queues decouple producers from consumers.",
    "simulationSteps": [_step(1), _step(2), _step(3)],
    "problemSets": [
        _problem_set("beginner", 70),
        _problem_set("intermediate", 75.5),
        _problem_set("advanced", 80),
    ],
}


@pytest.fixture
def valid_payload() -> dict:
    """Contract-valid generated content (camelCase wire keys); safe to mutate."""
    return copy.deepcopy(VALID_PAYLOAD)
