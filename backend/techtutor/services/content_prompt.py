"""Content Prompt — instructions sent to the external content generator.

Invariants:
    - build_content_prompt(topic, level) is pure and deterministic
    - The requested JSON shape mirrors schemas/content_contract.py (camelCase keys)

Design Decisions:
    - Prompt asks for JSON only, but ingestion still tolerates fences and prose:
      the instruction is a request, not a guarantee
"""

from techtutor.core.domain_types import DifficultyLevel

SYSTEM_PROMPT = (
    "You are an expert technical tutor. Return only JSON with dynamic "
    "simulation narration, 3D simulation steps and exercises."
)

_SHAPE = """{
  "description": "string",
  "openingMessage": "string",
  "narration": ["line1", "line2", "... 4-8 lines"],
  "explanationScript": "string",
  "simulationSteps": [
    {
      "step": 1,
      "annotation": "what this step shows",
      "objects": [
        {"id": "obj-1", "kind": "box|sphere|cylinder|cone|torus|plane|line|arrow|text",
         "color": "#RRGGBB", "size": {"x": 1, "y": 1, "z": 1},
         "position": {"x": 0, "y": 0, "z": 0}, "label": "string"}
      ],
      "movements": [
        {"objectId": "obj-1", "type": "translate|rotate|scale|pulse",
         "to": {"x": 1, "y": 0, "z": 0}, "durationMs": 1500}
      ],
      "labels": [{"text": "string", "objectId": "obj-1"}],
      "mathExpressions": [{"expression": "n * log2(n)", "variables": {"n": 8}}],
      "chart": {"type": "line|scatter|bar", "title": "string", "x": [1, 2], "y": [3, 4]}
    }
  ],
  "problemSets": [
    {
      "level": "beginner",
      "passingScore": 70,
      "problems": [
        {
          "question": "string",
          "choices": ["a", "b", "c", "d"],
          "answer": "one choice exactly",
          "explanation": "string"
        }
      ]
    },
    {"level": "intermediate", "passingScore": 75, "problems": [...]},
    {"level": "advanced", "passingScore": 80, "problems": [...]}
  ]
}"""


def build_content_prompt(topic: str, level: DifficultyLevel) -> str:
    return (
        f'Generate teaching content for topic "{topic}" at {level.value} depth.\n\n'
        f"Output strict JSON with this shape:\n{_SHAPE}\n\n"
        "Rules:\n"
        "- Keep narration natural and simulation-oriented.\n"
        "- Use 3 to 6 simulation steps; every movement must reference an object "
        "declared in the same step.\n"
        "- Keep all coordinates between -30 and 30.\n"
        "- Problems must match level difficulty.\n"
        "- Keep content concise and practical.\n"
        "- Return JSON only, no markdown."
    )
