"""Fake Content Client — stands in for ContentGenerationClient in service tests.

Invariants:
    - Records every call (system, prompt) in `calls`, and the ErrorContext in `contexts`
    - Returns `text` or raises `error`, never both
"""


class FakeContentClient:

    def __init__(self, text: str | None = None, error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.contexts: list = []

    async def complete(self, system, prompt, context=None):
        self.calls.append((system, prompt))
        self.contexts.append(context)
        if self.error is not None:
            raise self.error
        return self.text
