"""Shared fixtures: scripted text generators and a canonical table."""
from typing import List, Union

import pytest

from app.core.errors import TextGenerationError
from app.llm.client import TextGenerator
from app.planning.normalizer import fallback_plan
from app.planning.types import TableDefinition

RECENTLY_PLAYED_QUERY = "Can you store the recently played songs in a table"


class ScriptedGenerator(TextGenerator):
    """Returns canned responses in order; exceptions in the script are raised."""

    def __init__(self, responses: List[Union[str, Exception]]):
        self.responses = list(responses)
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise TextGenerationError("script exhausted")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def recently_played() -> TableDefinition:
    return fallback_plan(RECENTLY_PLAYED_QUERY)[0]


@pytest.fixture
def scripted():
    return ScriptedGenerator
