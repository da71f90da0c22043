"""Question entity: the fixed-schema DSA question record."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class Level(str, Enum):
    """Difficulty level of a question."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TestCase(BaseModel):
    """A single input/output example."""

    __test__ = False  # not a pytest class

    model_config = ConfigDict(extra="ignore")

    input: NonEmptyText
    output: NonEmptyText


class Question(BaseModel):
    """A DSA question as stored in the questions collection.

    ``createdAt``/``updatedAt`` and ``_id`` are assigned by the store and are
    not part of this model.
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    name: NonEmptyText = Field(..., description="Question title or name")
    description: NonEmptyText = Field(..., description="Problem statement")
    datastructure: list[NonEmptyText] = Field(
        ..., min_length=1, description='Data structures used, e.g. ["array", "hash table"]'
    )
    algorithm: list[NonEmptyText] = Field(
        ..., min_length=1, description='Algorithms used, e.g. ["hashing"]'
    )
    constraints: NonEmptyText = Field(..., description="Problem constraints as plain text")
    testcases: list[TestCase] = Field(..., description="Input/output examples")
    level: Level = Field(..., description="Difficulty level")

    def to_document(self) -> dict:
        """Document body for insertion."""
        return self.model_dump(mode="python")
