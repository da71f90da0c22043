"""Pydantic argument models for each tool.

Field names follow the wire format of the tool input schemas (camelCase).
Record contents (a question, a document, a descriptor set) are accepted as
raw mappings here and validated by the domain layer, so that their failures
carry the right error type.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mongomcp.domain.entities.question import Level


class ToolArguments(BaseModel):
    """Base class for tool arguments."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class NoArguments(ToolArguments):
    """Arguments for tools that take none."""


# Question tools


class AddQuestionArguments(ToolArguments):
    question: dict[str, Any] = Field(..., description="The question document")


class AddQuestionsArguments(ToolArguments):
    questions: list[dict[str, Any]] = Field(
        ..., min_length=1, description="Question documents, inserted all-or-nothing"
    )


class QuestionFilter(ToolArguments):
    level: Level | None = Field(default=None, description="Exact difficulty level")
    datastructure: str | None = Field(default=None, description="One data structure token")
    algorithm: str | None = Field(default=None, description="One algorithm token")


class GetQuestionsArguments(ToolArguments):
    filter: QuestionFilter = Field(default_factory=QuestionFilter)
    limit: int = Field(default=10, ge=0, description="Maximum number of questions to return, 0 for all")


class DeleteQuestionArguments(ToolArguments):
    question_id: str = Field(..., alias="questionId", min_length=1)


# Generic collection tools


class CreateCollectionArguments(ToolArguments):
    collection_name: str = Field(..., alias="collectionName", min_length=1)
    descriptors: dict[str, Any] = Field(
        ..., alias="schema", description="Field name to descriptor"
    )


class CollectionArguments(ToolArguments):
    collection_name: str = Field(..., alias="collectionName", min_length=1)


class GetDocumentsArguments(ToolArguments):
    collection_name: str = Field(..., alias="collectionName", min_length=1)
    filter: dict[str, Any] = Field(default_factory=dict)
    sort: dict[str, int] | None = Field(
        default=None, description='Sort criteria, defaults to {"createdAt": -1}'
    )
    limit: int = Field(default=10, ge=0, description="Maximum documents to return, 0 for all")


class AddDocumentArguments(ToolArguments):
    collection_name: str = Field(..., alias="collectionName", min_length=1)
    document: dict[str, Any]


class RenameCollectionArguments(ToolArguments):
    old_name: str = Field(..., alias="oldName", min_length=1)
    new_name: str = Field(..., alias="newName", min_length=1)
