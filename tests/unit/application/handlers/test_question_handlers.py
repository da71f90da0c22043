"""Unit tests for the DSA question handlers."""

import copy

import pytest
import pytest_asyncio
from bson import ObjectId
from pydantic import ValidationError

from mongomcp.application.handlers.question_handlers import (
    add_dsa_question,
    add_multiple_dsa_questions,
    build_question_query,
    compute_question_stats,
    delete_dsa_question,
    get_collection_stats,
    get_dsa_questions,
)
from mongomcp.application.schemas import (
    AddQuestionArguments,
    AddQuestionsArguments,
    DeleteQuestionArguments,
    GetQuestionsArguments,
    NoArguments,
)
from mongomcp.core.exceptions import NotFoundError, RecordValidationError


def _question(valid_question, **overrides):
    data = copy.deepcopy(valid_question)
    data.update(overrides)
    return data


@pytest.mark.asyncio
class TestAddQuestion:

    async def test_add_single_question(self, handler_context, fake_store, valid_question):
        text = await add_dsa_question(handler_context, AddQuestionArguments(question=valid_question))

        stored = fake_store.collections["DsaQuestions"]
        assert len(stored) == 1
        assert text.startswith("Successfully added DSA question: Two Sum\nID: ")
        assert str(stored[0]["_id"]) in text
        assert "Created at: 2024-01-01T00:00:01+00:00" in text

    async def test_missing_field_inserts_nothing(self, handler_context, fake_store, valid_question):
        del valid_question["constraints"]

        with pytest.raises(RecordValidationError) as exc_info:
            await add_dsa_question(handler_context, AddQuestionArguments(question=valid_question))

        assert "question.constraints" in exc_info.value.message
        assert fake_store.calls == []

    async def test_bad_level_rejected(self, handler_context, fake_store, valid_question):
        valid_question["level"] = "legendary"

        with pytest.raises(RecordValidationError):
            await add_dsa_question(handler_context, AddQuestionArguments(question=valid_question))


@pytest.mark.asyncio
class TestAddMultipleQuestions:

    async def test_add_batch(self, handler_context, fake_store, valid_question):
        questions = [
            _question(valid_question, name="Two Sum"),
            _question(valid_question, name="Three Sum", level="medium"),
        ]

        text = await add_multiple_dsa_questions(handler_context, AddQuestionsArguments(questions=questions))

        assert len(fake_store.collections["DsaQuestions"]) == 2
        assert text.startswith("Successfully added 2 DSA questions:")
        assert "- Three Sum (medium) ID: " in text

    async def test_one_invalid_element_rejects_batch(self, handler_context, fake_store, valid_question):
        questions = [
            _question(valid_question, name="Two Sum"),
            _question(valid_question, name=""),
            _question(valid_question, name="Three Sum"),
        ]

        with pytest.raises(RecordValidationError) as exc_info:
            await add_multiple_dsa_questions(handler_context, AddQuestionsArguments(questions=questions))

        assert "questions[1].name" in exc_info.value.message
        assert "DsaQuestions" not in fake_store.collections
        assert "insert_many" not in fake_store.calls


@pytest.mark.asyncio
class TestGetQuestions:

    async def test_filters(self, handler_context, fake_store, valid_question):
        await fake_store.insert_many(
            "DsaQuestions",
            [
                _question(valid_question, name="A", level="easy", datastructure=["array"]),
                _question(valid_question, name="B", level="hard", datastructure=["tree"]),
                _question(valid_question, name="C", level="easy", datastructure=["tree", "graph"]),
            ],
        )

        args = GetQuestionsArguments.model_validate({"filter": {"level": "easy", "datastructure": "tree"}})
        text = await get_dsa_questions(handler_context, args)

        assert text.startswith("Found 1 DSA questions:")
        assert "**C** (easy)" in text

    async def test_newest_first_and_limit(self, handler_context, fake_store, valid_question):
        for name in ["first", "second", "third"]:
            await fake_store.insert_one("DsaQuestions", _question(valid_question, name=name))

        text = await get_dsa_questions(handler_context, GetQuestionsArguments(limit=2))

        assert text.startswith("Found 2 DSA questions:")
        assert text.index("**third**") < text.index("**second**")
        assert "**first**" not in text

    async def test_zero_limit_returns_all(self, handler_context, fake_store, valid_question):
        await fake_store.insert_many(
            "DsaQuestions", [_question(valid_question, name=f"q{i}") for i in range(12)]
        )

        text = await get_dsa_questions(handler_context, GetQuestionsArguments(limit=0))

        assert text.startswith("Found 12 DSA questions:")

    async def test_empty_collection(self, handler_context):
        text = await get_dsa_questions(handler_context, GetQuestionsArguments())
        assert text.startswith("Found 0 DSA questions:")


class TestBuildQuestionQuery:

    def test_build_query(self):
        args = GetQuestionsArguments.model_validate(
            {"filter": {"level": "hard", "algorithm": "dynamic programming"}}
        )
        assert build_question_query(args) == {
            "level": "hard",
            "algorithm": {"$in": ["dynamic programming"]},
        }

    def test_build_query_no_filter(self):
        assert build_question_query(GetQuestionsArguments()) == {}

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            GetQuestionsArguments(limit=-1)


@pytest.mark.asyncio
class TestDeleteQuestion:

    async def test_delete(self, handler_context, fake_store, valid_question):
        saved = await fake_store.insert_one("DsaQuestions", valid_question)

        text = await delete_dsa_question(
            handler_context, DeleteQuestionArguments(questionId=str(saved["_id"]))
        )

        assert "Successfully deleted DSA question: Two Sum" in text
        assert fake_store.collections["DsaQuestions"] == []

    async def test_delete_nonexistent(self, handler_context, fake_store, valid_question):
        await fake_store.insert_one("DsaQuestions", valid_question)
        missing = str(ObjectId())

        with pytest.raises(NotFoundError) as exc_info:
            await delete_dsa_question(handler_context, DeleteQuestionArguments(questionId=missing))

        assert exc_info.value.message == f"Question with ID '{missing}' not found"
        assert len(fake_store.collections["DsaQuestions"]) == 1

    async def test_delete_malformed_id(self, handler_context):
        with pytest.raises(NotFoundError):
            await delete_dsa_question(handler_context, DeleteQuestionArguments(questionId="abc"))


@pytest.mark.asyncio
class TestCollectionStats:

    @pytest_asyncio.fixture
    async def seeded(self, fake_store, valid_question):
        await fake_store.insert_many(
            "DsaQuestions",
            [
                _question(valid_question, level="easy", datastructure=["array"]),
                _question(valid_question, level="easy", datastructure=["array", "hash table"]),
                _question(valid_question, level="hard", datastructure=["hash table"]),
            ],
        )

    async def test_compute_stats(self, handler_context, seeded):
        stats = await compute_question_stats(handler_context)

        assert stats.total == 3
        assert stats.levels == [("easy", 2), ("hard", 1)]
        assert stats.datastructures == [("array", 2), ("hash table", 2)]
        assert stats.algorithms == [("hashing", 3)]

    async def test_render(self, handler_context, seeded):
        text = await get_collection_stats(handler_context, NoArguments())

        assert "**DsaQuestions Collection Stats**" in text
        assert "Total Questions: 3" in text
        assert "**Level Distribution:**\neasy: 2, hard: 1" in text
        assert "**Top Data Structures:**\narray: 2, hash table: 2" in text

    async def test_empty_collection(self, handler_context):
        stats = await compute_question_stats(handler_context)

        assert stats.total == 0
        assert stats.levels == []
