"""Handlers for the fixed-schema DSA question tools."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from mongomcp.application.handlers.base import HandlerContext, Operation, validation_details
from mongomcp.application.schemas import (
    AddQuestionArguments,
    AddQuestionsArguments,
    DeleteQuestionArguments,
    GetQuestionsArguments,
    NoArguments,
)
from mongomcp.core.exceptions import ErrorDetail, NotFoundError, RecordValidationError, format_details
from mongomcp.core.logging import get_logger
from mongomcp.domain.entities.question import Question

logger = get_logger(__name__)

TOP_TOKENS = 10


def _format_timestamp(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value) if value is not None else "unknown"


def parse_question(data: dict[str, Any], prefix: str = "question") -> Question:
    """Validate a question document.

    Raises:
        RecordValidationError: If a required field is missing, empty or malformed.
    """
    try:
        return Question.model_validate(data)
    except ValidationError as exc:
        details = validation_details(exc, prefix)
        raise RecordValidationError(
            f"Failed to add question: {format_details(details)}", details=details
        ) from exc


async def add_dsa_question(context: HandlerContext, args: AddQuestionArguments) -> str:
    question = parse_question(args.question)
    saved = await context.store.insert_one(context.questions_collection, question.to_document())

    logger.info("Question added", question_id=str(saved["_id"]), level=saved["level"])
    return (
        f"Successfully added DSA question: {saved['name']}\n"
        f"ID: {saved['_id']}\n"
        f"Created at: {_format_timestamp(saved['createdAt'])}"
    )


async def add_multiple_dsa_questions(context: HandlerContext, args: AddQuestionsArguments) -> str:
    """Insert a batch of questions, all or nothing.

    Every element is validated before anything is written; one invalid
    element rejects the whole batch.
    """
    questions: list[Question] = []
    details: list[ErrorDetail] = []
    for index, data in enumerate(args.questions):
        try:
            questions.append(parse_question(data, prefix=f"questions[{index}]"))
        except RecordValidationError as exc:
            details.extend(exc.details)

    if details:
        raise RecordValidationError(
            f"Failed to add questions, nothing was inserted: {format_details(details)}",
            details=details,
        )

    saved = await context.store.insert_many(
        context.questions_collection, [q.to_document() for q in questions]
    )

    logger.info("Questions added", count=len(saved))
    lines = [f"- {doc['name']} ({doc['level']}) ID: {doc['_id']}" for doc in saved]
    return f"Successfully added {len(saved)} DSA questions:\n\n" + "\n".join(lines)


def build_question_query(args: GetQuestionsArguments) -> dict[str, Any]:
    """Translate the question filter into a MongoDB query."""
    query: dict[str, Any] = {}
    if args.filter.level:
        query["level"] = args.filter.level.value
    if args.filter.datastructure:
        query["datastructure"] = {"$in": [args.filter.datastructure]}
    if args.filter.algorithm:
        query["algorithm"] = {"$in": [args.filter.algorithm]}
    return query


def _format_question(doc: dict[str, Any]) -> str:
    created = doc.get("createdAt")
    created_text = created.date().isoformat() if isinstance(created, datetime) else "unknown"
    return (
        f"**{doc.get('name')}** ({doc.get('level')})\n"
        f"ID: {doc.get('_id')}\n"
        f"Data Structures: {', '.join(doc.get('datastructure', []))}\n"
        f"Algorithms: {', '.join(doc.get('algorithm', []))}\n"
        f"Test Cases: {len(doc.get('testcases', []))}\n"
        f"Created: {created_text}\n"
    )


async def get_dsa_questions(context: HandlerContext, args: GetQuestionsArguments) -> str:
    questions = await context.store.find(
        context.questions_collection,
        filter=build_question_query(args),
        sort={"createdAt": -1},
        limit=args.limit,
    )
    body = "\n".join(_format_question(doc) for doc in questions)
    return f"Found {len(questions)} DSA questions:\n\n{body}"


async def delete_dsa_question(context: HandlerContext, args: DeleteQuestionArguments) -> str:
    try:
        deleted = await context.store.find_one_and_delete_by_id(
            context.questions_collection, args.question_id
        )
    except NotFoundError as exc:
        raise NotFoundError(f"Question with ID '{args.question_id}' not found") from exc

    logger.info("Question deleted", question_id=args.question_id)
    return f"Successfully deleted DSA question: {deleted.get('name')}\nID: {deleted['_id']}"


@dataclass
class QuestionStats:
    """Aggregate statistics over the question collection."""

    total: int
    levels: list[tuple[str, int]]
    datastructures: list[tuple[str, int]]
    algorithms: list[tuple[str, int]]

    def render(self, collection: str) -> str:
        def breakdown(rows: list[tuple[str, int]]) -> str:
            return ", ".join(f"{value}: {count}" for value, count in rows)

        return (
            f"**{collection} Collection Stats**\n\n"
            f"Total Questions: {self.total}\n\n"
            f"**Level Distribution:**\n{breakdown(self.levels)}\n\n"
            f"**Top Data Structures:**\n{breakdown(self.datastructures)}\n\n"
            f"**Top Algorithms:**\n{breakdown(self.algorithms)}"
        )


async def compute_question_stats(context: HandlerContext) -> QuestionStats:
    store, collection = context.store, context.questions_collection
    return QuestionStats(
        total=await store.count(collection),
        levels=await store.group_count(collection, "level"),
        datastructures=await store.group_count(collection, "datastructure", unwind=True, limit=TOP_TOKENS),
        algorithms=await store.group_count(collection, "algorithm", unwind=True, limit=TOP_TOKENS),
    )


async def get_collection_stats(context: HandlerContext, args: NoArguments) -> str:
    stats = await compute_question_stats(context)
    return stats.render(context.questions_collection)


QUESTION_OPERATIONS = [
    Operation("add_dsa_question", AddQuestionArguments, add_dsa_question),
    Operation("add_multiple_dsa_questions", AddQuestionsArguments, add_multiple_dsa_questions),
    Operation("get_dsa_questions", GetQuestionsArguments, get_dsa_questions),
    Operation("delete_dsa_question", DeleteQuestionArguments, delete_dsa_question),
    Operation("get_collection_stats", NoArguments, get_collection_stats),
]
