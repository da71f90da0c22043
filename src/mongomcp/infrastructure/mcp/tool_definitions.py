"""Tool listing: names, descriptions and JSON input schemas."""

from typing import Any

from mcp import types

_QUESTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Question title or name"},
        "description": {"type": "string", "description": "Problem statement"},
        "datastructure": {
            "type": "array",
            "items": {"type": "string"},
            "description": 'List of data structures used (e.g., ["array", "hash table"])',
        },
        "algorithm": {
            "type": "array",
            "items": {"type": "string"},
            "description": 'List of algorithms used (e.g., ["hashing", "dynamic programming"])',
        },
        "constraints": {"type": "string", "description": "Problem constraints as plain text"},
        "testcases": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "input": {"type": "string", "description": "Input format example"},
                    "output": {"type": "string", "description": "Output format example"},
                },
                "required": ["input", "output"],
            },
            "description": "Array of test cases",
        },
        "level": {
            "type": "string",
            "enum": ["easy", "medium", "hard"],
            "description": "Difficulty level of the question",
        },
    },
    "required": ["name", "description", "datastructure", "algorithm", "constraints", "testcases", "level"],
}

_COLLECTION_NAME = {"type": "string", "description": "Name of the collection"}

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "add_dsa_question",
        "description": "Add a single DSA question document to the DsaQuestions collection",
        "inputSchema": {
            "type": "object",
            "properties": {"question": _QUESTION_SCHEMA},
            "required": ["question"],
        },
    },
    {
        "name": "add_multiple_dsa_questions",
        "description": (
            "Add several DSA questions in one batch. "
            "If any question is invalid, none are inserted."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "questions": {"type": "array", "items": _QUESTION_SCHEMA, "minItems": 1},
            },
            "required": ["questions"],
        },
    },
    {
        "name": "get_dsa_questions",
        "description": "Get DSA questions with optional filters",
        "inputSchema": {
            "type": "object",
            "properties": {
                "filter": {
                    "type": "object",
                    "properties": {
                        "level": {
                            "type": "string",
                            "enum": ["easy", "medium", "hard"],
                            "description": "Filter by difficulty level",
                        },
                        "datastructure": {
                            "type": "string",
                            "description": 'Filter by data structure (e.g., "array", "linked list")',
                        },
                        "algorithm": {
                            "type": "string",
                            "description": 'Filter by algorithm (e.g., "hashing", "dp")',
                        },
                    },
                    "description": "Optional filters for querying questions",
                },
                "limit": {
                    "type": "number",
                    "description": "Maximum number of questions to return, 0 for all (default: 10)",
                    "default": 10,
                },
            },
        },
    },
    {
        "name": "delete_dsa_question",
        "description": "Delete a DSA question by its ID",
        "inputSchema": {
            "type": "object",
            "properties": {
                "questionId": {"type": "string", "description": "ID of the question to delete"},
            },
            "required": ["questionId"],
        },
    },
    {
        "name": "get_collection_stats",
        "description": "Get statistics about the DsaQuestions collection",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "get_all_collections",
        "description": "Get list of all collection names in the database",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "create_collection",
        "description": "Create a new collection with a custom schema",
        "inputSchema": {
            "type": "object",
            "properties": {
                "collectionName": {"type": "string", "description": "Name of the collection to create"},
                "schema": {
                    "type": "object",
                    "description": "Schema definition for the collection",
                    "additionalProperties": {
                        "type": "object",
                        "properties": {
                            "type": {
                                "type": "string",
                                "enum": ["String", "Number", "Boolean", "Date", "Array", "Object"],
                                "description": "Field data type",
                            },
                            "required": {
                                "type": "boolean",
                                "default": False,
                                "description": "Whether field is required",
                            },
                            "itemType": {
                                "type": "string",
                                "enum": ["String", "Number", "Boolean", "Mixed"],
                                "description": "Type of items in array (only for Array type)",
                            },
                        },
                        "required": ["type"],
                    },
                },
            },
            "required": ["collectionName", "schema"],
        },
    },
    {
        "name": "delete_collection",
        "description": "Delete an entire collection and all its documents",
        "inputSchema": {
            "type": "object",
            "properties": {
                "collectionName": {"type": "string", "description": "Name of the collection to delete"},
            },
            "required": ["collectionName"],
        },
    },
    {
        "name": "get_documents",
        "description": "Get documents from any collection with optional filters",
        "inputSchema": {
            "type": "object",
            "properties": {
                "collectionName": _COLLECTION_NAME,
                "filter": {
                    "type": "object",
                    "description": "MongoDB filter object (optional)",
                    "additionalProperties": True,
                },
                "limit": {
                    "type": "number",
                    "default": 10,
                    "description": "Maximum number of documents to return, 0 for all",
                },
                "sort": {
                    "type": "object",
                    "description": 'Sort criteria (e.g., {"createdAt": -1})',
                    "additionalProperties": True,
                },
            },
            "required": ["collectionName"],
        },
    },
    {
        "name": "add_document",
        "description": "Add a document to any collection",
        "inputSchema": {
            "type": "object",
            "properties": {
                "collectionName": _COLLECTION_NAME,
                "document": {
                    "type": "object",
                    "description": "Document data to insert",
                    "additionalProperties": True,
                },
            },
            "required": ["collectionName", "document"],
        },
    },
    {
        "name": "update_collection_name",
        "description": "Rename a collection",
        "inputSchema": {
            "type": "object",
            "properties": {
                "oldName": {"type": "string", "description": "Current collection name"},
                "newName": {"type": "string", "description": "New collection name"},
            },
            "required": ["oldName", "newName"],
        },
    },
]


def tool_names() -> list[str]:
    return [tool["name"] for tool in TOOL_DEFINITIONS]


def mcp_tools() -> list[types.Tool]:
    """Tool definitions as MCP SDK ``Tool`` objects."""
    return [types.Tool(**tool) for tool in TOOL_DEFINITIONS]
