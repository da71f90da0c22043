"""Handlers for the generic collection tools.

These tools work on any collection name. Schemas come from the registry:
collections created through ``create_collection`` are strict, every other
collection resolves to a schemaless binding.
"""

import json

from mongomcp.application.handlers.base import HandlerContext, Operation
from mongomcp.application.schemas import (
    AddDocumentArguments,
    CollectionArguments,
    CreateCollectionArguments,
    GetDocumentsArguments,
    NoArguments,
    RenameCollectionArguments,
)
from mongomcp.core.logging import get_logger
from mongomcp.domain.services.record_validator import RecordValidator
from mongomcp.infrastructure.persistence.document_store import to_json

logger = get_logger(__name__)


async def get_all_collections(context: HandlerContext, args: NoArguments) -> str:
    collections = await context.store.list_collections()
    lines = "\n".join(f"• {c['name']} ({c['type']})" for c in collections)
    return f"**All Collections in Database:**\n\n{lines}\n\nTotal: {len(collections)} collections"


async def create_collection(context: HandlerContext, args: CreateCollectionArguments) -> str:
    """Register a strict schema and create the physical collection.

    The descriptor set is validated before the store is touched. If the
    store then fails, the new binding is forgotten again.
    """
    name = args.collection_name
    binding = context.registry.define(name, args.descriptors)

    try:
        created = await context.store.create_collection(name)
    except Exception:
        context.registry.forget(name)
        raise

    logger.info(
        "Collection created" if created else "Existing collection bound to schema",
        collection_name=name,
        field_count=len(binding.descriptors),
    )
    verb = "created" if created else "registered schema for existing"
    return (
        f"Successfully {verb} collection: **{name}**\n\n"
        f"**Schema:**\n{json.dumps(binding.describe(), indent=2)}"
    )


async def delete_collection(context: HandlerContext, args: CollectionArguments) -> str:
    name = args.collection_name
    await context.store.drop_collection(name)
    context.registry.forget(name)

    logger.info("Collection deleted", collection_name=name)
    return f"Successfully deleted collection: **{name}** and all its documents"


async def get_documents(context: HandlerContext, args: GetDocumentsArguments) -> str:
    name = args.collection_name
    context.registry.resolve(name)

    documents = await context.store.find(name, filter=args.filter, sort=args.sort, limit=args.limit)
    return f'**Found {len(documents)} documents in "{name}":**\n\n{to_json(documents)}'


async def add_document(context: HandlerContext, args: AddDocumentArguments) -> str:
    name = args.collection_name
    binding = context.registry.resolve(name)
    if binding.strict and not await context.store.collection_exists(name):
        # Strict binding outlived its collection
        logger.info("Discarding binding for missing collection", collection_name=name)
        context.registry.forget(name)
        binding = context.registry.resolve(name)

    document = RecordValidator.validate(binding, args.document)

    saved = await context.store.insert_one(name, document)

    logger.info("Document added", collection_name=name, document_id=str(saved["_id"]), strict=binding.strict)
    return (
        f"Successfully added document to **{name}**:\n\n"
        f"**Document ID:** {saved['_id']}\n"
        f"**Created:** {saved['createdAt'].isoformat()}\n\n"
        f"**Data:**\n{to_json(saved)}"
    )


async def update_collection_name(context: HandlerContext, args: RenameCollectionArguments) -> str:
    await context.store.rename_collection(args.old_name, args.new_name)
    # A binding left on the target belongs to a collection that no longer exists.
    context.registry.forget(args.new_name)
    context.registry.rekey(args.old_name, args.new_name)

    logger.info("Collection renamed", old_name=args.old_name, new_name=args.new_name)
    return f"Successfully renamed collection from **{args.old_name}** to **{args.new_name}**"


COLLECTION_OPERATIONS = [
    Operation("get_all_collections", NoArguments, get_all_collections),
    Operation("create_collection", CreateCollectionArguments, create_collection),
    Operation("delete_collection", CollectionArguments, delete_collection),
    Operation("get_documents", GetDocumentsArguments, get_documents),
    Operation("add_document", AddDocumentArguments, add_document),
    Operation("update_collection_name", RenameCollectionArguments, update_collection_name),
]
