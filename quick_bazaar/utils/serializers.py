"""
MongoDB document serialization utilities
"""
from typing import Any, Dict, List, Optional

from bson import Decimal128, ObjectId
from pymongo.results import DeleteResult, InsertOneResult


def convert_object_ids(doc: Any) -> Any:
    """
    Recursively convert BSON-only values (ObjectId, Decimal128) in a document to JSON

    Args:
        doc: Document that may contain BSON values at any level

    Returns:
        Document with ObjectIds as hex strings and decimals as {"$numberDecimal": ...}
    """
    if isinstance(doc, dict):
        return {key: convert_object_ids(value) for key, value in doc.items()}
    elif isinstance(doc, list):
        return [convert_object_ids(item) for item in doc]
    elif isinstance(doc, ObjectId):
        return str(doc)
    elif isinstance(doc, Decimal128):
        # Same shape the driver's extended JSON gives decimals
        return {"$numberDecimal": str(doc)}
    else:
        return doc


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert a single document for JSON output, or pass None through."""
    if doc is None:
        return None
    return convert_object_ids(doc)


def serialize_docs(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_doc(doc) for doc in docs if doc is not None]


def serialize_insert_result(result: InsertOneResult) -> Dict[str, Any]:
    """Render an insert result with the field names the drivers use on the wire."""
    return {
        "acknowledged": result.acknowledged,
        "insertedId": convert_object_ids(result.inserted_id),
    }


def serialize_delete_result(result: DeleteResult) -> Dict[str, Any]:
    # deleted_count raises on unacknowledged writes
    return {
        "acknowledged": result.acknowledged,
        "deletedCount": result.deleted_count if result.acknowledged else 0,
    }
