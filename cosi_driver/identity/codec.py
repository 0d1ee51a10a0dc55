"""
Identity document codec.
"""

from pydantic import ValidationError

from cosi_driver.exceptions import MalformedDocumentError
from cosi_driver.identity.models import IdentityDocument


def decode(data: bytes) -> IdentityDocument:
    """
    Parse the persisted identity document.

    An empty payload is the same as a document with no identities; a store
    entry that was never written and one that was truncated to zero bytes
    are treated alike.

    Raises:
        MalformedDocumentError: If the payload is not a valid document
    """
    if not data or not data.strip():
        return IdentityDocument()

    try:
        return IdentityDocument.model_validate_json(data)
    except ValidationError as e:
        raise MalformedDocumentError(
            f"Identity document is malformed: {e.error_count()} error(s)",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


def encode(doc: IdentityDocument) -> bytes:
    """Serialize ``doc``; identical documents always produce identical bytes."""
    return doc.model_dump_json(by_alias=True, indent=2).encode("utf-8") + b"\n"
