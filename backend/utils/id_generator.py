"""
ID generation for documentation entities.

Documents, contents and concepts use UUID4 strings. The same id is used
across stores: the graph Document node id is the document_id of its
content row, and the storage key is derived from it.

Storage keys:
- documents/{document_id}               - document content blob
- attachments/{attachment_id}/{filename} - uploaded file, filename sanitized
"""
import re
import uuid

UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

DOCUMENT_KEY_PREFIX = "documents"
ATTACHMENT_KEY_PREFIX = "attachments"

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def generate_id() -> str:
    """Generate a new UUID4 string"""
    return str(uuid.uuid4())


def is_uuid(id_str: str) -> bool:
    """
    Check if a string looks like a UUID.

    Args:
        id_str: String to check

    Returns:
        True if it looks like a UUID
    """
    if not id_str or not isinstance(id_str, str):
        return False
    return bool(UUID_PATTERN.match(id_str))


def generate_storage_key(document_id: str) -> str:
    """
    Derive the storage key for a document's content.

    The key depends on document_id alone, so it never needs to be stored
    independently of the document.
    """
    return f"{DOCUMENT_KEY_PREFIX}/{document_id}"


def sanitize_filename(filename: str) -> str:
    """Replace anything outside [a-zA-Z0-9._-] with an underscore"""
    return UNSAFE_FILENAME_CHARS.sub("_", filename) or "file"


def generate_attachment_key(attachment_id: str, filename: str) -> str:
    return f"{ATTACHMENT_KEY_PREFIX}/{attachment_id}/{sanitize_filename(filename)}"
