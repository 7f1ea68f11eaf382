"""
Domain Models - Storage-agnostic data structures

These models represent the core domain entities independent of storage layer.
Services operate on these models, not raw database rows.

Architecture:
- Domain models are pure Python objects (dataclasses)
- Storage details (PostgreSQL, Neo4j, object storage) are abstracted via
  repositories and services
- Business logic operates on these models, not database rows
"""

from .document import (
    Document,
    DocumentNode,
    DocumentStatus,
    DocumentType,
    is_valid_status_transition,
)
from .attachment import Attachment, AttachmentType
from .document_content import DocumentContent
from .graph_nodes import (
    Concept,
    NavigationItem,
    Page,
    Tag,
    Version,
    build_navigation_tree,
    normalize_tag_name,
)
from .relationships import DocumentLink, RelationType

__all__ = [
    # Documents
    'Document',
    'DocumentNode',
    'DocumentStatus',
    'DocumentType',
    'DocumentContent',
    'is_valid_status_transition',

    # Graph neighbours
    'Concept',
    'NavigationItem',
    'Page',
    'Tag',
    'Version',
    'build_navigation_tree',
    'normalize_tag_name',

    # Attachments
    'Attachment',
    'AttachmentType',

    # Relationships
    'DocumentLink',
    'RelationType',
]
