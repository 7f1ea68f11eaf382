"""
Relationship domain models

Edges between documentation nodes in the graph:
- (Document)-[:LINKS_TO]->(Document)         reference
- (Document)-[:WORKING_COPY_OF]->(Document)  editable draft of a published doc
- (Document)-[:USES_CONCEPT]->(Concept)
- (Document)-[:BELONGS_TO]->(Version)
- (Page)-[:DISPLAYS]->(Document)
- (Document)-[:HAS_ATTACHMENT]->(Attachment)
- (Page)-[:IN_VERSION]->(Version), (Page)-[:CHILD_OF]->(Page)
- (Concept)-[:SUBTYPE_OF]->(Concept)  child to parent
- (Concept)-[:PART_OF]->(Concept)     part to whole
- (Concept)-[:SYNONYM_OF]->(Concept)  read in both directions
- (Document|Concept|Page)-[:HAS_TAG]->(Tag)
"""
from dataclasses import dataclass
from enum import Enum


class RelationType(str, Enum):
    LINKS_TO = "LINKS_TO"
    WORKING_COPY_OF = "WORKING_COPY_OF"
    HAS_TAG = "HAS_TAG"
    USES_CONCEPT = "USES_CONCEPT"
    BELONGS_TO = "BELONGS_TO"
    DISPLAYS = "DISPLAYS"
    HAS_ATTACHMENT = "HAS_ATTACHMENT"
    IN_VERSION = "IN_VERSION"
    CHILD_OF = "CHILD_OF"
    SUBTYPE_OF = "SUBTYPE_OF"
    PART_OF = "PART_OF"
    SYNONYM_OF = "SYNONYM_OF"


# Edges that join two :Document nodes
DOCUMENT_TO_DOCUMENT = {RelationType.LINKS_TO, RelationType.WORKING_COPY_OF}

# Edges that join two :Concept nodes
CONCEPT_TO_CONCEPT = {RelationType.SUBTYPE_OF, RelationType.PART_OF, RelationType.SYNONYM_OF}

# Node labels that can carry tags
TAGGABLE_LABELS = ("Document", "Concept", "Page")


@dataclass
class DocumentLink:
    """
    Directed edge between two documents

    For WORKING_COPY_OF the source is the copy and the target the original.
    """
    source_id: str
    target_id: str
    relationship_type: RelationType = RelationType.LINKS_TO

    def __post_init__(self):
        self.relationship_type = RelationType(self.relationship_type)
        if self.relationship_type not in DOCUMENT_TO_DOCUMENT:
            raise ValueError(f"{self.relationship_type.value} does not join two documents")
        if self.source_id == self.target_id:
            raise ValueError("A document cannot be related to itself")
