"""
Supporting graph nodes around documents

Tag, Concept, Version and Page only live in the graph database. Documents
reach them through the edges listed in relationships.py; pages and concepts
also have edges of their own:

- (Page)-[:IN_VERSION]->(Version)
- (Page)-[:CHILD_OF]->(Page)
- (Concept)-[:SUBTYPE_OF|PART_OF|SYNONYM_OF]->(Concept)
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from utils.datetime_utils import neo4j_datetime_to_python, utc_now
from utils.id_generator import generate_id


def normalize_tag_name(name: str) -> str:
    """Tags are matched by lowercase, trimmed name"""
    name = name.strip().lower()
    if not name:
        raise ValueError("Tag name cannot be empty")
    return name


@dataclass
class Tag:
    """Classification tag, unique by name"""
    name: str
    id: str = ""
    color: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.name = normalize_tag_name(self.name)

    @classmethod
    def new(cls, name: str, color: Optional[str] = None, description: Optional[str] = None) -> 'Tag':
        now = utc_now()
        return cls(name=name, id=generate_id(), color=color, description=description,
                   created_at=now, updated_at=now)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Tag':
        return cls(
            name=str(record['name']),
            id=str(record.get('id') or ''),
            color=record.get('color'),
            description=record.get('description'),
            created_at=neo4j_datetime_to_python(record.get('created_at')),
            updated_at=neo4j_datetime_to_python(record.get('updated_at')),
        )

    def to_properties(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'color': self.color, 'description': self.description}


@dataclass
class Concept:
    """Glossary term used by documents"""
    id: str
    term: str
    description: Optional[str] = None
    lang: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def new(cls, term: str, description: str, lang: str) -> 'Concept':
        now = utc_now()
        return cls(id=generate_id(), term=term, description=description, lang=lang,
                   created_at=now, updated_at=now)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Concept':
        return cls(
            id=str(record['id']),
            term=str(record.get('term', '')),
            description=record.get('description'),
            lang=record.get('lang'),
            created_at=neo4j_datetime_to_python(record.get('created_at')),
            updated_at=neo4j_datetime_to_python(record.get('updated_at')),
        )

    def to_properties(self) -> Dict[str, Any]:
        return {'id': self.id, 'term': self.term, 'description': self.description, 'lang': self.lang}


@dataclass
class Version:
    """
    Release version a document belongs to

    version is the semantic label (v1.2.0) and is unique; name is free text.
    """
    id: str
    name: str
    version: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = False
    is_main: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def new(
        cls,
        version: str,
        name: str,
        description: Optional[str] = None,
        is_public: bool = False,
        is_main: bool = False,
    ) -> 'Version':
        now = utc_now()
        return cls(id=generate_id(), name=name, version=version, description=description,
                   is_public=is_public, is_main=is_main, created_at=now, updated_at=now)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Version':
        return cls(
            id=str(record['id']),
            name=str(record.get('name') or record.get('version') or ''),
            version=record.get('version'),
            description=record.get('description'),
            is_public=bool(record.get('is_public', False)),
            is_main=bool(record.get('is_main', False)),
            created_at=neo4j_datetime_to_python(record.get('created_at')),
            updated_at=neo4j_datetime_to_python(record.get('updated_at')),
        )

    def to_properties(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'version': self.version,
            'name': self.name,
            'description': self.description,
            'is_public': self.is_public,
            'is_main': self.is_main,
        }


@dataclass
class Page:
    """
    Site page displaying a document

    version_id and parent_page_id are edges in the graph, read back
    alongside the node properties.
    """
    id: str
    slug: str
    title: str = ""
    order: int = 0
    visible: bool = False
    version_id: Optional[str] = None
    parent_page_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def new(
        cls,
        slug: str,
        title: str,
        version_id: str,
        parent_page_id: Optional[str] = None,
        order: int = 0,
        visible: bool = False,
    ) -> 'Page':
        now = utc_now()
        return cls(id=generate_id(), slug=slug, title=title, order=order, visible=visible,
                   version_id=version_id, parent_page_id=parent_page_id,
                   created_at=now, updated_at=now)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Page':
        return cls(
            id=str(record['id']),
            slug=record.get('slug') or '',
            title=record.get('title') or '',
            order=int(record.get('order') or 0),
            visible=bool(record.get('visible', False)),
            version_id=record.get('version_id'),
            parent_page_id=record.get('parent_page_id'),
            created_at=neo4j_datetime_to_python(record.get('created_at')),
            updated_at=neo4j_datetime_to_python(record.get('updated_at')),
        )

    def to_properties(self) -> Dict[str, Any]:
        """Stored properties; version and parent are edges"""
        return {'id': self.id, 'slug': self.slug, 'title': self.title,
                'order': self.order, 'visible': self.visible}


@dataclass
class NavigationItem:
    """One entry of a version's page tree"""
    id: str
    slug: str
    title: str
    order: int = 0
    document_id: Optional[str] = None
    children: List['NavigationItem'] = field(default_factory=list)


def build_navigation_tree(rows: List[Dict[str, Any]]) -> List[NavigationItem]:
    """
    Nest pages under their parents.

    rows carry {'page': {...}, 'parent_id': str|None, 'document_id': str|None}.
    A page whose parent is not in rows (hidden, or in another version)
    becomes a root. Siblings are ordered by order, then title.
    """
    items: Dict[str, NavigationItem] = {}
    parents: Dict[str, Optional[str]] = {}
    for row in rows:
        page = Page.from_record(row['page'])
        items[page.id] = NavigationItem(
            id=page.id,
            slug=page.slug,
            title=page.title,
            order=page.order,
            document_id=row.get('document_id'),
        )
        parents[page.id] = row.get('parent_id')

    roots: List[NavigationItem] = []
    for page_id, item in items.items():
        parent = items.get(parents[page_id])
        if parent is not None and parent is not item:
            parent.children.append(item)
        else:
            roots.append(item)

    def sort(level: List[NavigationItem]) -> List[NavigationItem]:
        level.sort(key=lambda i: (i.order, i.title))
        for item in level:
            sort(item.children)
        return level

    return sort(roots)
