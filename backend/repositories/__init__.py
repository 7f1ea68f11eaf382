"""
Repository Pattern - Storage abstraction layer

Repositories hide storage details from business logic.
Consumers work with domain models, not storage-specific types.

Storage Split:
- DocumentContentRepository: PostgreSQL (content text)
- GraphDBService: graph database (metadata, relationships)
- StorageAdapter: object storage (large content blobs)
"""
from .document_content_repository import DocumentContentRepository

__all__ = ['DocumentContentRepository']
