"""
Utility functions
"""
from .datetime_utils import neo4j_datetime_to_python, utc_now
from .id_generator import (
    generate_attachment_key,
    generate_id,
    generate_storage_key,
    is_uuid,
    sanitize_filename,
)

__all__ = [
    'neo4j_datetime_to_python',
    'utc_now',
    'generate_attachment_key',
    'generate_id',
    'generate_storage_key',
    'is_uuid',
    'sanitize_filename',
]
