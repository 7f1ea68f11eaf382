"""
Datetime helpers for values coming back from Neo4j and PostgreSQL
"""
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Timezone-aware current time in UTC"""
    return datetime.now(timezone.utc)


def neo4j_datetime_to_python(neo4j_dt) -> Optional[datetime]:
    """
    Convert Neo4j DateTime to Python datetime

    Handles multiple cases:
    - None -> None
    - Already Python datetime -> return as-is
    - Neo4j DateTime with to_native() -> Python datetime
    - String ISO format -> parse to datetime
    - Other -> None with warning

    Args:
        neo4j_dt: Neo4j DateTime, Python datetime, string, or None

    Returns:
        Python datetime or None
    """
    if neo4j_dt is None:
        return None

    if isinstance(neo4j_dt, datetime):
        return neo4j_dt

    if hasattr(neo4j_dt, 'to_native'):
        try:
            return neo4j_dt.to_native()
        except Exception as e:
            logger.warning(f"Failed to call to_native() on {type(neo4j_dt)}: {e}")

    if isinstance(neo4j_dt, str):
        try:
            return datetime.fromisoformat(neo4j_dt.replace('Z', '+00:00'))
        except ValueError as e:
            logger.warning(f"Failed to parse datetime string '{neo4j_dt}': {e}")
            return None

    logger.warning(f"Cannot convert {type(neo4j_dt)} to Python datetime: {neo4j_dt}")
    return None
