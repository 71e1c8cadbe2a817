from datetime import datetime, timezone
import re
from uuid import UUID


def utc_now() -> datetime:
    """Timezone-aware current time used for every catalog timestamp"""
    return datetime.now(timezone.utc)


def escape_like(term: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so a search term is matched literally"""
    return re.sub(r"([%_\\])", lambda m: escape_char + m.group(1), term)


def parse_uuid(value) -> UUID:
    """Coerce a UUID or its string form; raises ValueError on malformed input"""
    if isinstance(value, UUID):
        return value
    return UUID(str(value))
