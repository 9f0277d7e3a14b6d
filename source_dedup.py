"""Citation extraction and deduplication for grounding metadata."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Set, Tuple

from config import DEFAULT_SOURCE_TITLE
from models import Source

logger = logging.getLogger(__name__)


def _field(obj: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an SDK object alike."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _to_source(entry: Any) -> Optional[Source]:
    uri = _field(entry, "uri")
    if not isinstance(uri, str) or not uri.strip():
        return None
    title = _clean_text(_field(entry, "title")) or DEFAULT_SOURCE_TITLE
    return Source(title=title, uri=uri)


def dedupe_references(entries: Iterable[Any]) -> Tuple[Source, ...]:
    """Deduplicate flat ``{title, uri}`` entries by exact uri, first occurrence wins."""
    seen: Set[str] = set()
    sources: List[Source] = []
    dropped = 0
    for entry in entries or ():
        source = _to_source(entry)
        if source is None:
            dropped += 1
            continue
        if source.uri in seen:
            continue
        seen.add(source.uri)
        sources.append(source)
    if dropped:
        logger.debug("Dropped %d citation entries without a uri", dropped)
    return tuple(sources)


def dedupe(raw_chunks: Iterable[Any]) -> Tuple[Source, ...]:
    """Turn grounding chunks (``{web: {uri, title}}``) into unique sources."""
    webs = [_field(chunk, "web") for chunk in raw_chunks or ()]
    sources = dedupe_references(web for web in webs if web is not None)
    logger.info(f"Grounding sources: {len(webs)} chunks -> {len(sources)} unique")
    return sources


__all__ = ["dedupe", "dedupe_references"]
