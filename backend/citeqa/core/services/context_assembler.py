from __future__ import annotations
from typing import List, Sequence, Tuple
import logging

from citeqa.core.entities import (
    INTERNAL_LINK_PREFIX,
    AssembledContext,
    RetrievedChunk,
    RetrievedDocumentHit,
    SourceDescriptor,
)
from citeqa.core.services.grounding import ALL_COLLECTIONS_TAG

logger = logging.getLogger("citeqa.context")

MAX_CHUNKS_PER_DOCUMENT = 3
CHUNK_SEPARATOR = "\n\n"
DOCUMENT_SEPARATOR = "\n\n---\n\n"


# ==========================================================
# Chunk selection
# ==========================================================
def select_chunks(chunks: Sequence[RetrievedChunk], limit: int = MAX_CHUNKS_PER_DOCUMENT) -> List[RetrievedChunk]:
    """
    Prefer chunks the retriever marked relevant; otherwise fall back to all
    chunks by descending score. Ties keep retrieval order.
    """
    selected = [c for c in chunks if c.is_marked_relevant]
    if not selected:
        selected = sorted(chunks, key=lambda c: c.relevance_score or 0.0, reverse=True)
    return selected[:limit]


def _document_block(position: int, hit: RetrievedDocumentHit) -> str:
    body = CHUNK_SEPARATOR.join(c.text for c in select_chunks(hit.chunks))
    return f'[Document {position}: "{hit.title}" (ID: {hit.document_id})]\n{body}'


# ==========================================================
# Descriptors
# ==========================================================
def source_link(hit: RetrievedDocumentHit) -> str:
    if hit.original_url and hit.original_url.strip():
        return hit.original_url.strip()
    return f"{INTERNAL_LINK_PREFIX}{hit.document_id}"


def visible_collections(collections: Sequence[str]) -> Tuple[str, ...]:
    out: List[str] = []
    for c in collections:
        if c and c != ALL_COLLECTIONS_TAG and c not in out:
            out.append(c)
    return tuple(out)


def describe_source(position: int, hit: RetrievedDocumentHit) -> SourceDescriptor:
    return SourceDescriptor(
        number=position,
        title=hit.title,
        link=source_link(hit),
        collections=visible_collections(hit.collections),
    )


# ==========================================================
# Assembly
# ==========================================================
def assemble_context(hits: Sequence[RetrievedDocumentHit]) -> AssembledContext:
    """
    Turn ranked hits into the model-facing context and the numbered sources.

    Numbering is the 1-based position in ``hits``; the caller's ranking is
    never reordered. An empty input gives an empty context and no sources.
    """
    if isinstance(hits, (str, bytes)):
        raise TypeError("hits must be a sequence of RetrievedDocumentHit")

    blocks: List[str] = []
    descriptors: List[SourceDescriptor] = []
    for position, hit in enumerate(hits, start=1):
        if not isinstance(hit, RetrievedDocumentHit):
            raise TypeError(f"expected RetrievedDocumentHit, got {type(hit).__name__}")
        blocks.append(_document_block(position, hit))
        descriptors.append(describe_source(position, hit))

    logger.debug("Assembled context from %d document(s)", len(descriptors))
    return AssembledContext(
        context_text=DOCUMENT_SEPARATOR.join(blocks),
        descriptors=tuple(descriptors),
    )
