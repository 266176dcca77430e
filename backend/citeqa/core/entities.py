from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

INTERNAL_LINK_PREFIX = "doc://"

SEGMENT_TEXT = "text"
SEGMENT_CITATION = "citationMarker"


@dataclass(frozen=True)
class Document:
    doc_id: str
    title: str
    text: str
    url: Optional[str] = None
    collections: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RetrievedChunk:
    text: str
    relevance_score: float = 0.0
    is_marked_relevant: bool = False


@dataclass(frozen=True)
class RetrievedDocumentHit:
    document_id: str
    title: str
    chunks: Tuple[RetrievedChunk, ...] = ()
    original_url: Optional[str] = None
    collections: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SourceDescriptor:
    """One numbered entry of a Sources block.

    Whether the link points inside the document store is read off the link
    itself, so a descriptor decoded from text compares equal to the one the
    assembler produced.
    """
    number: int
    title: str
    link: str
    collections: Tuple[str, ...] = ()

    @property
    def is_internal_document_link(self) -> bool:
        return self.link.startswith(INTERNAL_LINK_PREFIX)

    @property
    def document_id(self) -> Optional[str]:
        if not self.is_internal_document_link:
            return None
        return self.link[len(INTERNAL_LINK_PREFIX):]


@dataclass(frozen=True)
class AssembledContext:
    context_text: str
    descriptors: Tuple[SourceDescriptor, ...]


@dataclass(frozen=True)
class ExtractedSources:
    main_text: str
    sources: Tuple[SourceDescriptor, ...]


@dataclass(frozen=True)
class TextSegment:
    kind: str  # SEGMENT_TEXT | SEGMENT_CITATION
    content: str
    referenced_number: Optional[int] = None


@dataclass(frozen=True)
class DecodedAnswer:
    main_text: str
    sources: Tuple[SourceDescriptor, ...]
    segments: Tuple[TextSegment, ...]


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


@dataclass(frozen=True)
class Answer:
    text: str
    decoded: DecodedAnswer
    descriptors: Tuple[SourceDescriptor, ...] = ()


@dataclass(frozen=True)
class DocumentMetadata:
    """Read-only view over the free-form metadata the search service returns."""
    raw: Mapping[str, Any] = field(default_factory=dict)

    def get_str(self, key: str) -> Optional[str]:
        v = self.raw.get(key)
        if isinstance(v, str) and v.strip():
            return v.strip()
        return None

    def get_str_list(self, key: str) -> List[str]:
        v = self.raw.get(key)
        if not isinstance(v, (list, tuple)):
            return []
        return [x for x in v if isinstance(x, str)]

    @property
    def original_url(self) -> Optional[str]:
        return self.get_str("originalUrl") or self.get_str("url")

    @property
    def container_tags(self) -> List[str]:
        return self.get_str_list("containerTags")
