from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from citeqa.core.entities import DecodedAnswer, SourceDescriptor, TextSegment


class MessageIn(BaseModel):
    role: str
    content: Optional[str] = None
    parts: Optional[List[Dict[str, Any]]] = None


class AnswerRequest(BaseModel):
    messages: List[MessageIn] = Field(default_factory=list)


class DecodeRequest(BaseModel):
    text: str


class SourceOut(BaseModel):
    number: int
    title: str
    link: str
    is_internal_document_link: bool
    document_id: Optional[str] = None
    collections: List[str] = Field(default_factory=list)

    @classmethod
    def from_descriptor(cls, d: SourceDescriptor) -> "SourceOut":
        return cls(
            number=d.number,
            title=d.title,
            link=d.link,
            is_internal_document_link=d.is_internal_document_link,
            document_id=d.document_id,
            collections=list(d.collections),
        )


class SegmentOut(BaseModel):
    kind: Literal["text", "citationMarker"]
    content: str
    referenced_number: Optional[int] = None

    @classmethod
    def from_segment(cls, s: TextSegment) -> "SegmentOut":
        return cls(kind=s.kind, content=s.content, referenced_number=s.referenced_number)


class DecodedOut(BaseModel):
    main_text: str
    sources: List[SourceOut]
    segments: List[SegmentOut]
    dangling_citations: List[int] = Field(default_factory=list)

    @classmethod
    def from_decoded(cls, decoded: DecodedAnswer, dangling: List[int]) -> "DecodedOut":
        return cls(
            main_text=decoded.main_text,
            sources=[SourceOut.from_descriptor(s) for s in decoded.sources],
            segments=[SegmentOut.from_segment(s) for s in decoded.segments],
            dangling_citations=dangling,
        )


class AnswerResponse(DecodedOut):
    answer: str


class HealthResponse(BaseModel):
    status: str
    retriever: Optional[str] = None
    generator: Optional[str] = None
