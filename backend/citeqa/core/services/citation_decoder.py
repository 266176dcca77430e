from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import logging

from citeqa.core.entities import (
    DecodedAnswer,
    ExtractedSources,
    SourceDescriptor,
    TextSegment,
    SEGMENT_CITATION,
    SEGMENT_TEXT,
)
from citeqa.core.services.grounding import (
    FOOTNOTE_RE,
    MAX_NUMBER_DIGITS,
    SOURCE_LINE_RE,
    SOURCES_HEADING_RE,
)

logger = logging.getLogger("citeqa.citations.decoder")


def _require_text(text) -> str:
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")
    return text


def _split_collections(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(c.strip() for c in raw.split(",") if c.strip())


def _parse_number(digits: str) -> Optional[int]:
    # int() refuses digit runs beyond sys.get_int_max_str_digits() on newer interpreters
    if len(digits) > MAX_NUMBER_DIGITS:
        return None
    try:
        return int(digits)
    except ValueError:
        return None


def parse_source_line(line: str) -> Optional[SourceDescriptor]:
    """Parse one ``N. [title](link)`` line, or return None if it does not match."""
    m = SOURCE_LINE_RE.match(line)
    if not m:
        return None
    digits, title, link, collections = m.groups()
    number = _parse_number(digits)
    if number is None:
        return None
    return SourceDescriptor(
        number=number,
        title=title,
        link=link,
        collections=_split_collections(collections),
    )


def extract_sources(text: str) -> ExtractedSources:
    """
    Split answer text into prose and the trailing Sources list.

    The last ``## Sources`` heading wins. Lines after it that do not follow
    the grammar are skipped, so any prefix of a streamed answer decodes
    without error. Entry numbers are reported exactly as written.
    """
    text = _require_text(text)

    headings = list(SOURCES_HEADING_RE.finditer(text))
    if not headings:
        return ExtractedSources(main_text=text, sources=())
    heading = headings[-1]

    main_text = text[: heading.start()].rstrip()
    sources: List[SourceDescriptor] = []
    skipped = 0
    for line in text[heading.end():].splitlines():
        if not line.strip():
            continue
        source = parse_source_line(line)
        if source is None:
            skipped += 1
            continue
        sources.append(source)

    if skipped:
        logger.debug("Skipped %d unparseable line(s) in sources section", skipped)
    return ExtractedSources(main_text=main_text, sources=tuple(sources))


def segment(text: str) -> Tuple[TextSegment, ...]:
    """Split text into plain-text and ``[n]`` citation-marker segments.

    ``"".join(s.content for s in segment(text)) == text`` always holds.
    """
    text = _require_text(text)
    segments: List[TextSegment] = []
    pending = 0  # start of text not yet emitted
    for m in FOOTNOTE_RE.finditer(text):
        number = _parse_number(m.group(1))
        if number is None:
            # unconvertible marker stays part of the surrounding text
            continue
        if m.start() > pending:
            segments.append(TextSegment(kind=SEGMENT_TEXT, content=text[pending:m.start()]))
        segments.append(TextSegment(kind=SEGMENT_CITATION, content=m.group(0), referenced_number=number))
        pending = m.end()
    if pending < len(text):
        segments.append(TextSegment(kind=SEGMENT_TEXT, content=text[pending:]))
    return tuple(segments)


def resolve_citation(number: int, sources: Sequence[SourceDescriptor]) -> Optional[SourceDescriptor]:
    for s in sources:
        if s.number == number:
            return s
    return None


def dangling_citations(segments: Sequence[TextSegment], sources: Sequence[SourceDescriptor]) -> List[int]:
    """Marker numbers with no matching source, first occurrence order."""
    out: List[int] = []
    for seg in segments:
        n = seg.referenced_number
        if seg.kind == SEGMENT_CITATION and n not in out and resolve_citation(n, sources) is None:
            out.append(n)
    return out


def decode_answer(text: str) -> DecodedAnswer:
    extracted = extract_sources(text)
    return DecodedAnswer(
        main_text=extracted.main_text,
        sources=extracted.sources,
        segments=segment(extracted.main_text),
    )
