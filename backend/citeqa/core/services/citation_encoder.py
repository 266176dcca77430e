from __future__ import annotations
from typing import Sequence
import logging

from citeqa.core.entities import SourceDescriptor
from citeqa.core.services.grounding import SOURCES_HEADING, COLLECTIONS_LABEL

logger = logging.getLogger("citeqa.citations.encoder")


def encode_source(source: SourceDescriptor) -> str:
    if not isinstance(source, SourceDescriptor):
        raise TypeError(f"expected SourceDescriptor, got {type(source).__name__}")
    line = f"{source.number}. [{source.title}]({source.link})"
    if source.collections:
        line += f" ({COLLECTIONS_LABEL} {', '.join(source.collections)})"
    return line


def encode_sources(descriptors: Sequence[SourceDescriptor]) -> str:
    """Serialize descriptors into the numbered Sources list, one line each.

    Titles and links are written verbatim. A title containing ``]`` or a link
    containing ``)`` will not decode back; such entries are dropped by the
    decoder rather than split at the wrong bracket.
    """
    if isinstance(descriptors, (str, bytes)):
        raise TypeError("descriptors must be a sequence of SourceDescriptor")
    lines = [(encode_source(d), d.number) for d in descriptors]
    lines.sort(key=lambda x: x[1])
    return "\n".join(line for line, _ in lines)


def render_sources_section(descriptors: Sequence[SourceDescriptor]) -> str:
    """Heading, blank line, then the list. Empty when there is nothing to cite."""
    block = encode_sources(descriptors)
    if not block:
        return ""
    logger.debug("Rendered sources section with %d entries", len(descriptors))
    return f"{SOURCES_HEADING}\n\n{block}"
