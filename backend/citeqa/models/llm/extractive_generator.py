from __future__ import annotations
from typing import Iterator, List, Tuple
import re
from collections import Counter
from citeqa.core.entities import ChatMessage
from citeqa.core.ports.generator import IAnswerGenerator
from citeqa.core.services.citation_decoder import extract_sources
from citeqa.core.services.citation_encoder import render_sources_section
from citeqa.core.services.context_assembler import DOCUMENT_SEPARATOR
from citeqa.core.services.prompting import INSUFFICIENT_INFO_TEXT

_SENT_SPLIT = re.compile(r"(?<=[.!?])\s+")
_WORD = re.compile(r"\w+", re.U)
_CONTEXT = re.compile(r"CONTEXT FROM DOCUMENTS:\n(.*?)\n\nINSTRUCTIONS:", re.S)
_DOC_HEADER = re.compile(r'^\[Document (\d+): ".*" \(ID: .*\)\]$')
_STREAM_PIECE = re.compile(r"\S+\s*|\s+")

def _sentences(s: str) -> List[str]:
    return [x.strip() for x in _SENT_SPLIT.split(s) if x.strip()]

def _tokens(s: str) -> List[str]:
    return [t.lower() for t in _WORD.findall(s)]

def _documents(system_prompt: str) -> List[Tuple[int, str]]:
    """(citation number, passage text) pairs read back from the prompt's context."""
    m = _CONTEXT.search(system_prompt)
    if not m or not m.group(1).strip():
        return []
    docs: List[Tuple[int, str]] = []
    for block in m.group(1).split(DOCUMENT_SEPARATOR):
        header, _, body = block.partition("\n")
        hm = _DOC_HEADER.match(header)
        if hm:
            docs.append((int(hm.group(1)), body))
    return docs

class ExtractiveAnswerGenerator(IAnswerGenerator):
    """
    Pure-offline generator: choose the sentences from the prompt's context
    with highest token overlap with the question, mark each with its
    document number, and close with the Sources section it was given.
    """
    def __init__(self, max_sentences: int = 3):
        self.max_sentences = max_sentences

    def generate(self, system_prompt: str, messages: List[ChatMessage]) -> str:
        question = next((m.content for m in reversed(messages) if m.role == "user"), "")
        qtok = Counter(_tokens(question))
        cand: List[tuple[float, int, str]] = []
        for number, body in _documents(system_prompt):
            for s in _sentences(body):
                st = Counter(_tokens(s))
                overlap = sum(min(qtok[w], st[w]) for w in set(qtok) & set(st))
                if overlap > 0:
                    cand.append((float(overlap), number, s))
        cand.sort(key=lambda x: x[0], reverse=True)
        chosen = cand[: self.max_sentences]
        if not chosen:
            return INSUFFICIENT_INFO_TEXT

        prose = " ".join(f"{s} [{n}]" for _, n, s in chosen)
        cited = {n for _, n, _ in chosen}
        offered = extract_sources(system_prompt).sources
        section = render_sources_section([d for d in offered if d.number in cited])
        return f"{prose}\n\n{section}" if section else prose

    def generate_stream(self, system_prompt: str, messages: List[ChatMessage]) -> Iterator[str]:
        for piece in _STREAM_PIECE.findall(self.generate(system_prompt, messages)):
            yield piece
