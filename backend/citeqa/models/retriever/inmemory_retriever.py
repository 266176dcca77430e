from __future__ import annotations
from typing import List, Tuple
import logging
import re

from citeqa.core.entities import Document, RetrievedChunk, RetrievedDocumentHit
from citeqa.core.ports.retriever import IRetriever
from citeqa.models.store.inmemory_store import InMemoryStore

logger = logging.getLogger("citeqa.retriever.local")

_WORD = re.compile(r"\w+", re.U)
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


def _tokens(s: str) -> set[str]:
    return {t.lower() for t in _WORD.findall(s)}


def split_paragraphs(text: str) -> List[str]:
    return [p.strip() for p in _PARAGRAPH_SPLIT.split(text) if p.strip()]


class InMemoryRetriever(IRetriever):
    """
    Offline retriever over an InMemoryStore.

    A chunk's score is the share of query terms it contains (0..1). Chunks at
    or above ``chunk_threshold`` are marked relevant; documents whose best
    chunk reaches ``document_threshold`` are returned, best first.
    """

    def __init__(self, store: InMemoryStore, document_threshold: float = 0.3, chunk_threshold: float = 0.4):
        self.store = store
        self.document_threshold = document_threshold
        self.chunk_threshold = chunk_threshold

    def _score(self, query_terms: set[str], doc: Document) -> Tuple[float, List[RetrievedChunk]]:
        chunks: List[RetrievedChunk] = []
        for para in split_paragraphs(doc.text):
            score = len(query_terms & _tokens(para)) / len(query_terms)
            chunks.append(RetrievedChunk(
                text=para,
                relevance_score=score,
                is_marked_relevant=score >= self.chunk_threshold,
            ))
        best = max((c.relevance_score for c in chunks), default=0.0)
        return best, chunks

    def search(self, query: str, limit: int = 8) -> List[RetrievedDocumentHit]:
        query_terms = _tokens(query)
        if not query_terms:
            return []

        scored: List[Tuple[float, RetrievedDocumentHit]] = []
        for doc in self.store.iter_documents():
            best, chunks = self._score(query_terms, doc)
            if best <= 0.0 or best < self.document_threshold:
                continue
            scored.append((best, RetrievedDocumentHit(
                document_id=doc.doc_id,
                title=doc.title,
                chunks=tuple(chunks),
                original_url=doc.url,
                collections=doc.collections,
            )))

        scored.sort(key=lambda x: x[0], reverse=True)
        hits = [h for _, h in scored[:limit]]
        logger.info(f"🔍 Local search matched {len(scored)} document(s), returning {len(hits)}")
        return hits
