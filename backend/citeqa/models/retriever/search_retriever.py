# backend/citeqa/models/retriever/search_retriever.py

from __future__ import annotations
from typing import Any, List, Mapping
import logging
import requests
from citeqa.core.entities import DocumentMetadata, RetrievedChunk, RetrievedDocumentHit
from citeqa.core.errors import RetrievalError
from citeqa.core.ports.retriever import IRetriever

logger = logging.getLogger("citeqa.retriever.search")


# -----------------------------
# Response mapping
# -----------------------------
def _map_chunk(obj: Mapping[str, Any]) -> RetrievedChunk:
    return RetrievedChunk(
        text=obj.get("content") or "",
        relevance_score=float(obj.get("score") or 0.0),
        is_marked_relevant=bool(obj.get("isRelevant")),
    )

def map_result(obj: Mapping[str, Any], collections: List[str] | None = None) -> RetrievedDocumentHit:
    meta = DocumentMetadata(obj.get("metadata") or {})
    chunks = [_map_chunk(c) for c in obj.get("chunks") or [] if isinstance(c, Mapping)]
    return RetrievedDocumentHit(
        document_id=str(obj.get("documentId") or ""),
        title=obj.get("title") or "Untitled",
        chunks=tuple(chunks),
        original_url=meta.original_url,
        collections=tuple(collections or ()),
    )


# -----------------------------
# Retriever
# -----------------------------
class SearchServiceRetriever(IRetriever):
    """Client for the hosted document search API (search + per-document details)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        rerank: bool = True,
        document_threshold: float = 0.3,
        chunk_threshold: float = 0.4,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise ValueError("Search API key is missing or empty. Set SEARCH_API_KEY in your environment or .env file.")
        self.base_url = base_url.rstrip("/")
        self.rerank = rerank
        self.document_threshold = document_threshold
        self.chunk_threshold = chunk_threshold
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _search_body(self, query: str, limit: int) -> dict:
        return {
            "q": query,
            "limit": limit,
            "rerank": self.rerank,
            "includeFullDocs": True,
            "includeSummary": True,
            "onlyMatchingChunks": False,
            "documentThreshold": self.document_threshold,
            "chunkThreshold": self.chunk_threshold,
        }

    def _collections(self, document_id: str) -> List[str]:
        """Container tags of one document; a failed lookup just means no collections."""
        try:
            r = self.session.get(f"{self.base_url}/v3/documents/{document_id}", timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"⚠️ Could not load details for document {document_id}: {e}")
            return []
        if not isinstance(data, Mapping):
            return []
        return DocumentMetadata(data).container_tags

    def search(self, query: str, limit: int = 8) -> List[RetrievedDocumentHit]:
        try:
            r = self.session.post(
                f"{self.base_url}/v3/search",
                json=self._search_body(query, limit),
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Search request failed: {e}")
            raise RetrievalError(f"Search request failed: {e}") from e
        if not isinstance(data, Mapping):
            raise RetrievalError(f"Unexpected search response: {type(data).__name__}")
        results = data.get("results") or []

        hits: List[RetrievedDocumentHit] = []
        for obj in results:
            if not isinstance(obj, Mapping):
                continue
            doc_id = str(obj.get("documentId") or "")
            hits.append(map_result(obj, self._collections(doc_id) if doc_id else []))

        logger.info(f"🔍 Search returned {len(hits)} document(s)")
        return hits
