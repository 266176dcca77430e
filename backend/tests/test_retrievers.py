"""Tests for the search-service and local retrievers."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from citeqa.core.errors import RetrievalError
from citeqa.models.retriever.inmemory_retriever import InMemoryRetriever, split_paragraphs
from citeqa.models.retriever.search_retriever import SearchServiceRetriever, map_result
from citeqa.models.store.inmemory_store import InMemoryStore


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


SEARCH_PAYLOAD = {
    "results": [
        {
            "documentId": "doc-vpn",
            "title": "Onboarding Guide",
            "score": 0.8,
            "metadata": {"source": "upload"},
            "chunks": [
                {"content": "VPN access requires an IT ticket.", "score": 0.91, "isRelevant": True},
                {"content": "Laptops are issued on day one.", "score": 0.4, "isRelevant": False},
            ],
        },
        {
            "documentId": "doc-sec",
            "title": "Security Policy",
            "metadata": {"originalUrl": "https://intranet.example.com/security"},
            "chunks": [{"content": "Passwords rotate every 90 days.", "score": 0.7}],
        },
    ]
}


# ============================================================================
# SearchServiceRetriever
# ============================================================================

class TestSearchServiceRetriever:
    @pytest.fixture
    def session(self):
        session = MagicMock()
        session.headers = {}
        session.post.return_value = _response(SEARCH_PAYLOAD)
        session.get.side_effect = [
            _response({"containerTags": ["all", "it"]}),
            requests.HTTPError("404"),
        ]
        return session

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            SearchServiceRetriever("https://search.example.com", api_key="")

    def test_maps_results_in_order(self, session):
        retriever = SearchServiceRetriever("https://search.example.com/", "secret", session=session)
        hits = retriever.search("vpn access", limit=5)

        assert [h.document_id for h in hits] == ["doc-vpn", "doc-sec"]
        assert hits[0].chunks[0].is_marked_relevant is True
        assert hits[0].chunks[1].relevance_score == 0.4
        assert hits[0].collections == ("all", "it")
        assert hits[1].original_url == "https://intranet.example.com/security"

    def test_failed_detail_lookup_means_no_collections(self, session):
        hits = SearchServiceRetriever("https://search.example.com", "secret", session=session).search("q")

        assert hits[1].collections == ()

    def test_request_body_and_auth(self, session):
        retriever = SearchServiceRetriever(
            "https://search.example.com", "secret", rerank=False, chunk_threshold=0.5, session=session
        )
        retriever.search("vpn", limit=3)

        url = session.post.call_args.args[0]
        body = session.post.call_args.kwargs["json"]
        assert url == "https://search.example.com/v3/search"
        assert body["q"] == "vpn"
        assert body["limit"] == 3
        assert body["rerank"] is False
        assert body["chunkThreshold"] == 0.5
        assert session.headers["Authorization"] == "Bearer secret"
        assert session.get.call_args_list[0].args[0] == "https://search.example.com/v3/documents/doc-vpn"

    def test_search_failure_raises_retrieval_error(self, session):
        session.post.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(RetrievalError, match="unreachable"):
            SearchServiceRetriever("https://search.example.com", "secret", session=session).search("q")


def test_map_result_url_fallback_key():
    hit = map_result({"documentId": "d", "title": "T", "metadata": {"url": " https://x.example "}})

    assert hit.original_url == "https://x.example"
    assert hit.chunks == ()


# ============================================================================
# InMemoryStore / InMemoryRetriever
# ============================================================================

@pytest.fixture
def corpus_path(tmp_path):
    records = [
        {"id": "vpn", "title": "Onboarding Guide", "text": "Welcome aboard.\n\nVPN access requires an IT ticket.",
         "collections": ["all", "it"]},
        {"id": "sec", "title": "Security Policy", "text": "Passwords rotate every 90 days.",
         "url": "https://intranet.example.com/security"},
        {"id": "broken"},
    ]
    path = tmp_path / "docs.jsonl"
    lines = [json.dumps(r) for r in records] + ["", "{not json"]
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


class TestInMemoryStore:
    def test_load_jsonl_skips_bad_records(self, corpus_path):
        store = InMemoryStore()
        docs = store.load(str(corpus_path))

        assert [d.doc_id for d in docs] == ["vpn", "sec"]
        assert docs[0].collections == ("all", "it")
        assert docs[1].url == "https://intranet.example.com/security"
        assert len(store) == 2

    def test_load_json_array(self, tmp_path):
        path = tmp_path / "docs.json"
        path.write_text(json.dumps([{"id": "a", "title": "A", "content": "alpha"}]), encoding="utf-8")

        assert [d.text for d in InMemoryStore().load(str(path))] == ["alpha"]


class TestInMemoryRetriever:
    def test_ranks_and_marks_chunks(self, corpus_path):
        store = InMemoryStore()
        store.load(str(corpus_path))
        hits = InMemoryRetriever(store).search("How do I get VPN access ticket")

        assert [h.document_id for h in hits] == ["vpn"]
        relevant = [c.text for c in hits[0].chunks if c.is_marked_relevant]
        assert relevant == ["VPN access requires an IT ticket."]
        assert hits[0].collections == ("all", "it")

    def test_empty_query(self, corpus_path):
        store = InMemoryStore()
        store.load(str(corpus_path))

        assert InMemoryRetriever(store).search("   ") == []

    def test_limit(self, corpus_path):
        store = InMemoryStore()
        store.load(str(corpus_path))
        retriever = InMemoryRetriever(store, document_threshold=0.0, chunk_threshold=0.0)

        assert len(retriever.search("passwords vpn", limit=1)) == 1


def test_split_paragraphs():
    assert split_paragraphs("a\n\n  \n\nb\nc\n") == ["a", "b\nc"]
