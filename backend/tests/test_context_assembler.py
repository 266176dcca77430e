"""Tests for context assembly and source numbering."""

import pytest

from citeqa.core.entities import RetrievedChunk, RetrievedDocumentHit, SourceDescriptor
from citeqa.core.services.context_assembler import (
    DOCUMENT_SEPARATOR,
    assemble_context,
    select_chunks,
    visible_collections,
)


class TestSelectChunks:
    def test_prefers_marked_relevant(self):
        chunks = [
            RetrievedChunk("a", 0.9, False),
            RetrievedChunk("b", 0.1, True),
            RetrievedChunk("c", 0.5, True),
        ]

        assert [c.text for c in select_chunks(chunks)] == ["b", "c"]

    def test_falls_back_to_score_order(self):
        chunks = [
            RetrievedChunk("low", 0.2),
            RetrievedChunk("high", 0.9),
            RetrievedChunk("mid", 0.5),
        ]

        assert [c.relevance_score for c in select_chunks(chunks)] == [0.9, 0.5, 0.2]

    def test_ties_keep_retrieval_order(self):
        chunks = [RetrievedChunk("first", 0.5), RetrievedChunk("second", 0.5), RetrievedChunk("top", 0.7)]

        assert [c.text for c in select_chunks(chunks)] == ["top", "first", "second"]

    def test_at_most_three(self):
        chunks = [RetrievedChunk(str(i), 0.1 * i, True) for i in range(6)]

        assert [c.text for c in select_chunks(chunks)] == ["0", "1", "2"]


class TestAssembleContext:
    def test_empty_input(self):
        result = assemble_context([])

        assert result.context_text == ""
        assert result.descriptors == ()

    def test_numbering_follows_input_order(self, sample_hits):
        result = assemble_context(sample_hits)

        assert [d.number for d in result.descriptors] == [1, 2, 3]
        assert [d.title for d in result.descriptors] == ["Onboarding Guide", "Security Policy", "IT FAQ"]

    def test_descriptors(self, sample_hits):
        first, second, third = assemble_context(sample_hits).descriptors

        assert first == SourceDescriptor(1, "Onboarding Guide", "doc://doc-vpn", ("it", "hr"))
        assert first.document_id == "doc-vpn"
        assert second.link == "https://intranet.example.com/security"
        assert second.is_internal_document_link is False
        assert second.collections == ()
        assert third.link == "doc://doc-faq"

    def test_blank_url_falls_back_to_internal_link(self):
        hit = RetrievedDocumentHit("d1", "Doc", (RetrievedChunk("x", 1.0, True),), original_url="  ")

        assert assemble_context([hit]).descriptors[0].link == "doc://d1"

    def test_context_blocks(self, sample_hits):
        text = assemble_context(sample_hits).context_text
        blocks = text.split(DOCUMENT_SEPARATOR)

        assert len(blocks) == 3
        assert blocks[0] == '[Document 1: "Onboarding Guide" (ID: doc-vpn)]\nVPN access requires an IT ticket.'
        assert blocks[2] == '[Document 3: "IT FAQ" (ID: doc-faq)]\nUse the self-service portal to reset MFA.'

    def test_fallback_chunks_joined_by_blank_line(self):
        hit = RetrievedDocumentHit(
            "d",
            "Doc",
            (RetrievedChunk("low", 0.2), RetrievedChunk("high", 0.9), RetrievedChunk("mid", 0.5)),
        )

        assert assemble_context([hit]).context_text == '[Document 1: "Doc" (ID: d)]\nhigh\n\nmid\n\nlow'

    def test_deterministic(self, sample_hits):
        assert assemble_context(sample_hits) == assemble_context(list(sample_hits))

    def test_rejects_wrong_shape(self):
        with pytest.raises(TypeError):
            assemble_context("not hits")
        with pytest.raises(TypeError):
            assemble_context([{"document_id": "x"}])


def test_visible_collections_drops_sentinel_and_duplicates():
    assert visible_collections(["all", "legal", "all", "legal", "hr", ""]) == ("legal", "hr")
