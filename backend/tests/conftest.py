"""Pytest fixtures for the test suite."""

from typing import Iterator, List

import pytest

from citeqa.core.entities import ChatMessage, RetrievedChunk, RetrievedDocumentHit
from citeqa.core.ports.generator import IAnswerGenerator
from citeqa.core.ports.retriever import IRetriever


# =============================================================================
# Fakes
# =============================================================================


class FakeRetriever(IRetriever):
    def __init__(self, hits: List[RetrievedDocumentHit], error: Exception | None = None):
        self.hits = hits
        self.error = error
        self.calls: List[tuple] = []

    def search(self, query: str, limit: int = 8) -> List[RetrievedDocumentHit]:
        self.calls.append((query, limit))
        if self.error:
            raise self.error
        return self.hits[:limit]


class FakeGenerator(IAnswerGenerator):
    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    def generate(self, system_prompt: str, messages: List[ChatMessage]) -> str:
        self.prompts.append(system_prompt)
        if self.error:
            raise self.error
        return self.reply

    def generate_stream(self, system_prompt: str, messages: List[ChatMessage]) -> Iterator[str]:
        self.prompts.append(system_prompt)
        if self.error:
            raise self.error
        for i in range(0, len(self.reply), 7):
            yield self.reply[i:i + 7]


# =============================================================================
# Data fixtures
# =============================================================================


@pytest.fixture
def sample_hits() -> List[RetrievedDocumentHit]:
    """Two internal documents and one with an external URL."""
    return [
        RetrievedDocumentHit(
            document_id="doc-vpn",
            title="Onboarding Guide",
            chunks=(
                RetrievedChunk("VPN access requires an IT ticket.", 0.91, True),
                RetrievedChunk("Laptops are issued on day one.", 0.40, False),
            ),
            collections=("all", "it", "hr"),
        ),
        RetrievedDocumentHit(
            document_id="doc-sec",
            title="Security Policy",
            chunks=(RetrievedChunk("Passwords rotate every 90 days.", 0.72, True),),
            original_url="https://intranet.example.com/security",
            collections=("all",),
        ),
        RetrievedDocumentHit(
            document_id="doc-faq",
            title="IT FAQ",
            chunks=(RetrievedChunk("Use the self-service portal to reset MFA.", 0.55, False),),
        ),
    ]


@pytest.fixture
def user_messages() -> List[ChatMessage]:
    return [ChatMessage(role="user", content="How do I get VPN access?")]


@pytest.fixture
def fake_retriever(sample_hits) -> FakeRetriever:
    return FakeRetriever(sample_hits)
