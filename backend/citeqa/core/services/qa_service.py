from __future__ import annotations
from typing import Any, Iterable, Iterator, List, Mapping
import logging

from citeqa.core.ports.generator import IAnswerGenerator
from citeqa.core.ports.retriever import IRetriever
from citeqa.core.entities import Answer, AssembledContext, ChatMessage
from citeqa.core.services.context_assembler import assemble_context
from citeqa.core.services.citation_encoder import render_sources_section
from citeqa.core.services.citation_decoder import decode_answer
from citeqa.core.services.prompting import build_system_prompt

logger = logging.getLogger("citeqa.qa")

NO_DOCUMENTS_TEXT = (
    "I couldn't find any relevant information in the uploaded documents to answer your question."
)
ALLOWED_ROLES = ("system", "user", "assistant", "tool")


# ==========================================================
# Message normalisation
# ==========================================================
def _message_text(raw: Mapping[str, Any]) -> str:
    """Text of a chat message given either as ``parts`` or plain ``content``."""
    content = ""
    parts = raw.get("parts")
    if isinstance(parts, list):
        content = "".join(
            p.get("text") or ""
            for p in parts
            if isinstance(p, Mapping) and p.get("type") == "text"
        )
    if not content and isinstance(raw.get("content"), str):
        content = raw["content"]
    return content


def normalize_messages(raw_messages: Iterable[Mapping[str, Any]]) -> List[ChatMessage]:
    """Drop empty messages and unsupported roles."""
    out: List[ChatMessage] = []
    for raw in raw_messages:
        role = raw.get("role")
        content = _message_text(raw)
        if role in ALLOWED_ROLES and content.strip():
            out.append(ChatMessage(role=role, content=content))
    return out


# ==========================================================
# QA Service
# ==========================================================
class QAService:
    """
    Retrieval-augmented question answering with numbered citations.

    Retrieval order is the citation order: the assembler numbers documents
    by position, the same numbers are written into the Sources section the
    model is asked to reproduce, and the decoder reads them back.
    Upstream failures are not caught here.
    """

    def __init__(self, retriever: IRetriever, generator: IAnswerGenerator, search_limit: int = 8):
        self.retriever = retriever
        self.generator = generator
        self.search_limit = search_limit

    def prepare(self, question: str) -> AssembledContext:
        hits = self.retriever.search(question, limit=self.search_limit)
        logger.info(f"🔍 Retrieved {len(hits)} document(s) for question")
        return assemble_context(hits)

    def _system_prompt(self, assembled: AssembledContext) -> str:
        return build_system_prompt(
            assembled.context_text,
            render_sources_section(assembled.descriptors),
        )

    @staticmethod
    def _question(messages: List[ChatMessage]) -> str:
        if not messages:
            raise ValueError("No valid messages provided")
        return messages[-1].content

    # ------------------------------------------------------
    # Non-streaming
    # ------------------------------------------------------
    def answer(self, messages: List[ChatMessage]) -> Answer:
        question = self._question(messages)
        assembled = self.prepare(question)

        if not assembled.descriptors:
            logger.warning("⚠️ No relevant documents; answering without generation.")
            return Answer(text=NO_DOCUMENTS_TEXT, decoded=decode_answer(NO_DOCUMENTS_TEXT))

        text = self.generator.generate(self._system_prompt(assembled), messages)
        decoded = decode_answer(text)
        logger.info(
            f"🧠 Answer decoded: {len(decoded.sources)} source(s), "
            f"{len(assembled.descriptors)} offered"
        )
        return Answer(text=text, decoded=decoded, descriptors=assembled.descriptors)

    # ------------------------------------------------------
    # Streaming
    # ------------------------------------------------------
    def stream(self, messages: List[ChatMessage]) -> Iterator[str]:
        """
        Retrieve eagerly, then return an iterator of raw answer text.
        Consumers decode the growing buffer themselves.
        """
        question = self._question(messages)
        assembled = self.prepare(question)

        if not assembled.descriptors:
            logger.warning("⚠️ No relevant documents; streaming fixed reply.")
            return iter([NO_DOCUMENTS_TEXT])

        return self.generator.generate_stream(self._system_prompt(assembled), messages)

    def describe(self) -> dict:
        return {
            "retriever": type(self.retriever).__name__,
            "generator": type(self.generator).__name__,
            "search_limit": self.search_limit,
        }
