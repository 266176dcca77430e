from __future__ import annotations
import os
import logging
from dataclasses import dataclass

from citeqa.config import Settings
from citeqa.core.ports.generator import IAnswerGenerator
from citeqa.core.ports.retriever import IRetriever
from citeqa.core.services.qa_service import QAService
from citeqa.models.llm.ollama_generator import OllamaAnswerGenerator
from citeqa.models.llm.extractive_generator import ExtractiveAnswerGenerator
from citeqa.models.retriever.search_retriever import SearchServiceRetriever
from citeqa.models.retriever.inmemory_retriever import InMemoryRetriever
from citeqa.models.store.inmemory_store import InMemoryStore

logger = logging.getLogger("citeqa.container")

@dataclass
class AppContainer:
    qa_service: QAService
    retriever: IRetriever
    generator: IAnswerGenerator


def build_retriever(settings: Settings) -> IRetriever:
    if settings.retriever_backend == "local":
        if not settings.data_path or not os.path.isfile(settings.data_path):
            raise ValueError(f"Local retriever needs DATA_PATH to point at a file, got {settings.data_path!r}")
        store = InMemoryStore()
        store.load(settings.data_path)
        logger.info(f"📂 Using local retriever over {settings.data_path} ({len(store)} docs)")
        return InMemoryRetriever(
            store,
            document_threshold=settings.search_document_threshold,
            chunk_threshold=settings.search_chunk_threshold,
        )

    logger.info(f"🔗 Using search service retriever at {settings.search_api_url}")
    return SearchServiceRetriever(
        base_url=settings.search_api_url,
        api_key=settings.search_api_key or "",
        rerank=settings.search_rerank,
        document_threshold=settings.search_document_threshold,
        chunk_threshold=settings.search_chunk_threshold,
        timeout=settings.search_timeout,
    )


def build_generator(settings: Settings) -> IAnswerGenerator:
    if settings.generation_backend == "extractive":
        logger.info("🔌 Using offline extractive generator")
        return ExtractiveAnswerGenerator()

    generator = OllamaAnswerGenerator(
        host=settings.ollama_host,
        model=settings.generation_model,
        temperature=settings.generation_temperature,
        max_tokens=settings.generation_max_tokens,
        timeout=settings.generation_timeout,
    )
    generator.check_connectivity()
    logger.info(f"🔌 Using Ollama generator: model={settings.generation_model}")
    return generator


def build_container(settings: Settings) -> AppContainer:
    """Wire adapters from explicit settings. Called once per process at startup."""
    logger.info(
        f"🔧 Building container - Retriever: {settings.retriever_backend}, "
        f"Generator: {settings.generation_backend}"
    )
    retriever = build_retriever(settings)
    generator = build_generator(settings)
    qa_service = QAService(retriever=retriever, generator=generator, search_limit=settings.search_limit)
    logger.info("✅ Container built successfully")
    return AppContainer(qa_service=qa_service, retriever=retriever, generator=generator)
