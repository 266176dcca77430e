from __future__ import annotations
import logging
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse, StreamingResponse
from citeqa.core.errors import UpstreamServiceError
from citeqa.core.services.citation_decoder import dangling_citations, decode_answer
from citeqa.core.services.qa_service import normalize_messages
from citeqa.models.schemas import AnswerRequest, AnswerResponse, DecodeRequest, DecodedOut

router = APIRouter(prefix="", tags=["qa"])
logger = logging.getLogger("citeqa.api.answer")

# Set by main.py at startup
qa_service = None


def _messages(payload: AnswerRequest):
    if qa_service is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="QA service not ready")
    messages = normalize_messages(m.model_dump() for m in payload.messages)
    if not messages:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid messages provided")
    return messages


def _upstream_failure(e: UpstreamServiceError) -> JSONResponse:
    logger.error(f"❌ Q&A error: {e}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": "Failed to process question", "details": str(e)},
    )


@router.post("/answer", response_model=AnswerResponse)
def answer(payload: AnswerRequest):
    messages = _messages(payload)
    try:
        result = qa_service.answer(messages)
    except UpstreamServiceError as e:
        return _upstream_failure(e)

    decoded = result.decoded
    out = DecodedOut.from_decoded(decoded, dangling_citations(decoded.segments, decoded.sources))
    return AnswerResponse(answer=result.text, **out.model_dump())


@router.post("/stream")
def stream(payload: AnswerRequest):
    messages = _messages(payload)
    try:
        chunks = qa_service.stream(messages)
    except UpstreamServiceError as e:
        return _upstream_failure(e)

    return StreamingResponse(chunks, media_type="text/plain; charset=utf-8")


@router.post("/decode", response_model=DecodedOut)
def decode(payload: DecodeRequest):
    """Decode a (possibly partial) answer snapshot into prose, sources and segments."""
    decoded = decode_answer(payload.text)
    return DecodedOut.from_decoded(decoded, dangling_citations(decoded.segments, decoded.sources))
