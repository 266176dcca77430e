from __future__ import annotations
from typing import List, Iterable
import json
import logging
from pathlib import Path
from citeqa.core.entities import Document

logger = logging.getLogger("citeqa.store")

def _pick(obj: dict, keys: list[str]) -> str:
    for k in keys:
        v = obj.get(k)
        if isinstance(v, str) and v.strip():
            return v.strip()
    return ""

def _pick_list(obj: dict, keys: list[str]) -> tuple[str, ...]:
    for k in keys:
        v = obj.get(k)
        if isinstance(v, list):
            return tuple(x.strip() for x in v if isinstance(x, str) and x.strip())
    return ()

def _map_record(obj: dict) -> Document | None:
    doc_id = _pick(obj, ["id", "doc_id", "documentId", "uid", "uuid"])
    title = _pick(obj, ["title", "name", "filename"])
    text  = _pick(obj, ["text", "content", "body", "abstract", "summary"])
    if not (doc_id and title and text):
        return None
    return Document(
        doc_id=doc_id,
        title=title,
        text=text,
        url=_pick(obj, ["url", "originalUrl"]) or None,
        collections=_pick_list(obj, ["collections", "containerTags"]),
    )

class InMemoryStore:
    """Documents loaded from a JSON array or JSONL file."""

    def __init__(self, docs: Iterable[Document] = ()) -> None:
        self.docs: List[Document] = list(docs)

    def load(self, path: str) -> List[Document]:
        p = Path(path)
        records: List[dict] = []
        with p.open("r", encoding="utf-8") as f:
            if p.suffix.lower() == ".jsonl":
                for n, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        records.append(json.loads(line))
                    except ValueError as e:
                        logger.warning(f"⚠️ Skipping bad JSONL line {n} in {p.name}: {e}")
            else:
                data = json.load(f)
                if isinstance(data, list):
                    records = data

        docs = [d for d in (_map_record(o) for o in records if isinstance(o, dict)) if d]
        logger.info(f"📂 Loaded {len(docs)} document(s) from {p}")
        self.docs = docs
        return docs

    def iter_documents(self) -> Iterable[Document]:
        return iter(self.docs)

    def __len__(self) -> int:
        return len(self.docs)
