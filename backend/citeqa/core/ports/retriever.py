from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List
from citeqa.core.entities import RetrievedDocumentHit

class IRetriever(ABC):
    @abstractmethod
    def search(self, query: str, limit: int = 8) -> List[RetrievedDocumentHit]:
        """Return hits in relevance order; that order becomes citation numbering."""
        ...
