from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterator, List
from citeqa.core.entities import ChatMessage

class IAnswerGenerator(ABC):
    @abstractmethod
    def generate(self, system_prompt: str, messages: List[ChatMessage]) -> str:
        ...

    @abstractmethod
    def generate_stream(self, system_prompt: str, messages: List[ChatMessage]) -> Iterator[str]:
        ...
