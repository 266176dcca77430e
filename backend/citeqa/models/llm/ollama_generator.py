# backend/citeqa/models/llm/ollama_generator.py

from __future__ import annotations
from typing import Iterator, List
import json, logging, requests
from citeqa.core.entities import ChatMessage
from citeqa.core.errors import GenerationError
from citeqa.core.ports.generator import IAnswerGenerator

logger = logging.getLogger("citeqa.llm.ollama")


class OllamaAnswerGenerator(IAnswerGenerator):
    def __init__(
        self,
        host: str,
        model: str,
        temperature: float = 0.1,
        max_tokens: int = 2000,
        timeout: float = 180.0,
    ):
        self.host = host.strip().rstrip("/")
        self.model = model.strip()
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def check_connectivity(self) -> bool:
        try:
            r = requests.get(f"{self.host}/api/tags", timeout=5)
            r.raise_for_status()
            models = [m.get("model") or m.get("name") for m in r.json().get("models", [])]
            logger.info(f"✅ Ollama reachable at {self.host}")
            logger.info(f"📦 Models: {models}")
            if self.model not in models:
                logger.warning(f"⚠️ Generator model '{self.model}' not registered.")
            return True
        except requests.RequestException as e:
            logger.error(f"❌ Cannot contact Ollama generation service: {e}")
            return False

    def _payload(self, system_prompt: str, messages: List[ChatMessage], stream: bool) -> dict:
        chat = [{"role": "system", "content": system_prompt}]
        chat += [{"role": m.role, "content": m.content} for m in messages]
        return {
            "model": self.model,
            "messages": chat,
            "stream": stream,
            "options": {"temperature": self.temperature, "num_predict": self.max_tokens},
        }

    def generate(self, system_prompt: str, messages: List[ChatMessage]) -> str:
        url = f"{self.host}/api/chat"
        payload = self._payload(system_prompt, messages, stream=False)
        try:
            r = requests.post(url, json=payload, timeout=self.timeout)
            if r.status_code == 404:
                raise GenerationError(f"404: model '{self.model}' not registered in Ollama.")
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            logger.error(f"❌ Generation request failed: {e}")
            raise GenerationError(f"Generation request failed: {e}") from e
        return (data.get("message") or {}).get("content") or ""

    def generate_stream(self, system_prompt: str, messages: List[ChatMessage]) -> Iterator[str]:
        url = f"{self.host}/api/chat"
        payload = self._payload(system_prompt, messages, stream=True)
        try:
            with requests.post(url, json=payload, timeout=self.timeout, stream=True) as r:
                if r.status_code == 404:
                    raise GenerationError(f"404: model '{self.model}' not registered in Ollama.")
                r.raise_for_status()
                for line in r.iter_lines():
                    if not line:
                        continue
                    try:
                        obj = json.loads(line.decode("utf-8"))
                    except ValueError:
                        logger.debug(f"Skipping undecodable stream line: {line[:80]!r}")
                        continue
                    if obj.get("error"):
                        raise GenerationError(f"Ollama stream error: {obj['error']}")
                    chunk = (obj.get("message") or {}).get("content") or ""
                    if chunk:
                        yield chunk
                    if obj.get("done"):
                        break
        except requests.RequestException as e:
            logger.error(f"❌ Streaming request failed: {e}")
            raise GenerationError(f"Streaming request failed: {e}") from e
