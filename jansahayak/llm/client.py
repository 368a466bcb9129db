"""
Generation and embedding collaborators.

The engine consumes two black-box functions: `generate(prompt) -> text` and
`embed(text) -> vector`. Google Gemini (google-genai) is the default remote
generator; it walks an ordered list of models and falls back to the next one
when a model fails.
"""

import logging
import os
import re
from typing import Optional, Protocol, Sequence

import numpy as np

from ..errors import DependencyError, TransientDependencyError

logger = logging.getLogger(__name__)

DEFAULT_MODELS = ["gemini-2.5-flash-lite", "gemma-3-27b-it", "gemma-3-12b-it"]
DEFAULT_EMBEDDING_MODEL = "text-embedding-004"

# HTTP status codes worth retrying on
_RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class Generator(Protocol):
    def generate(self, prompt: str) -> str: ...


class Embedder(Protocol):
    embedding_dim: int

    def embed(self, text: str) -> np.ndarray: ...


def is_transient(exc: Exception) -> bool:
    """Return True if the exception looks like a network / rate-limit failure."""
    if isinstance(exc, TransientDependencyError):
        return True
    code = getattr(exc, "code", None) or getattr(exc, "status_code", None)
    if isinstance(code, int):
        return code in _RETRYABLE_STATUS_CODES
    name = type(exc).__name__
    return any(marker in name for marker in ("Timeout", "Connection", "Connect", "RateLimit", "Network"))


def extract_json_block(text: str) -> str:
    """Strip markdown fences and surrounding chatter from a JSON answer."""
    text = (text or "").strip()
    if "```json" in text:
        text = text.split("```json")[-1].split("```")[0].strip()
    elif "```" in text:
        text = text.replace("```", "").strip()
    match = re.search(r"\{.*\}", text, re.DOTALL)
    return match.group(0) if match else text


class GeminiGenerator:
    """Text generation through google-genai with a model fallback list."""

    def __init__(self, api_key: Optional[str] = None, model_ids: Optional[Sequence[str]] = None):
        from google import genai

        api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise ValueError("API Key (GEMINI_API_KEY or GOOGLE_API_KEY) not found in environment variables.")
        self.client = genai.Client(api_key=api_key)

        env_models = os.getenv("LLM_MODELS")
        if model_ids:
            self.model_ids = list(model_ids)
        elif env_models:
            self.model_ids = [m.strip() for m in env_models.split(",") if m.strip()]
        else:
            self.model_ids = list(DEFAULT_MODELS)

    def generate(self, prompt: str) -> str:
        """Generate text, trying each configured model in order.

        Raises:
            TransientDependencyError: every model failed and at least one
                failure was transient (rate limit, 5xx, network).
            DependencyError: every model failed permanently.
        """
        last_exception: Optional[Exception] = None
        saw_transient = False
        for model_id in self.model_ids:
            try:
                response = self.client.models.generate_content(model=model_id, contents=prompt)
                text = (response.text or "").strip()
                if text:
                    return text
                logger.warning(f"Model {model_id} returned an empty response")
            except Exception as e:
                logger.warning(f"Model {model_id} failed: {e}")
                saw_transient = saw_transient or is_transient(e)
                last_exception = e

        if saw_transient:
            raise TransientDependencyError(f"Generation failed with all models: {last_exception}")
        raise DependencyError(f"Generation failed with all models: {last_exception}")


class GeminiEmbedder:
    """Embeddings through the Gemini embedding endpoint."""

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_EMBEDDING_MODEL,
                 embedding_dim: int = 768):
        from google import genai

        api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise ValueError("API Key (GEMINI_API_KEY or GOOGLE_API_KEY) not found in environment variables.")
        self.client = genai.Client(api_key=api_key)
        self.model = model
        self.embedding_dim = embedding_dim

    def embed(self, text: str) -> np.ndarray:
        try:
            result = self.client.models.embed_content(model=self.model, contents=text)
        except Exception as e:
            if is_transient(e):
                raise TransientDependencyError(f"Embedding failed: {e}") from e
            raise DependencyError(f"Embedding failed: {e}") from e
        return np.asarray(result.embeddings[0].values, dtype=np.float32)
