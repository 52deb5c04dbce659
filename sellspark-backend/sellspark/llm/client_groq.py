import logging
from typing import List, Dict, Optional

from groq import Groq, GroqError

from sellspark.utils.errors import CompletionError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

DEFAULT_MODEL = "llama-3.1-8b-instant"


class GroqCompletionClient:
    """
    Text completion service backed by Groq chat completions.

    Constructed once at startup and passed into every component that
    needs completions. Any failure (missing key, timeout, 5xx, empty
    body) is raised as CompletionError.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout: float = 15.0,
        max_tokens: int = 768,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self._client = None

        if api_key:
            # Retries are not ours to own; callers fall back instead
            self._client = Groq(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            logger.warning("GROQ_API_KEY not set; completions will use fallbacks")

    def generate_chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.2,
        json_mode: bool = True,
    ) -> str:
        """
        Multi-turn chat completion.

        messages format:
        [
          {"role": "system", "content": "..."},
          {"role": "user", "content": "..."},
          ...
        ]
        """
        if self._client is None:
            raise CompletionError("Completion service is not configured")

        kwargs = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": self.max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(**kwargs)
        except GroqError as e:
            raise CompletionError(f"Groq request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise CompletionError("Groq returned an empty response")

        return content.strip()
