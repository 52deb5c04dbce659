# sellspark/services/knowledge_service.py

import logging
from typing import List, Optional

import requests

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class KnowledgeService:
    """
    Client for the knowledge retrieval service.

    POSTs {"query", "top_k"} to the configured endpoint and expects
    {"matches": [{"text": ...}, ...]}. Retrieval only grounds prompts,
    so every failure degrades to an empty snippet list.
    """

    def __init__(
        self,
        endpoint: Optional[str],
        token: Optional[str] = None,
        timeout: float = 10.0,
        top_k: int = 3,
        http=None,
    ):
        self.endpoint = endpoint
        self.token = token
        self.timeout = timeout
        self.top_k = top_k
        self.http = http or requests.Session()

    def search(self, query: str, limit: Optional[int] = None) -> List[str]:
        if not self.endpoint:
            logger.debug("Retrieval endpoint not configured; skipping query=%s", query)
            return []

        limit = min(limit or self.top_k, self.top_k)
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            resp = self.http.post(
                self.endpoint,
                json={"query": query, "top_k": limit},
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError):
            logger.exception("Knowledge retrieval failed for query=%s", query)
            return []

        matches = data.get("matches") if isinstance(data, dict) else None
        if not isinstance(matches, list):
            logger.warning("Unexpected retrieval payload for query=%s", query)
            return []

        snippets = []
        for match in matches:
            text = match.get("text") if isinstance(match, dict) else None
            if isinstance(text, str) and text.strip():
                snippets.append(text.strip())

        logger.debug("Retrieved %d snippets for query=%s", len(snippets), query)
        return snippets[:limit]
