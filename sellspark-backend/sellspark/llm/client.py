from sellspark.llm.client_groq import GroqCompletionClient


def build_completion_client(settings):
    if settings.LLM_PROVIDER == "groq":
        return GroqCompletionClient(
            api_key=settings.GROQ_API_KEY,
            model=settings.GROQ_MODEL,
            timeout=settings.COMPLETION_TIMEOUT_SECONDS,
        )
    raise ValueError(f"Unsupported LLM_PROVIDER: {settings.LLM_PROVIDER}")
