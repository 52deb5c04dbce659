import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value in (None, ""):
        return default
    return int(value)


def _optional_int_env(name: str):
    value = os.getenv(name)
    if value in (None, ""):
        return None
    return int(value)


class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sellspark.db")
    REDIS_PUBSUB_URL = os.getenv("REDIS_PUBSUB_URL", "redis://localhost:6379/1")

    # Text completion service
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "groq")
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")
    GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
    COMPLETION_TIMEOUT_SECONDS = _int_env("COMPLETION_TIMEOUT_SECONDS", 15)

    # Knowledge retrieval service
    RETRIEVAL_API_ENDPOINT = os.getenv("RETRIEVAL_API_ENDPOINT")
    RETRIEVAL_API_TOKEN = os.getenv("RETRIEVAL_API_TOKEN")
    RETRIEVAL_TIMEOUT_SECONDS = _int_env("RETRIEVAL_TIMEOUT_SECONDS", 10)
    RETRIEVAL_TOP_K = _int_env("RETRIEVAL_TOP_K", 3)

    # ROI simulation
    SIMULATION_TRIALS = _int_env("SIMULATION_TRIALS", 1000)
    SIMULATION_SEED = _optional_int_env("SIMULATION_SEED")
    SIMULATION_WORKERS = _int_env("SIMULATION_WORKERS", 4)

    # Consultation thresholds
    COMPLETION_STEP_THRESHOLD = _int_env("COMPLETION_STEP_THRESHOLD", 6)
    CATEGORY_COMPLETION_THRESHOLD = _int_env("CATEGORY_COMPLETION_THRESHOLD", 9)
    PERSONA_THRESHOLD = _int_env("PERSONA_THRESHOLD", 7)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
