import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sellspark.api import consultation, sse
from sellspark.config import settings as default_settings
from sellspark.db.database import create_db_engine, create_session_factory, init_db
from sellspark.llm.client import build_completion_client
from sellspark.services.consultation_service import ConsultationService
from sellspark.services.knowledge_service import KnowledgeService
from sellspark.utils.redis_pub import EventPublisher

logger = logging.getLogger(__name__)


def build_consultation_service(settings) -> ConsultationService:
    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)

    return ConsultationService(
        session_factory=create_session_factory(engine),
        completion_client=build_completion_client(settings),
        knowledge_service=KnowledgeService(
            endpoint=settings.RETRIEVAL_API_ENDPOINT,
            token=settings.RETRIEVAL_API_TOKEN,
            timeout=settings.RETRIEVAL_TIMEOUT_SECONDS,
            top_k=settings.RETRIEVAL_TOP_K,
        ),
        settings=settings,
        publisher=EventPublisher.from_url(settings.REDIS_PUBSUB_URL),
    )


def create_app(service: ConsultationService = None, settings=None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "consultation_service", None) is None:
            app.state.consultation_service = build_consultation_service(settings)
            logger.info("Consultation engine ready")
        yield

    app = FastAPI(
        title="SellSpark Consultation Backend",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.consultation_service = service

    # Routers
    app.include_router(consultation.router)
    app.include_router(sse.router, prefix="/stream", tags=["SSE"])

    @app.get("/")
    def health():
        return {"status": "ok", "service": "sellspark-backend"}

    return app
