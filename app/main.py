import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import Settings, load_settings
from app.routers import classification
from app.services.document_service import DocumentService, build_document_service
from app.utils.errors import DocumentClassificationError

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, service: DocumentService | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "document_service", None) is None:
            resolved = settings or load_settings()
            logging.basicConfig(
                level=resolved.log_level,
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )
            app.state.document_service = build_document_service(resolved)
            logger.info("Document classification service ready (model=%s)", resolved.classification_model)
        yield

    app = FastAPI(title="Document Classification & Routing API", lifespan=lifespan)
    app.state.document_service = service
    app.include_router(classification.router)

    @app.exception_handler(DocumentClassificationError)
    async def classification_error_handler(request: Request, exc: DocumentClassificationError):
        if exc.status_code >= 500:
            logger.error("%s failed at %s stage: %s", request.url.path, exc.stage, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message, "error": exc.kind},
        )

    @app.get("/")
    def index():
        return {
            "success": True,
            "message": "Document Classification & Routing API",
            "version": "1.0.0",
            "endpoints": {
                "upload": "POST /api/documents/upload",
                "classifyText": "POST /api/documents/classify-text",
                "supportedTypes": "GET /api/documents/supported-types",
                "health": "GET /api/documents/health",
            },
        }

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
