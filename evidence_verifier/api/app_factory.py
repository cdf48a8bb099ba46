from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from fastapi import FastAPI

from evidence_verifier.api.routes import create_documents_router
from evidence_verifier.intake.service import IntakeService
from evidence_verifier.review.service import ReviewService


def create_app(
    *,
    intake: IntakeService,
    review: ReviewService,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
) -> FastAPI:
    app = FastAPI(title="Evidence Verification API", lifespan=lifespan)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(create_documents_router(intake=intake, review=review))
    return app
