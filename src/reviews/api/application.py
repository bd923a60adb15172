"""FastAPI application factory for the Reviews service."""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.domain import Domain

from reviews.api.errors import register_error_handlers
from reviews.api.routes import product_router, review_router
from reviews.identity import HeaderIdentityProvider, IdentityProvider
from reviews.notification import build_notifier
from reviews.utils.logging import bind_request_context, clear_request_context
from reviews.workflow import ModerationWorkflow


def create_app(
    domain: Domain,
    workflow: ModerationWorkflow | None = None,
    identity_provider: IdentityProvider | None = None,
) -> FastAPI:
    """Build the API around an initialized ``domain``."""
    app = FastAPI(
        title="Storefront Reviews API",
        description="Product reviews, moderation and rating aggregation",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the reviews domain context for each request."""
        bind_request_context(
            request_id=request.headers.get("x-request-id") or uuid4().hex,
            path=request.url.path,
        )
        try:
            with domain.domain_context():
                return await call_next(request)
        finally:
            clear_request_context()

    if workflow is None:
        with domain.domain_context():
            workflow = ModerationWorkflow.from_settings(build_notifier(domain), domain)
    app.state.workflow = workflow
    app.state.identity_provider = identity_provider or HeaderIdentityProvider()

    app.include_router(review_router)
    app.include_router(product_router)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": {"name": domain.name}})

    return app
