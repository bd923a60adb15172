"""Reviews domain API package."""

from reviews.api.application import create_app
from reviews.api.errors import register_error_handlers
from reviews.api.routes import product_router, review_router

__all__ = ["create_app", "review_router", "product_router", "register_error_handlers"]
