from uuid import uuid4

import jwt
import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from marketplace.api import register_error_handlers, routers
from marketplace.config import get_settings
from marketplace.domain import marketplace


@pytest.fixture()
def client():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with marketplace.domain_context():
            return await call_next(request)

    for router in routers:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def headers_for():
    """Factory: Authorization headers carrying a signed token for ``user_id``."""
    settings = get_settings()

    def _headers(user_id, role="user"):
        token = jwt.encode(
            {"user": {"id": str(user_id), "role": role}},
            settings.access_token_secret,
            algorithm=settings.access_token_algorithm,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def admin_headers(headers_for):
    return headers_for(uuid4(), "admin")


@pytest.fixture()
def buyer_headers(headers_for, buyer_id):
    return headers_for(buyer_id)


@pytest.fixture()
def seller_headers(headers_for, seller_id):
    return headers_for(seller_id)
