import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api import (
    cart_router,
    category_router,
    order_router,
    product_router,
    register_error_handlers,
    review_router,
)
from storefront.identity.tokens import Role, issue_token


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(product_router)
    app.include_router(category_router)
    app.include_router(review_router)
    register_error_handlers(app)
    return TestClient(app)


def auth_headers(user_id, role=Role.CUSTOMER):
    return {"Authorization": f"Bearer {issue_token(user_id, role)}"}


@pytest.fixture()
def customer_headers():
    return auth_headers("cust-api-001")


@pytest.fixture()
def other_customer_headers():
    return auth_headers("cust-api-002")


@pytest.fixture()
def admin_headers():
    return auth_headers("admin-001", Role.ADMIN)
