"""
Root conftest.py - Sets environment variables before any module imports.

This file is loaded by pytest before any test modules, ensuring environment
variables are set before the settings module is imported.

Test Modes:
1. Unit Tests (default) - In-memory node store, no files touched
2. API Tests - Full FastAPI stack over httpx ASGITransport

To run only the fast unit tests:
    pytest -m "not integration"
"""

import os

# Set environment variables BEFORE any imports that might load settings
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("NODE_STORE_BACKEND", "memory")

import pytest
from httpx import AsyncClient, ASGITransport

from orgchart.app.models.hierarchy_models import CreateNodeRequest, OrgMember
from orgchart.core.services.hierarchy_crud import OrgChartService, get_org_chart_service
from orgchart.core.store import InMemoryMemberDirectory, InMemoryNodeStore


TEST_ORG = "acme_inc"
OTHER_ORG = "globex_corp"


# ============================================
# Service Fixtures
# ============================================

@pytest.fixture
def node_store():
    """Fresh in-memory node store per test."""
    return InMemoryNodeStore()


@pytest.fixture
def member_directory():
    """Member directory with a handful of members for TEST_ORG."""
    directory = InMemoryMemberDirectory()
    directory.register(TEST_ORG, [
        OrgMember(id="m-1", full_name="Alice Finley", role="Analyst", department="Finance",
                  email="alice@acme.test"),
        OrgMember(id="m-2", full_name="Bob Stone", role="Engineer", department="Technology",
                  email="bob@acme.test"),
        OrgMember(id="m-3", full_name="Carla Reyes", role="Finance Manager", department="Finance"),
        OrgMember(id="m-4", full_name="Dan Wu", role="Designer", department="Product"),
    ])
    return directory


@pytest.fixture
def service(node_store, member_directory):
    """OrgChartService wired to the per-test store and directory."""
    return OrgChartService(store=node_store, member_directory=member_directory)


@pytest.fixture
def make_node(service):
    """
    Factory creating nodes through the service.

    Usage:
        ceo = await make_node("Ceo")
        cto = await make_node("Cto", parent=ceo)
    """
    async def _make(name, parent=None, role="Employee", department=None, org_id=TEST_ORG, **kwargs):
        request = CreateNodeRequest(
            name=name,
            role=role,
            department=department,
            parent_id=parent.id if parent is not None else None,
            **kwargs
        )
        return await service.create_node(org_id, request)
    return _make


# ============================================
# FastAPI Test Client
# ============================================

@pytest.fixture
def admin_headers():
    return {"X-User-Id": "user-admin", "X-Org-Id": TEST_ORG, "X-User-Role": "Admin"}


@pytest.fixture
def member_headers():
    return {"X-User-Id": "user-member", "X-Org-Id": TEST_ORG, "X-User-Role": "Member"}


@pytest.fixture
async def async_client(service):
    """
    Async HTTP client for testing FastAPI endpoints.

    The service dependency is overridden so every request hits the per-test store.
    """
    from orgchart.app.main import app

    app.dependency_overrides[get_org_chart_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
