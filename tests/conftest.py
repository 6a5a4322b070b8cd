"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Record factories for plots, products, activities and harvests
- A one-plot dataset with one completed activity and one harvest
- Mock record store and insight client
- FarmService wired to the mock store
- FastAPI test client with the service overridden
"""
import pytest
from datetime import date
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from farmledger.main import app
from farmledger.api.dependencies import get_farm_service
from farmledger.domain.models import (
    Activity,
    ActivityItem,
    ActivityStatus,
    Harvest,
    Plot,
    Product,
    UnitType,
)
from farmledger.infrastructure.insight_client import InsightClient, get_insight_client
from farmledger.infrastructure.record_store import RecordStore
from farmledger.services.application.farm_service import FarmService


# ============================================================
# Record Factories
# ============================================================

@pytest.fixture
def make_plot():
    """Factory for plots."""
    def _make(id="P1", name="Plot 01 - Palmer", crop="Manga", area=5.0) -> Plot:
        return Plot(id=id, name=name, crop=crop, area=area)
    return _make


@pytest.fixture
def make_product():
    """Factory for products."""
    def _make(id="PR1", name="NPK 10-10-10", price_per_unit=180.0,
              unit=UnitType.SACK, category="Fertilizante", stock_quantity=None) -> Product:
        return Product(
            id=id, name=name, price_per_unit=price_per_unit, unit=unit,
            category=category, stock_quantity=stock_quantity,
        )
    return _make


@pytest.fixture
def make_activity():
    """Factory for activities; total_cost defaults to the labor cost."""
    def _make(id="A1", plot_id="P1", day=date(2024, 11, 5), type="Poda",
              status=ActivityStatus.COMPLETED, labor_cost=1500.0,
              total_cost=None, products_used=None) -> Activity:
        return Activity(
            id=id,
            plot_id=plot_id,
            date=day,
            type=type,
            status=status,
            labor_cost=labor_cost,
            products_used=products_used or [],
            total_cost=labor_cost if total_cost is None else total_cost,
        )
    return _make


@pytest.fixture
def make_harvest():
    """Factory for harvests; total_revenue is quantity times unit price."""
    def _make(id="H1", plot_id="P1", day=date(2024, 12, 1), classification="Exportação",
              quantity=2000.0, unit_price=4.5) -> Harvest:
        return Harvest(
            id=id,
            plot_id=plot_id,
            date=day,
            crop_type="Manga",
            classification=classification,
            quantity=quantity,
            unit=UnitType.KG,
            unit_price=unit_price,
            total_revenue=quantity * unit_price,
        )
    return _make


@pytest.fixture
def sample_farm(make_plot, make_activity, make_harvest):
    """Plot P1, completed activity A1 (labor 1500), harvest H1 (2000 x 4.50)."""
    return {
        "plots": [make_plot()],
        "activities": [make_activity()],
        "harvests": [make_harvest()],
    }


@pytest.fixture
def activity_item():
    """One product line: 15 units of PR1."""
    return ActivityItem(product_id="PR1", quantity=15)


# ============================================================
# Mock Collaborator Fixtures
# ============================================================

@pytest.fixture
def mock_store():
    """Create a mock record store with nothing saved yet."""
    store = AsyncMock(spec=RecordStore)
    store.load.return_value = None
    store.save.return_value = None
    return store


@pytest.fixture
def mock_insight_client():
    """Create a mock insight client."""
    client = AsyncMock(spec=InsightClient)
    client.generate_insights.return_value = "<p>Plot 01 is profitable.</p>"
    return client


@pytest.fixture
def farm_service(mock_store) -> FarmService:
    """FarmService over the mock store, with a fixed clock."""
    return FarmService(store=mock_store, today=lambda: date(2025, 1, 10))


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client(farm_service, mock_insight_client):
    """Create a synchronous test client wired to the test service."""
    app.dependency_overrides[get_farm_service] = lambda: farm_service
    app.dependency_overrides[get_insight_client] = lambda: mock_insight_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
