"""
Dependency injection for FastAPI.
"""
from typing import Annotated, Optional
from fastapi import Depends

from farmledger.infrastructure.insight_client import (
    InsightClient,
    get_insight_client,
)
from farmledger.infrastructure.record_store import get_record_store
from farmledger.services.application.farm_service import FarmService


# Singleton instance; the farm state lives as long as the process
_farm_service: Optional[FarmService] = None


def get_farm_service() -> FarmService:
    """
    Dependency factory for FarmService.

    The service owns the in-memory farm state, so every request shares
    the same instance.

    Returns:
        FarmService instance
    """
    global _farm_service
    if _farm_service is None:
        _farm_service = FarmService(store=get_record_store())
    return _farm_service


# Type aliases for cleaner route signatures
FarmServiceDep = Annotated[FarmService, Depends(get_farm_service)]
InsightClientDep = Annotated[InsightClient, Depends(get_insight_client)]
