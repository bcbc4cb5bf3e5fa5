"""
FastAPI Dependencies
Dependency injection for the revenue cycle service
Source: https://fastapi.tiangolo.com/tutorial/dependencies/
"""

from revcycle.services.revenue_cycle_service import (
    RevenueCycleService,
    get_revenue_cycle_service,
)


def get_service() -> RevenueCycleService:
    """
    Get the revenue cycle service for a request.

    Tests replace it through app.dependency_overrides.
    """
    return get_revenue_cycle_service()
