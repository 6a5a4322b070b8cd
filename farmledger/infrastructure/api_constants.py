"""
Outbound endpoint constants and configuration.

This module contains the external endpoint paths used by the remote
row-store and the insight generator, plus the local storage slot names.
"""


class RowStoreEndpoints:
    """PostgREST-style row-store endpoint paths."""

    REST_BASE = "/rest/v1"
    TABLE = f"{REST_BASE}/{{table}}"

    @classmethod
    def table(cls, table: str) -> str:
        """
        Get the endpoint for a table.

        Args:
            table: Table name

        Returns:
            Formatted endpoint path
        """
        return cls.TABLE.format(table=table)


class InsightEndpoints:
    """Text-generation API endpoint paths."""

    GENERATE_CONTENT = "/v1beta/models/{model}:generateContent"

    @classmethod
    def generate_content(cls, model: str) -> str:
        """Endpoint path for a model's generateContent call."""
        return cls.GENERATE_CONTENT.format(model=model)


class LocalStoreSlots:
    """File names of the local store, one per snapshot key."""

    PLOTS = "plots.json"
    PRODUCTS = "products.json"
    ACTIVITIES = "activities.json"
    HARVESTS = "harvests.json"
    ACTIVITY_TYPES = "activity_types.json"
    CATEGORIES = "categories.json"

    # snapshot key (wire name) -> file name
    BY_KEY = {
        "plots": PLOTS,
        "products": PRODUCTS,
        "activities": ACTIVITIES,
        "harvests": HARVESTS,
        "activityTypes": ACTIVITY_TYPES,
        "categories": CATEGORIES,
    }


class APIConstants:
    """General outbound configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"
    PREFER_UPSERT = "resolution=merge-duplicates,return=minimal"
