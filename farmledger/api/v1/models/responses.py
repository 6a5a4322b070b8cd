"""
API response models using Pydantic.
"""
from typing import List
from pydantic import BaseModel, Field


class CatalogResponse(BaseModel):
    """Configured option list (activity types or categories)."""
    items: List[str] = Field(
        description="Options in the order they were added"
    )


class ClassificationOptionsResponse(BaseModel):
    """Suggested harvest classifications for a plot."""
    plot_id: str = Field(
        description="Plot the suggestions were computed for"
    )
    options: List[str] = Field(
        description="Suggested labels; empty when the plot is unknown"
    )


class InsightsResponse(BaseModel):
    """Response model for the insights endpoint."""
    html: str = Field(
        description="HTML-formatted analysis of the farm's finances"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "html": "<p><strong>Plot 01</strong> is the most profitable plot.</p>",
            }
        }
