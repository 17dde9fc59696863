"""Recurring session generation schemas."""
from typing import Dict
from pydantic import BaseModel, Field


class MaterializationReport(BaseModel):
    """Outcome of one scheduled generation run across all templates."""
    templates: int = 0
    created: int = 0
    failed: int = 0
    failures: Dict[int, str] = Field(default_factory=dict)  # template id -> error
