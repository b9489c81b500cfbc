"""
Route model.

A route is the ordered list of collections assigned to one driver for one
run. Progress and counts are derived on read, never stored here.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Route(BaseModel):
    """Route snapshot (collection ids in route order)."""
    id: str = Field(..., min_length=1)
    name: str
    driver_id: Optional[str] = None
    collection_ids: Tuple[str, ...] = ()

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @property
    def total_stops(self) -> int:
        return len(self.collection_ids)
