"""
Audit log entry model.

Records who changed which collection and how, for the admin activity view.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AuditEntry(BaseModel):
    """Audit entry."""
    action: str
    timestamp: datetime
    actor_id: Optional[str] = None
    route_id: Optional[str] = None
    collection_id: Optional[str] = None
    meta_data: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        frozen = True

    def __repr__(self):
        return f"<AuditEntry(action='{self.action}', collection_id={self.collection_id})>"
