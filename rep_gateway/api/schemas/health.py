"""
Health and privacy response models
"""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """
    Health check response

    Attributes:
        status: Service health status
        build_sha: Build identifier of the running process
        pack_checksums: sha256 of every loaded content pack, keyed by pack id
        timestamp: Server time of the check
    """
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="Health status")
    build_sha: str = Field(..., alias="buildSha")
    pack_checksums: Dict[str, str] = Field(default_factory=dict, alias="packChecksums")
    timestamp: datetime


class PrivacyResponse(BaseModel):
    """Privacy notice payload"""
    model_config = ConfigDict(populate_by_name=True)

    title: str
    content: str
    last_updated: str = Field(..., alias="lastUpdated")
