from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

class _CamelModel(BaseModel):
    """Python field names, camelCase on the wire."""
    model_config = ConfigDict(populate_by_name=True)

class AppendResult(_CamelModel):
    track_id: str = Field(alias="trackId")
    added_count: int = Field(alias="addedCount")
    current_length: int = Field(alias="currentLength")
    # True when the track id was generated for this call
    created: bool = Field(default=False, exclude=True)

class TrackSnapshot(_CamelModel):
    track_id: str = Field(alias="trackId")
    data: List[Any]
    length: int

class TrackListing(_CamelModel):
    total: int
    track_ids: List[str] = Field(alias="trackIds")

# --- Request bodies ---

class AppendRequest(_CamelModel):
    track_id: Optional[str] = Field(default=None, alias="trackId")
    data: Any = None

class ScalarSetRequest(_CamelModel):
    key: Optional[str] = None
    value: Any = None
    expires_in: Optional[int] = Field(default=None, alias="expiresIn")
