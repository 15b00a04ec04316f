from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter


# SQLite INTEGER is signed 64-bit
MAX_SQLITE_INT = 2**63 - 1


# =========================
# UPSTREAM CATALOG
# =========================
class VersionEntry(BaseModel):
    id: int = Field(ge=0, le=MAX_SQLITE_INT)
    # Upstream sends this under either name
    version_type_id: int = Field(
        ge=0,
        le=MAX_SQLITE_INT,
        validation_alias=AliasChoices("gameVersionTypeID", "game_version_type_id"),
    )
    name: str
    slug: str

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class VersionTypeEntry(BaseModel):
    id: int = Field(ge=0, le=MAX_SQLITE_INT)
    name: str
    slug: str

    model_config = ConfigDict(extra="ignore")


VersionList = TypeAdapter(List[VersionEntry])
VersionTypeList = TypeAdapter(List[VersionTypeEntry])


# =========================
# STATUS
# =========================
class RefreshStatus(BaseModel):
    last_refresh: Optional[str] = None
    age_seconds: Optional[float] = None
    ttl_seconds: float
    stale: bool


class MirrorStatusResponse(BaseModel):
    refresh: RefreshStatus
    tables: Dict[str, int] = {}

