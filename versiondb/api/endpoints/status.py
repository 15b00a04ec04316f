from fastapi import APIRouter

from versiondb.api.deps import catalog_dep
from versiondb.core import schemas

router = APIRouter(tags=["Status"])


@router.get("/status", response_model=schemas.MirrorStatusResponse)
async def get_status(catalog: catalog_dep):
    """Refresh age and row counts. Never triggers a refresh."""
    return await catalog.status()
