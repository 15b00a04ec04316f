from typing import Annotated

from fastapi import Depends, Request

from versiondb.core.mirror.bridge import CatalogService


# The service is built once in the lifespan and lives on app.state
def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


catalog_dep = Annotated[CatalogService, Depends(get_catalog)]
