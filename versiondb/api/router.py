from fastapi import APIRouter
from versiondb.api.endpoints import query, status

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(query.router)
api_router.include_router(status.router)
