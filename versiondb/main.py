import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import FileResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from versiondb.api.router import api_router
from versiondb.core.config import settings
from versiondb.core.exceptions import InternalError, QueryError
from versiondb.core.mirror.bridge import CatalogService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(settings.STATIC_DIR)


# Build the catalog service before serving and close it once everything is done
@asynccontextmanager
async def lifespan(app: FastAPI):
    catalog = CatalogService.from_settings(settings)
    try:
        # First refresh ignores the TTL so the mirror is never empty when serving
        await catalog.start()
    except Exception:
        await catalog.close()
        raise

    app.state.catalog = catalog
    yield
    await catalog.close()


app = FastAPI(title="Game Version Mirror API", lifespan=lifespan)

# Include the master router containing all our endpoints
app.include_router(api_router)
app.mount("/static", StaticFiles(directory=STATIC_DIR, check_dir=False), name="static")


# Caller sent bad SQL
@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError):
    return PlainTextResponse(str(exc), status_code=400)


# Upstream or store failure, not the caller's fault
@app.exception_handler(InternalError)
async def internal_error_handler(request: Request, exc: InternalError):
    return PlainTextResponse(str(exc), status_code=500)


# Unmatched paths, inside /static or not, get the custom 404 page
@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)

    page = STATIC_DIR / "404.html"
    if page.is_file():
        return FileResponse(page, status_code=404, media_type="text/html")
    return PlainTextResponse("Not Found", status_code=404)


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse("/static/index.html")


def run():
    logger.info(f"Running on: http://{settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
