from typing import Any, Dict, List

from fastapi import APIRouter, Request

from versiondb.api.deps import catalog_dep
from versiondb.core.exceptions import QuerySyntaxError

router = APIRouter(tags=["Query"])


async def read_sql(request: Request) -> str:
    body = await request.body()
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        raise QuerySyntaxError("Request body is not valid UTF-8")


# Run caller SQL against the mirror, the body is the raw SQL text
@router.post("/query.json", response_model=List[Dict[str, Any]])
@router.post("/query", response_model=List[Dict[str, Any]])
async def run_query(request: Request, catalog: catalog_dep):
    """
    Execute a read-only query against the mirrored catalog.

    Bad SQL is answered with 400, a failed refresh with 500. Both bodies are
    the plain error message.
    """
    sql = await read_sql(request)
    return await catalog.run_query(sql)
