from __future__ import annotations
from dotenv import load_dotenv

load_dotenv()

import logging, os
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .database import execute_grid_query
from .errors import ConfigurationMissing, InvalidInput
from .filters import GridQueryOptions, options_from_query_params, parse_grid_options_json
from .query import build_grid_query
from .registry import GLOBAL_MAX_PAGE_SIZE, Registry
from .validation import cap_page_size

log = logging.getLogger("gridsql.api")

app = FastAPI(title="gridsql Grid Data Service", version="1.0.0")

origins_raw = os.getenv("CORS_ALLOW_ORIGINS", "")
origins = [o.strip() for o in origins_raw.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

REG = Registry()


class GridSqlOut(BaseModel):
    sql: str
    params: Dict[str, Any]
    countSql: Optional[str] = None
    pageSizeApplied: Optional[int] = None


class GridDataOut(BaseModel):
    totalRecords: int
    rows: List[Dict[str, Any]]


@app.on_event("startup")
def _startup():
    try:
        REG.load_grids()
    except ConfigurationMissing as e:
        # grids are loaded lazily on first request; /healthz reports the problem
        log.warning("Grid configuration not loaded at startup: %s", e)


def _prepare(grid: str, options: GridQueryOptions, *, include_count: bool):
    entry = REG.ensure_grid(grid)
    options.page_size = cap_page_size(grid, options.page_size, entry)
    build = build_grid_query(
        entry.query,
        options,
        entry.catalog,
        entry.default_sort_field,
        include_count=include_count,
    )
    return entry, options, build


def _run(grid: str, options: GridQueryOptions) -> GridDataOut:
    try:
        _, _, build = _prepare(grid, options, include_count=True)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationMissing as e:
        log.exception("Grid %s is not configured", grid)
        raise HTTPException(status_code=500, detail=str(e))

    role = os.getenv("SNOWFLAKE_DEFAULT_ROLE")
    cols, rows = execute_grid_query(build.sql, build.params, role=role)
    _, count_rows = execute_grid_query(build.count_sql, build.params, role=role)
    total = int(count_rows[0][0]) if count_rows else 0
    return GridDataOut(
        totalRecords=total,
        rows=[dict(zip(cols, r)) for r in rows],
    )


@app.get("/healthz")
def health():
    try:
        if not REG.grids:
            REG.load_grids()
        return {"ok": True, "grids": list(REG.grids.keys())}
    except ConfigurationMissing as e:
        return {"ok": False, "grids": [], "error": str(e)}


@app.get("/grids")
def list_grids():
    """List configured grids with the client fields each one accepts."""
    if not REG.grids:
        try:
            REG.load_grids()
        except ConfigurationMissing as e:
            raise HTTPException(status_code=500, detail=str(e))
    return {
        "grids": [
            {
                "grid": name,
                "fields": list(entry.catalog.keys()),
                "columns": entry.catalog.to_dict(),
                "defaultSortField": entry.default_sort_field,
                "maxPageSize": entry.max_page_size,
                "loadedAt": entry.loaded_at,
            }
            for name, entry in REG.grids.items()
        ]
    }


@app.post("/grids/{grid}/sql", response_model=GridSqlOut)
def build_query(
    grid: str,
    payload: dict = Body(..., description="jqxGrid options JSON"),
    include_count: bool = False,
):
    """Return the SQL and params a data request would run, without running it."""
    try:
        options = parse_grid_options_json(payload, validate=True)
        _, options, build = _prepare(grid, options, include_count=include_count)
        return GridSqlOut(
            sql=build.sql,
            params=build.params,
            countSql=build.count_sql,
            pageSizeApplied=options.page_size,
        )
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationMissing as e:
        log.exception("Grid %s is not configured", grid)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/grids/{grid}/data", response_model=GridDataOut)
def grid_data(
    grid: str,
    payload: dict = Body(..., description="jqxGrid options JSON"),
):
    try:
        options = parse_grid_options_json(payload, validate=True)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _run(grid, options)


@app.get("/grids/{grid}/data", response_model=GridDataOut)
def grid_data_get(grid: str, request: Request):
    """jqxGrid in server-side mode sends its state as a flat query string."""
    try:
        options = options_from_query_params(request.query_params)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _run(grid, options)


@app.post("/reload")
def reload_registry():
    try:
        summary = REG.refresh_all()
        return {"reloaded": summary, "maxPageSize": GLOBAL_MAX_PAGE_SIZE}
    except ConfigurationMissing as e:
        raise HTTPException(status_code=500, detail=str(e))
