"""
cdrquery/api.py
─────────────────────────────────────────────────────────────────────────────
CDR Query: HTTP API layer

TWO USAGE MODES:
  1. Importable:
         from cdrquery.api import build_app
         app = build_app(RecordStore.load(Path("./data")))

  2. Server:
         python -m cdrquery.api --dir ./data            # default: port 8765
         uvicorn cdrquery.api:create_app --factory      # dir from config/env

ENDPOINTS:
  GET /health                                  store size and source dir
  GET /cdrs/{reference}                        single CDR, 404 if absent
  GET /calls/summary?start=&end=               count + total duration
  GET /callers/{caller_id}/cdrs?start=&end=    caller's CDRs in window
  GET /callers/{caller_id}/most-expensive?start=&end=&count=

Dates are ISO (YYYY-MM-DD) query parameters; both bounds are inclusive.
The store is loaded once when the app is built. A missing source
directory aborts startup.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from cdrquery.config import load_config, resolve_source_dir
from cdrquery.query import CDRQueryEngine
from cdrquery.report import cdr_to_dict, cdrs_to_dict, summary_to_dict
from cdrquery.store import RecordStore

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# ── RESPONSE MODELS ─────────────────────────────────────────────────────────

class CDRResponse(BaseModel):
    caller_id:   str
    recipient:   str
    call_date:   str
    end_time:    str
    duration:    float
    cost:        str
    reference:   str
    currency:    str
    type:        str
    faults:      List[str] = []
    source_file: str = ""
    line_number: int = 0


class CDRListResponse(BaseModel):
    count: int
    cdrs:  List[CDRResponse]


class CallSummaryResponse(BaseModel):
    count:          int
    total_duration: float


# ═══════════════════════════════════════════════════════════════════════════
# APP FACTORY
# ═══════════════════════════════════════════════════════════════════════════

def build_app(store: RecordStore) -> FastAPI:
    """Build the FastAPI application over an already-loaded store."""
    engine = CDRQueryEngine(store)

    _app = FastAPI(
        title       = "CDR Query API",
        description = "Read-only queries over call detail records loaded from CSV files",
        version     = API_VERSION,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":     "ok",
            "records":    len(store),
            "source_dir": str(store.source_dir) if store.source_dir else None,
            "version":    API_VERSION,
        }

    @_app.get("/cdrs/{reference}", response_model=CDRResponse, summary="CDR by reference")
    def get_by_reference(reference: str):
        """First CDR with this reference in load order. 404 if none."""
        record = engine.get_by_reference(reference)
        if record is None:
            raise HTTPException(status_code=404, detail=f"CDR not found: {reference}")
        return cdr_to_dict(record)

    @_app.get("/calls/summary", response_model=CallSummaryResponse,
              summary="Call count and total duration")
    def get_call_count_and_total_duration(
        start: date = Query(..., description="First call date, inclusive"),
        end:   date = Query(..., description="Last call date, inclusive"),
    ):
        return summary_to_dict(engine.get_call_count_and_total_duration(start, end))

    @_app.get("/callers/{caller_id}/cdrs", response_model=CDRListResponse,
              summary="CDRs for a caller")
    def get_cdrs_by_caller_id(
        caller_id: str,
        start:     date = Query(...),
        end:       date = Query(...),
    ):
        return cdrs_to_dict(engine.get_cdrs_by_caller_id(caller_id, start, end))

    @_app.get("/callers/{caller_id}/most-expensive", response_model=CDRListResponse,
              summary="Most expensive calls for a caller")
    def get_most_expensive_calls(
        caller_id: str,
        start:     date = Query(...),
        end:       date = Query(...),
        count:     int  = Query(5, description="Maximum number of calls returned"),
    ):
        """Sorted by cost descending; equal costs keep load order."""
        return cdrs_to_dict(engine.get_most_expensive_calls(caller_id, start, end, count))

    return _app


def create_app(source_dir: Optional[Path] = None) -> FastAPI:
    """Load the store from `source_dir` (or config/env) and build the app."""
    directory = resolve_source_dir(source_dir, load_config())
    store = RecordStore.load(directory)
    logger.info(f"Serving {len(store)} CDRs from {directory}")
    return build_app(store)


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT: python -m cdrquery.api
# ═══════════════════════════════════════════════════════════════════════════

def main(argv=None):
    import argparse
    import sys

    import uvicorn

    config = load_config()

    parser = argparse.ArgumentParser(
        prog        = "cdrquery.api",
        description = "CDR Query API server",
    )
    parser.add_argument("--dir",  type=Path, default=None,
                        help="Directory containing *.csv CDR files (default: config/CDR_SOURCE_DIR)")
    parser.add_argument("--host", type=str, default=config["host"],
                        help=f"Host to bind (default: {config['host']})")
    parser.add_argument("--port", type=int, default=config["port"],
                        help=f"Port to bind (default: {config['port']})")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level   = getattr(logging, str(config["log_level"]).upper(), logging.INFO),
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    try:
        server_app = create_app(args.dir)
    except (ValueError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    uvicorn.run(
        server_app,
        host      = args.host,
        port      = args.port,
        log_level = "info",
    )


if __name__ == "__main__":
    main()
