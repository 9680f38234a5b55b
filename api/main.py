from __future__ import annotations

import logging
from typing import List

from fastapi import Depends, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import FilterOptionsResponse, IssueFiltersModel, IssuesResponse, StatusResponse, SummaryResponse
from tracker.config import configure_logging, get_config
from tracker.export import EXPORT_MEDIA_TYPE, export_filename, to_csv
from tracker.filters import IssueFilters, apply_filters, normalize_filters
from tracker.metrics_charts import compute_charts, table_rows
from tracker.metrics_summary import summarize
from tracker.models import EmptyExportError, Issue
from tracker.state import DashboardController


config = get_config()
configure_logging(config.dashboard.log_level)

app = FastAPI(title="Issue Tracker Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.dashboard.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_controller = DashboardController(config.source, config.dashboard)


def get_controller() -> DashboardController:
    if _controller.needs_refresh():
        _controller.refresh()
    return _controller


def _filters_from_model(model: IssueFiltersModel) -> IssueFilters:
    return normalize_filters(model.model_dump())


def _filtered(controller: DashboardController, filters: IssueFilters) -> List[Issue]:
    return apply_filters(controller.state.issues, filters)


def _json(data: object) -> JSONResponse:
    return JSONResponse(content=jsonable_encoder(data))


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/options", response_model=FilterOptionsResponse)
def meta_options(controller: DashboardController = Depends(get_controller)):
    try:
        return _json(controller.filter_options())
    except Exception as exc:
        logger.exception("meta_options failed")
        return _error(exc)


@app.get("/meta/status", response_model=StatusResponse)
def meta_status(controller: DashboardController = Depends(get_controller)):
    try:
        return _json(controller.status())
    except Exception as exc:
        logger.exception("meta_status failed")
        return _error(exc)


@app.post("/refresh", response_model=StatusResponse)
def refresh(controller: DashboardController = Depends(get_controller)):
    try:
        controller.refresh()
        return _json(controller.status())
    except Exception as exc:
        logger.exception("refresh failed")
        return _error(exc)


@app.post("/summary", response_model=SummaryResponse)
def summary(filters: IssueFiltersModel, controller: DashboardController = Depends(get_controller)):
    try:
        f = _filters_from_model(filters)
        return _json(summarize(_filtered(controller, f)))
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.post("/issues", response_model=IssuesResponse)
def issues(filters: IssueFiltersModel, controller: DashboardController = Depends(get_controller)):
    try:
        f = _filters_from_model(filters)
        filtered = _filtered(controller, f)
        return _json({"rows": table_rows(filtered), "showing": len(filtered), "total": len(controller.state.issues)})
    except Exception as exc:
        logger.exception("issues failed")
        return _error(exc)


@app.post("/charts")
def charts(filters: IssueFiltersModel, controller: DashboardController = Depends(get_controller)):
    try:
        f = _filters_from_model(filters)
        return _json(compute_charts(f, _filtered(controller, f)))
    except Exception as exc:
        logger.exception("charts failed")
        return _error(exc)


@app.get("/unresolved")
def unresolved(controller: DashboardController = Depends(get_controller)):
    try:
        return _json(controller.unresolved())
    except Exception as exc:
        logger.exception("unresolved failed")
        return _error(exc)


@app.post("/export")
def export(filters: IssueFiltersModel, controller: DashboardController = Depends(get_controller)):
    f = _filters_from_model(filters)
    try:
        csv_text = to_csv(_filtered(controller, f))
    except EmptyExportError as exc:
        return _error(exc, status_code=400)
    filename = export_filename()
    return Response(
        content=csv_text.encode("utf-8"),
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
