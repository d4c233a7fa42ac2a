"""FastAPI application entrypoint for spmsift service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..models import severity_from_code
from ..orchestrator import Orchestrator, ValidationOptions
from ..routing import DEFAULT_PLAN

T = TypeVar("T")


class ValidateRequest(BaseModel):
    path: str
    deep: bool = False
    check_resolved: bool = False
    flag_branch_deps: bool = False
    macro_diagnostics: bool = False
    tca_patterns: bool = False


class ValidateResponse(BaseModel):
    package_path: str
    checks: List[str]
    diagnostics: List[Dict[str, Any]]
    has_errors: bool


class PatternsRequest(BaseModel):
    path: str
    severity: str = "warning"


class RouteRequest(BaseModel):
    task: str
    case_studies_dir: Optional[str] = None


class RouteResponse(BaseModel):
    task: str
    category: Optional[str] = None
    description: Optional[str] = None
    primary_doc: str
    sections: Optional[str] = None
    time_budget: Optional[str] = None
    fallback_doc: Optional[str] = None
    match_score: int = 0
    case_study: Optional[str] = None
    guidance: List[str] = []


class ParseRequest(BaseModel):
    output: str
    target: Optional[str] = None
    include_raw: bool = False


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


async def _run_blocking(func: Callable[[], T]) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing spmsift operations."""

    app = FastAPI(title="spmsift Service", version=__version__)

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/validate", response_model=ValidateResponse)
    async def validate(
        payload: ValidateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ValidateResponse:
        options = ValidationOptions(
            deep=payload.deep,
            check_resolved=payload.check_resolved,
            flag_branch_deps=payload.flag_branch_deps,
            macro_diagnostics=payload.macro_diagnostics,
            tca_patterns=payload.tca_patterns,
        )
        result = await _run_blocking(lambda: orchestrator.run_validate(payload.path, options))
        data = result.to_dict()
        return ValidateResponse(
            package_path=data["package_path"],
            checks=data["checks"],
            diagnostics=data["diagnostics"],
            has_errors=result.has_errors,
        )

    @app.post("/tca-patterns")
    async def tca_patterns(
        payload: PatternsRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        min_severity = severity_from_code(payload.severity)
        scan = await _run_blocking(
            lambda: orchestrator.run_patterns(payload.path, min_severity=min_severity)
        )
        return scan.to_dict()

    @app.post("/route", response_model=RouteResponse)
    async def route(
        payload: RouteRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> RouteResponse:
        directory = Path(payload.case_studies_dir) if payload.case_studies_dir else None
        decision = await _run_blocking(
            lambda: orchestrator.run_route(payload.task, case_study_dir=directory)
        )
        if decision.route is None:
            return RouteResponse(task=decision.task, primary_doc=DEFAULT_PLAN)
        chosen = decision.route
        return RouteResponse(
            task=decision.task,
            category=chosen.category,
            description=chosen.description,
            primary_doc=chosen.primary_doc,
            sections=chosen.sections,
            time_budget=chosen.time_budget,
            fallback_doc=chosen.fallback_doc,
            match_score=chosen.match_score,
            case_study=decision.case_study,
            guidance=list(decision.guidance),
        )

    @app.post("/parse")
    async def parse(
        payload: ParseRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        result = await _run_blocking(
            lambda: orchestrator.run_parse(
                payload.output, target=payload.target, include_raw=payload.include_raw
            )
        )
        return result.to_dict()

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
