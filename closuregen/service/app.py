"""FastAPI application entrypoint for closuregen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..generator import GenerationResult, Generator


class GenerateRequest(BaseModel):
    path: str
    js_prefix: Optional[str] = None
    dry_run: bool = True


class DiagnosticModel(BaseModel):
    kind: str
    message: str
    target: Optional[str] = None
    path: Optional[str] = None


class DirectoryModel(BaseModel):
    directory: str
    rules: List[Dict[str, Any]]


class GenerateResponse(BaseModel):
    root: str
    dry_run: bool
    directories: List[DirectoryModel]
    diagnostics: List[DiagnosticModel]


class HealthResponse(BaseModel):
    status: str


def _default_generator() -> Generator:
    return Generator()


def create_app(
    generator_factory: Callable[[], Generator] = _default_generator,
) -> FastAPI:
    """Create the FastAPI application exposing rule generation."""
    app = FastAPI(title="closuregen", version="0.3.0")

    async def get_generator() -> Generator:
        return generator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        generator: Generator = Depends(get_generator),
    ) -> GenerateResponse:
        def _run() -> GenerationResult:
            return generator.run(
                payload.path, js_prefix=payload.js_prefix, dry_run=payload.dry_run
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return GenerateResponse(**result.to_payload())

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
