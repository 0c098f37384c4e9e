"""FastAPI web application for DepDiff."""

from typing import Optional

from fastapi import FastAPI, HTTPException
from loguru import logger
from pydantic import BaseModel

from core.diff import diff_manifests
from core.exceptions import ManifestError
from core.manifest import parse_manifest
from core.report import format_outcome

app = FastAPI(
    title="DepDiff",
    description="Report Cargo dependencies whose minimum version was raised",
    version="0.1.0",
)


class DiffRequest(BaseModel):
    """Request model: the two manifest texts to compare."""
    previous: str
    current: str
    path: str = "Cargo.toml"


class DependencyChange(BaseModel):
    """A removed, upgraded or uncomparable dependency."""
    name: str
    status: str
    version: Optional[str] = None
    error: Optional[str] = None
    message: str


class DiffResponse(BaseModel):
    """Response model for a manifest diff."""
    path: str
    changes: list[DependencyChange]
    has_changes: bool


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/diff", response_model=DiffResponse)
async def diff_manifest_texts(request: DiffRequest):
    """Diff the dependency tables of two manifest texts."""
    if not request.current.strip():
        raise HTTPException(status_code=400, detail="No current manifest provided")

    try:
        manifest_prev = parse_manifest(request.previous.encode("utf-8"))
        manifest_curr = parse_manifest(request.current.encode("utf-8"))
    except ManifestError as e:
        logger.warning("Rejected manifest for {}: {}", request.path, e)
        raise HTTPException(status_code=400, detail=f"Invalid manifest: {e}")

    diff = diff_manifests(request.path, manifest_prev, manifest_curr)
    changes = [
        DependencyChange(
            name=outcome.name,
            status=outcome.status.value,
            version=outcome.version,
            error=outcome.error,
            message=format_outcome(outcome),
        )
        for outcome in diff.reportable
    ]

    return DiffResponse(path=diff.path, changes=changes, has_changes=bool(changes))
