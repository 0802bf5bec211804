# backend/core/static.py

from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse


INDEX_FILE = "index.html"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def resolve_asset(root: Path, path: str) -> Path | None:
    """
    Returns the file under `root` addressed by `path`, or None when it does
    not exist or lies outside `root`.
    """
    candidate = (root / path.lstrip("/")).resolve()
    if candidate.is_relative_to(root) and candidate.is_file():
        return candidate
    return None


def register_static(app: FastAPI, frontend_dir: Path):
    """
    Serves the SPA bundle. Must be registered after every other route:
    unmatched /api paths answer a JSON 404, everything else falls back to
    the SPA entry document.
    """
    root = Path(frontend_dir).resolve()

    @app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    def static_fallback(path: str, request: Request):
        if request.url.path.startswith("/api"):
            url = request.url.path
            if request.url.query:
                url = f"{url}?{request.url.query}"
            return JSONResponse(
                status_code=404,
                content={"message": f"Handler for {request.method}:{url} not found"}
            )

        if request.method in ("GET", "HEAD"):
            asset = resolve_asset(root, path)
            if asset is not None:
                return FileResponse(asset)

        index = root / INDEX_FILE
        if not index.is_file():
            return JSONResponse(status_code=404, content={"message": "Frontend bundle not found"})
        return FileResponse(index, media_type="text/html")
