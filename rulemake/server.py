"""HTTP server that builds targets on request."""

import mimetypes
import time

import setproctitle
from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel

from .build import BuildError, DependencyCycleError, Entry, Pipeline, UnresolvedTargetError
from .config import get_config
from .fsx import LocalFileSystem
from .loader import load_rules
from .log import console_logger

SERVER_START_TIME = time.time()


class EntryInfo(BaseModel):
    """Metadata of a built entry."""

    name: str
    target: str
    size: int
    mtime: float | None = None


# ##################################################################
# map build errors to http errors
# unresolved targets are 404, cycles 409, other build failures 500
def _http_error(error: BuildError) -> HTTPException:
    if isinstance(error, UnresolvedTargetError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, DependencyCycleError):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


async def _build(request: Request, target: str) -> Entry:
    pipeline: Pipeline = request.app.state.pipeline
    try:
        return await pipeline.exec(target)
    except BuildError as e:
        raise _http_error(e) from e


# ##################################################################
# create app
# routes are bound to the given pipeline through app state
def create_app(pipeline: Pipeline) -> FastAPI:
    app = FastAPI(title="rulemake")
    app.state.pipeline = pipeline

    api_router = APIRouter(prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok", "start_time": SERVER_START_TIME}

    @api_router.get("/entries/{target:path}", response_model=EntryInfo)
    async def entry_info(target: str, request: Request):
        """Build a target and describe the result."""
        entry = await _build(request, target)
        contents = await entry.contents()
        return EntryInfo(name=entry.name, target=target, size=len(contents), mtime=await entry.mtime())

    @app.get("/files/{target:path}")
    async def file_contents(target: str, request: Request):
        """Build a target and return its content."""
        entry = await _build(request, target)
        media_type, _ = mimetypes.guess_type(target)
        return Response(content=await entry.contents(), media_type=media_type or "application/octet-stream")

    app.include_router(api_router)
    return app


# ##################################################################
# create app from config
# loads rules from the configured reference
def create_app_from_config() -> FastAPI:
    config = get_config()
    if not config.rules:
        raise RuntimeError("No rules configured (set RULEMAKE_RULES)")
    pipeline = Pipeline(
        load_rules(config.rules),
        logger=console_logger(config.log_level),
        fs=LocalFileSystem(config.root_path),
        concurrent=config.concurrent,
    )
    return create_app(pipeline)


# ##################################################################
# main entry
# starts the uvicorn server with the configured host and port
def main():
    import uvicorn

    setproctitle.setproctitle("rulemake-server")
    config = get_config()
    uvicorn.run(
        "rulemake.server:create_app_from_config",
        factory=True,
        host=config.host,
        port=config.port,
        reload=False,
    )


# ##################################################################
# standard dispatch
if __name__ == "__main__":
    main()
