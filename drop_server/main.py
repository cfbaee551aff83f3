import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from drop_server.config import Settings
from drop_server.logger_config import setup_logger
from drop_server.monitor import FailureMonitor
from drop_server.app.services.fetch_hint import wget_command
from drop_server.app.services.storage_manager import (
    BodyReadError,
    PayloadTooLargeError,
    StorageManager,
    is_staging_name,
)
from drop_server.app.services.validation import is_valid_filename

# Logger setup
logger = setup_logger()

router = APIRouter()


class PublicFiles(StaticFiles):
    """Read-only view of the data directory that hides in-progress uploads."""

    async def get_response(self, path: str, scope):
        if is_staging_name(os.path.basename(path)):
            raise StarletteHTTPException(status_code=404)
        return await super().get_response(path, scope)


async def plain_text_error(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


@router.put("/{filename:path}", status_code=201)
async def upload_file(filename: str, request: Request):
    """Stream the request body to disk and publish it as /files/{filename}."""
    settings: Settings = request.app.state.settings
    storage_manager: StorageManager = request.app.state.storage_manager
    monitor: FailureMonitor = request.app.state.monitor

    logger.info(f"Receiving upload request for filename: {filename!r}")

    if not is_valid_filename(filename):
        logger.warning(f"Rejected invalid filename: {filename!r}")
        raise HTTPException(status_code=400, detail="Invalid filename")

    try:
        staged = await storage_manager.write_stream(filename, request.stream(), settings.max_bytes)
    except PayloadTooLargeError as e:
        logger.warning(f"Upload {filename} rejected: {e}")
        raise HTTPException(status_code=413, detail="File too large")
    except BodyReadError as e:
        logger.warning(f"Upload {filename} aborted while reading body: {e}")
        raise HTTPException(status_code=400, detail="Invalid body")
    except OSError:
        logger.error(f"Error staging upload {filename}", exc_info=True)
        monitor.record_failure()
        raise HTTPException(status_code=500, detail="Internal error")

    try:
        await storage_manager.publish(staged, filename)
    except OSError:
        logger.error(f"Error publishing {filename}, staging file kept at {staged.path}", exc_info=True)
        monitor.record_failure()
        raise HTTPException(status_code=500, detail="Internal error")

    monitor.record_success()
    logger.info(f"Stored {filename} ({staged.size} bytes)")

    body = (
        "Upload OK\n"
        f"wget: {wget_command(settings.public_base_url, filename)}\n"
        f"size: {staged.size} bytes\n"
    )
    return PlainTextResponse(body, status_code=201, headers={"Location": f"/files/{filename}"})


def create_app(settings: Settings) -> FastAPI:
    """Build the application around an already-resolved configuration."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.storage_manager.initialize(settings.max_bytes)
        yield
        logger.info(f"Shutting down: {app.state.monitor.summary()}")

    app = FastAPI(title="File Drop Server", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage_manager = StorageManager(settings.data_dir)
    app.state.monitor = FailureMonitor(settings.failure_threshold, settings.failure_window_seconds)

    app.add_exception_handler(StarletteHTTPException, plain_text_error)
    app.include_router(router)
    # Directory is created by the lifespan, so skip the construction-time check
    app.mount("/files", PublicFiles(directory=settings.data_dir, check_dir=False), name="files")
    return app


def run():
    settings = Settings.from_env()
    setup_logger(settings.log_dir)

    logger.info("Starting file drop server...")
    logger.info(f"Data directory: {settings.data_dir}")
    logger.info(f"Maximum upload size: {settings.max_bytes / (1024*1024):.2f} MB")
    logger.info(f"Public base URL: {settings.public_base_url}")
    logger.info(f"Listening on http://{settings.host}:{settings.port}")

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
