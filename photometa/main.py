import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from photometa.routers.export import router as export_router
from photometa.routers.ingest import router as ingest_router
from photometa.services.errors import (
	DecodeFailure,
	EmptyScanResult,
	InvalidEvent,
	NotAnImage,
	PhotometaError,
	StoreError,
)
from photometa.services.logs import configure_logging, log_event
from photometa.services.settings import get_settings

log = logging.getLogger("photometa.errors")

ERROR_STATUS = (
	(EmptyScanResult, 404),
	(InvalidEvent, 400),
	(NotAnImage, 415),
	(DecodeFailure, 422),
	(StoreError, 502),
)


async def photometa_error_handler(request: Request, exc: PhotometaError) -> JSONResponse:
	status = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 500)
	log_event(log, "request_failed", logging.WARNING, path=request.url.path, status=status, error=str(exc))
	return JSONResponse(status_code=status, content={"detail": exc.message, **exc.details})


def create_app() -> FastAPI:
	configure_logging(get_settings().log_level)
	app = FastAPI(title="photometa - image metadata API", version="0.1.0")

	# CORS (adjust origins in production)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=["*"],
		allow_credentials=False,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	app.add_exception_handler(PhotometaError, photometa_error_handler)

	# Routers
	app.include_router(ingest_router)
	app.include_router(export_router)

	return app


app = create_app()


if __name__ == "__main__":
	# Local dev server: uvicorn photometa.main:app --reload
	import uvicorn

	uvicorn.run("photometa.main:app", host="0.0.0.0", port=8000, reload=True)
