# voice_intake/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from voice_intake.api.routes import router as api_router
from voice_intake.auth import BasicAuthMiddleware
from voice_intake.config import get_settings
from voice_intake.errors import IntakeError
from voice_intake.pages import render_index

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(title="Voice Intake API", version="1.0.0")

app.add_middleware(BasicAuthMiddleware, realm=settings.auth_realm)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # for dev; tighten in prod
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


@app.exception_handler(IntakeError)
async def intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("%s %s invalid request body", request.method, request.url.path)
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body"},
    )


@app.get("/", response_class=HTMLResponse)
def root(request: Request) -> str:
    return render_index(getattr(request.state, "username", None))


@app.get("/healthz")
def healthz():
    return {"status": "ok"}


app.include_router(api_router, prefix="/api")


def run() -> None:
    import uvicorn

    uvicorn.run("voice_intake.main:app", host=settings.host, port=settings.port)
