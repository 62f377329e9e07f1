from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from comics_api.config import config
from comics_api.errors import ComicsError
from comics_api.features.pages.router import close_materializer, router as pages_router
from comics_api.features.stories.router import router as stories_router
from comics_api.lib.db import init_db
from comics_api.logger import get_logger

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info(f"Comics API up (image model {config.image_model.name})")
    yield
    close_materializer()


app = FastAPI(title="Comics API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins,
    allow_credentials="*" not in config.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ComicsError)
async def comics_error_handler(request: Request, exc: ComicsError):
    level = log.error if exc.status_code >= 500 else log.info
    level(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(exc.payload(), status_code=exc.status_code)


app.include_router(pages_router)
app.include_router(stories_router)


@app.get("/healthz")
def healthz():
    return {"ok": True}
