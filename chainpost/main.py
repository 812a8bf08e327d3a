import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chainpost.api import collections, environments, flows, history, requests
from chainpost.config import get_settings
from chainpost.dependencies import get_container
from chainpost.exceptions import EntityNotFoundError, NoExecutorFoundError, UnsupportedRequestTypeError

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: configure logging
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Chainpost API starting")

    yield

    # Shutdown: release pooled HTTP connections
    await get_container().aclose()
    get_container.cache_clear()


app = FastAPI(
    title="Chainpost API",
    description="API testing client: templated requests chained into flows",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EntityNotFoundError)
async def entity_not_found_handler(request: Request, exc: EntityNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(UnsupportedRequestTypeError)
@app.exception_handler(NoExecutorFoundError)
async def configuration_error_handler(request: Request, exc: Exception):
    logger.warning("Request configuration error: %s", exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


app.include_router(environments.router, prefix="/api/environments", tags=["environments"])
app.include_router(collections.router, prefix="/api/collections", tags=["collections"])
app.include_router(requests.router, prefix="/api/requests", tags=["requests"])
app.include_router(flows.router, prefix="/api/flows", tags=["flows"])
app.include_router(history.router, prefix="/api/history", tags=["history"])


@app.get("/health")
async def health():
    return {"status": "healthy"}
