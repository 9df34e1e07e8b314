import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s iniciado (debug=%s)", settings.APP_NAME, settings.DEBUG)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get(f"{settings.API_PREFIX}/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

# Presupuesto ejecutivo: vista final y subpartidas
from app.routers import presupuesto_ejecutivo  # noqa: E402

app.include_router(
    presupuesto_ejecutivo.router,
    prefix=f"{settings.API_PREFIX}/presupuesto-ejecutivo",
    tags=["Presupuesto Ejecutivo"],
)

# Exportación (Excel)
from app.routers import exportacion  # noqa: E402

app.include_router(
    exportacion.router,
    prefix=f"{settings.API_PREFIX}/exportar",
    tags=["Exportación"],
)
