import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

# Load environment variables from .env file in project root
project_root = Path(__file__).resolve().parents[2]
env_path = project_root / '.env'
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

from .config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from .shared.config_helpers import describe_config
from .shared.exceptions import handle_domain_exception
from .domains.companies.config import get_company_config
from .domains.valuation.config import get_valuation_config
from .domains.companies.api.company_endpoints import router as company_router
from .domains.valuation.api.valuation_endpoints import router as valuation_router
from .domains.analysis.api.analysis_endpoints import router as analysis_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Moat API ({settings.app_env})")
    logger.info(f"Company config: {describe_config(get_company_config())}")
    logger.info(f"Valuation config: {describe_config(get_valuation_config())}")
    if settings.create_tables_on_startup:
        from .db.init_db import init_db
        await init_db()
    yield


app = FastAPI(
    title="Moat API",
    description="Company financial statements, quick analysis and ten-year DCF valuations with sensitivity analysis.",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    http_exc = handle_domain_exception(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


# Create a main API router to group all versioned endpoints
api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}


api_router.include_router(company_router, prefix="/companies", tags=["Companies"])
api_router.include_router(valuation_router, prefix="/valuations", tags=["Valuations"])
api_router.include_router(analysis_router, prefix="/analysis", tags=["Analysis"])

app.include_router(api_router, prefix="/api/v1")
