import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import cloudinary
from dotenv import load_dotenv

from netsume.services.config import get_settings
from netsume.services.errors import FunctionsError
from netsume.utils.context import build_context
from netsume.utils.db import ensure_db_initialized
from netsume.utils.limits import limiter
from netsume.routers.auth import router as auth_router
from netsume.routers.functions import router as functions_router
from netsume.routers.profile import router as profile_router
from netsume.routers.skills import router as skills_router
from netsume.routers.report import router as report_router
from netsume.routers.session import router as session_router

# Load environment variables
load_dotenv()

settings = get_settings()

# Logging
logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger("uvicorn.error")

# Create FastAPI app
app = FastAPI(
    title="Netsume",
    description="Skills assessment with AI-assisted resume extraction",
    version="0.1.0",
    redoc_url="/redoc" if settings.DEBUG else None,
    docs_url="/docs" if settings.DEBUG else None,
)

# Include routers immediately so they appear in Swagger Docs
app.include_router(auth_router, prefix="/api")
app.include_router(functions_router, prefix="/api")
app.include_router(profile_router, prefix="/api")
app.include_router(skills_router, prefix="/api")
app.include_router(report_router, prefix="/api")
app.include_router(session_router, prefix="/api")

# Service handles shared by every route through Depends(get_context)
app.state.context = build_context(settings)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Cloudinary config
cloudinary.config(
    cloud_name=settings.CLOUDINARY_CLOUD_NAME,
    api_key=settings.CLOUDINARY_API_KEY,
    api_secret=settings.CLOUDINARY_API_SECRET,
    secure=True,
)


@app.exception_handler(FunctionsError)
async def functions_error_handler(request: Request, exc: FunctionsError):
    logger.error(f"{request.url.path} failed with {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Root endpoint
@app.get("/")
@limiter.limit("100/minute")
def read_root(request: Request):
    return {"message": "Welcome to Netsume"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# Initialize DB at startup
@app.on_event("startup")
async def start_db():
    try:
        logger.info("🚀 Initializing database (startup)...")
        await ensure_db_initialized()
        logger.info("✅ Database initialized successfully.")
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {repr(e)}")


# Local run entrypoint
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("netsume.server:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
