"""Main FastAPI application"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from app.config import settings
from app.database import init_db
from app.exceptions import CatalogError, ValidationFailed
from app.api import admin, albums, auth, songs, stats, users

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    # Startup
    logger.info("Starting Catalog API...")
    
    init_db()
    logger.info("Database initialized")
    
    logger.info("Application startup complete")
    
    yield
    
    # Shutdown
    logger.info("Shutting down...")


def error_body(message: str, detail: str | None = None) -> dict:
    """Error payload; internal detail is only exposed outside production"""
    if detail and not settings.is_production:
        return {"message": f"{message}: {detail}"}
    return {"message": message}


async def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.detail or exc.message}")
        body = error_body(exc.public_message, exc.detail)
    else:
        body = {"message": exc.message}
    if isinstance(exc, ValidationFailed):
        body["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for item in exc.errors():
        loc = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path", "header")]
        errors.setdefault(".".join(loc) or "request", item.get("msg", "invalid value"))
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} raised an unhandled error")
    return JSONResponse(status_code=500, content=error_body("Internal server error", str(exc)))


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    app = FastAPI(
        title="Catalog API",
        description="Album and song catalog with media ingestion",
        version="0.1.0",
        lifespan=lifespan
    )
    
    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    
    # Register routers
    app.include_router(albums.router)
    app.include_router(songs.router)
    app.include_router(admin.router)
    app.include_router(stats.router)
    app.include_router(users.router)
    app.include_router(auth.router)
    
    @app.get("/")
    def root():
        """Root endpoint"""
        return {
            "message": "Catalog API",
            "version": "0.1.0",
            "docs": "/docs"
        }
    
    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}
    
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
