"""Trackflow Core FastAPI application."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import get_settings
from ..errors import ActionError, ErrorKind
from .routers import issues, organizations, projects, sprints, users

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("trackflow-core")

logger.info("Starting Trackflow Core API")

# HTTP status for each action error kind
ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.IDENTITY_PROVIDER: 502,
    ErrorKind.INTERNAL: 500,
}

# Create FastAPI app
app = FastAPI(
    title="Trackflow Core API",
    description="Organization-scoped projects, sprints and kanban issues",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ActionError)
async def action_error_handler(request: Request, exc: ActionError) -> JSONResponse:
    """Translate typed action errors into JSON error responses."""
    status_code = ERROR_STATUS_CODES.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind.value},
    )


# Include all routers with /api/v1 prefix
app.include_router(organizations.router, prefix="/api/v1/organizations")
app.include_router(users.router, prefix="/api/v1/users")
app.include_router(projects.router, prefix="/api/v1/projects")
app.include_router(sprints.router, prefix="/api/v1/sprints")
app.include_router(issues.router, prefix="/api/v1/issues")


@app.get("/")
def root():
    """Root endpoint with server info."""
    return {
        "name": "Trackflow Core API",
        "version": "1.0.0",
        "docs": "/docs",
        "description": "Organization-scoped projects, sprints and kanban issues"
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting development server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "trackflow_core.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
