"""
PromptDeck Backend - Unified Application Entry Point
Mounts the presentation service under the API prefix of a single FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.presentations import app as presentations_module
from shared.utils import config, setup_logging

logger = setup_logging("promptdeck-backend")

presentations_app = presentations_module.app
API_PREFIX = config.get("api_prefix", "/api")

app = FastAPI(
    title="PromptDeck Backend API",
    description="""
    Unified API for prompt-to-deck outline generation and presentation editing.

    All endpoints are documented below. Service routes are organized by tag.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
        {
            "name": "Presentations",
            "description": f"Presentation service - mounted at {API_PREFIX}",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes to exclude (internal FastAPI docs routes)
EXCLUDED_PATHS = {"/openapi.json", "/docs", "/docs/oauth2-redirect", "/redoc"}

# Include presentation routes with prefix
for route in presentations_app.routes:
    if hasattr(route, "path") and hasattr(route, "endpoint"):
        # Skip internal documentation routes
        if route.path in EXCLUDED_PATHS:
            continue
        route_kwargs = {
            "path": f"{API_PREFIX}{route.path}",
            "endpoint": route.endpoint,
            "methods": route.methods,
            "tags": ["Presentations"],
        }
        if hasattr(route, "name"):
            route_kwargs["name"] = f"presentations_{route.name}"
        if hasattr(route, "response_model"):
            route_kwargs["response_model"] = route.response_model
        if hasattr(route, "status_code") and route.status_code is not None:
            route_kwargs["status_code"] = route.status_code
        app.add_api_route(**route_kwargs)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with service information and API navigation"""
    return {
        "service": "PromptDeck Backend API",
        "version": "1.0.0",
        "services": {
            "presentations": {
                "base_url": API_PREFIX,
                "docs": "/docs",
                "health": f"{API_PREFIX}/health",
            },
        },
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for all services"""
    return {
        "status": "healthy",
        "services": {
            "api_gateway": "operational",
            "presentations": "operational",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting PromptDeck Backend on http://0.0.0.0:8000")
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
