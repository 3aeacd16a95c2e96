"""PromptOps API - Framework/Prompt documents and portable archives.

This API serves the stored document collection and moves it between installs:
- Framework and Prompt documents (versioned, migrated on read)
- Archive export (full or prompt subset) and import (full replace or diff)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src import __version__, config
from src.api.routes import archive, frameworks, prompts
from src.frameworks.registry import get_latest_framework_version
from src.persistence.storage import get_storage
from src.prompts.registry import get_latest_prompt_version

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Loading stored collection...")
    collection = await get_storage().get_collection()
    logger.info(
        f"Loaded {len(collection.frameworks)} frameworks, "
        f"{len(collection.prompts)} prompts (plan: {config.PLAN})"
    )
    logger.info("PromptOps API ready")
    yield
    logger.info("Shutting down PromptOps API")


app = FastAPI(
    title="PromptOps API",
    description="""
## Versioned documents with portable archives

- **Frameworks**: instructional text prompts can associate with
- **Prompts**: templates with typed `{{name}}` inputs
- **Archives**: zip of front-matter Markdown files plus an order/sharing manifest

### Key Endpoints

- `GET /v1/archive/export` - Download the collection as a zip
- `POST /v1/archive/import?diff=false` - Replace the collection from a zip
- `POST /v1/archive/import?diff=true` - Add new prompts from a zip
- `POST /v1/prompts/parse` - Validate and migrate a prompt document
""",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(archive.router, prefix="/v1")
app.include_router(frameworks.router, prefix="/v1")
app.include_router(prompts.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "PromptOps API",
        "version": __version__,
        "docs": "/docs",
        "schema_versions": {
            "framework": get_latest_framework_version(),
            "prompt": get_latest_prompt_version(),
        },
        "endpoints": {
            "archive": "/v1/archive",
            "frameworks": "/v1/frameworks",
            "prompts": "/v1/prompts",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    collection = await get_storage().get_collection()
    return {
        "status": "healthy",
        "frameworks_loaded": len(collection.frameworks),
        "prompts_loaded": len(collection.prompts),
        "plan": config.PLAN,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
    )
