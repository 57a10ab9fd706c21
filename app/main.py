"""Link Parity Checker - FastAPI Application.

Compares the links found on each page of two crawled sitemaps to identify:
- Links missing on the new site
- Links only on the new site
- Links that moved to a new path through a redirect
"""

from fastapi import FastAPI

from .api.routes import router
from .logger import logger

# Create FastAPI app
app = FastAPI(
    title="Link Parity Checker",
    description="Compare the links of two crawled sitemaps",
    version="1.0.0"
)

# Include API routes
app.include_router(router)

logger.debug("Application initialised")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
