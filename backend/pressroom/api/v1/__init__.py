"""API v1 router and endpoint organization."""

from fastapi import APIRouter

from pressroom.api.v1.endpoints import (
    briefs,
    compliance,
    content_generation,
    titles,
    websocket,
    workflow,
)

router = APIRouter(prefix="/api/v1", tags=["v1"])

# Include domain-specific routers
router.include_router(compliance.router, prefix="/compliance", tags=["Compliance"])
router.include_router(
    content_generation.router,
    prefix="/content",
    tags=["Content Generation"],
)
router.include_router(briefs.router, prefix="/briefs", tags=["Briefs"])
router.include_router(titles.router, prefix="/titles", tags=["Titles"])
router.include_router(workflow.router, prefix="/workflow", tags=["Workflow"])
router.include_router(websocket.router, tags=["WebSocket"])
