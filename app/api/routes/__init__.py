"""API routes package."""

from fastapi import APIRouter

from app.core.dependencies import AuthenticatedSession
from app.api.routes import (
    analytics,
    analyze,
    ask,
    auth,
    health,
    insights,
    tags,
    themes,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Everything below needs a session cookie when REQUIRE_AUTH is on
protected = [AuthenticatedSession]
api_router.include_router(analyze.router, prefix="/analyze", tags=["Analyze"], dependencies=protected)
api_router.include_router(ask.router, prefix="/ask", tags=["Ask"], dependencies=protected)
api_router.include_router(insights.router, prefix="/insights", tags=["Insights"], dependencies=protected)
api_router.include_router(tags.router, prefix="/tags", tags=["Tags"], dependencies=protected)
api_router.include_router(themes.router, prefix="/themes", tags=["Themes"], dependencies=protected)
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"], dependencies=protected)
