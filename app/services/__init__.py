"""Services for business logic."""

from app.services.ai_service import AIService
from app.services.analytics_service import AnalyticsService
from app.services.ask_service import AskService
from app.services.auth_service import AuthService
from app.services.extraction_service import ExtractionService
from app.services.insight_service import InsightService
from app.services.nexus_service import NexusService
from app.services.tag_service import TagService
from app.services.theme_service import ThemeService

__all__ = [
    "AIService",
    "AnalyticsService",
    "AskService",
    "AuthService",
    "ExtractionService",
    "InsightService",
    "NexusService",
    "TagService",
    "ThemeService",
]
