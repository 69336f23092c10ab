"""
Question answering over stored insights.

Two tiers: a keyword ILIKE filter narrows the store to at most ASK_LIMIT
insights, then the LLM summarises only those. The insights placed in the
prompt are returned verbatim as the answer's sources.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import InvalidInputError, StoreReadError
from app.models.insight import Insight
from app.schemas.ask import AskResponse
from app.schemas.insight import InsightResponse
from app.services.ai_service import AIService
from app.services.context_bank import load_context_bank, NO_CONTEXT_PLACEHOLDER
from app.services.insight_service import insight_query
from app.services.search import escape_like, extract_keywords

logger = logging.getLogger(__name__)

NO_MATCHES_PLACEHOLDER = "(No insights match the question yet.)"


def build_insights_markdown(insights: List[Insight]) -> str:
    """One block per insight: theme label, content, and tags when present."""
    blocks = []
    for insight in insights:
        theme_name = insight.theme.name if insight.theme else "Unknown"
        tag_names = ", ".join(tag.name for tag in insight.tags if tag.name)
        tags_line = f"Tags: {tag_names}" if tag_names else ""
        blocks.append(f"## Insight ({theme_name})\n{insight.content}\n{tags_line}\n")
    return "\n".join(blocks)


def build_system_prompt(context_bank: str, insights_md: str) -> str:
    return f"""You are an insights analyst for Nexus Mods. Answer the user's question using ONLY the insights below. Use the Context Bank for Nexus/modding terminology where relevant.

Context bank (terminology):
{context_bank or NO_CONTEXT_PLACEHOLDER}

---

CONTEXT (filtered insights):
{insights_md or NO_MATCHES_PLACEHOLDER}

---

If the insights above do not contain enough information to answer the question, say so clearly. Do not make up information. Cite specific insights when relevant (e.g. "Several insights mention...")."""


class AskService:
    """Retrieval-augmented answering."""

    def __init__(self, ai_service: Optional[AIService] = None):
        self.ai_service = ai_service or AIService()
        self.settings = get_settings()

    async def retrieve(self, db: AsyncSession, keywords: List[str]) -> List[Insight]:
        """
        Newest insights whose content contains any keyword (case-insensitive).

        No keywords means no filter. Always capped at ask_limit rows.
        """
        query = insight_query()
        if keywords:
            query = query.where(
                or_(*[
                    Insight.content.ilike(f"%{escape_like(keyword)}%", escape="\\")
                    for keyword in keywords
                ])
            )
        query = query.order_by(Insight.created_at.desc()).limit(self.settings.ask_limit)

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load insights: {e}")
            raise StoreReadError("Failed to load insights", details=str(e))
        return list(result.scalars().all())

    async def ask(self, db: AsyncSession, question: Optional[str]) -> AskResponse:
        question = question.strip() if isinstance(question, str) else ""
        if not question:
            raise InvalidInputError('Request body must include "question" (string)')

        keywords = extract_keywords(question)
        insights = await self.retrieve(db, keywords)
        logger.info(f"Ask: {len(keywords)} keyword(s), {len(insights)} insight(s) retrieved")

        context_bank = await load_context_bank(self.settings.context_dir)
        system_prompt = build_system_prompt(context_bank, build_insights_markdown(insights))
        sources = [InsightResponse.from_model(insight) for insight in insights]

        # No read lock may be held while waiting on the LLM
        await db.commit()

        answer = await self.ai_service.complete(
            system_prompt,
            question,
            max_tokens=self.settings.llm_max_tokens,
        )
        return AskResponse(answer=answer, sources=sources)
