"""
Insight extraction: raw feedback text -> LLM -> normalised, persisted insights.

The pipeline, per analyze request:
    1. load themes (fail if "Uncategorised" is missing) and the tag vocabulary
    2. build the system prompt (taxonomy, tag reuse, density rules, context bank)
    3. end the read transaction, call the LLM, strictly validate its JSON array
    4. reopen as a writer (BEGIN IMMEDIATE on SQLite), insert each insight
       under "Uncategorised" with the suggested theme kept aside, then
       create/link its tags; one failing item never aborts the rest
"""

import json
import logging
import re
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import (
    ConfigurationError,
    InvalidInputError,
    LLMResponseError,
    StoreReadError,
    StoreWriteError,
)
from app.db.session import begin_write
from app.models.insight import Insight, SourceType, MAX_INSIGHT_CONTENT_LENGTH
from app.models.tag import DEFAULT_TAG_COLOR
from app.models.theme import UNCATEGORISED_THEME
from app.schemas.analyze import AnalyzeResponse, ExtractedInsight
from app.services.ai_service import AIService
from app.services.context_bank import load_context_bank, NO_CONTEXT_PLACEHOLDER
from app.services.tag_service import TagService, normalize_tags, MAX_TAGS_PER_INSIGHT
from app.services.theme_service import ThemeService

logger = logging.getLogger(__name__)

RAW_EXCERPT_LENGTH = 500

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_extracted_list = TypeAdapter(List[ExtractedInsight])


def build_system_prompt(
    theme_names: List[str],
    existing_tag_names: List[str],
    context_bank: str,
) -> str:
    """System prompt for extraction: taxonomy, tag vocabulary, density rules, context."""
    if existing_tag_names:
        tag_list = (
            f"Existing tags (prefer these when they fit): {', '.join(existing_tag_names)}. "
            "If there are no relevant tags, you may create a new one, but try to fit to an "
            "existing tag if possible."
        )
    else:
        tag_list = (
            'No existing tags yet. Use short, lowercase tag names (e.g. "ui", "error message"). '
            "You may create new tags as needed; try to reuse where it makes sense."
        )

    themes = "\n".join(f"- {name}" for name in theme_names if name != UNCATEGORISED_THEME)

    return f"""You are a Product Research Assistant for Nexus Mods. Your goal is to analyze user feedback and extract atomic insights.

Theme categories (assign each insight to exactly one):
{themes}

{tag_list}

Extraction & density rules:
- Atomic quality: Every insight must be a standalone nugget of information. If a sentence contains two distinct pain points (or sentiments), split them into two insights.
- Volume: Do not feel obligated to reach a specific number. For a short comment, 1 insight is often enough. For long-form text (interviews, articles), extract as many as necessary to represent every unique sentiment expressed. If in doubt, less is more: quality over quantity.
- Avoid redundancy: If the user repeats the same complaint multiple times, capture it once as a single, strong insight.
- "So what?" filter: Only extract insights that are actionable for a Product Team. Ignore generic praise (e.g. "I love this site") unless it specifies what they love (e.g. "I love the new search filters").
- Contextual accuracy: Use the Context Bank below to distinguish technical tiers (e.g. Premium vs Supporter) and tool-specific terminology. Reference it for Nexus/modding terms (Vortex, Collections, ESP, load order, etc.).

Other rules:
- Assign the single most relevant theme to each insight.
- Tags: Assign at least one tag (and at most {MAX_TAGS_PER_INSIGHT}) to every insight. Reuse the same tag for multiple insights when it fits.
- Output only valid JSON: an array of objects with keys "content", "suggested_theme", "suggested_tags". No markdown, no explanation.

Context bank:
{context_bank or NO_CONTEXT_PLACEHOLDER}

Output format (JSON only):
[{{"content":"...","suggested_theme":"Mod installation","suggested_tags":["tag1","tag2"]}},...]"""


def build_user_message(text: str) -> str:
    return f"Analyze this user feedback and extract insights as JSON:\n\n{text}"


def parse_insights_json(raw: str) -> List[ExtractedInsight]:
    """
    Parse the LLM answer into validated items.

    Code fences are stripped first. Anything that is not a JSON array of
    {content, suggested_theme, suggested_tags} objects raises LLMResponseError
    with an excerpt of the raw answer.
    """
    text = (raw or "").strip()
    fenced = _CODE_FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1).strip()

    excerpt = (raw or "")[:RAW_EXCERPT_LENGTH]
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning(f"LLM response is not valid JSON: {e}")
        raise LLMResponseError("Failed to parse LLM response as JSON", raw=excerpt)

    if not isinstance(data, list):
        raise LLMResponseError("LLM response is not a JSON array", raw=excerpt)

    try:
        return _extracted_list.validate_python(data)
    except ValidationError as e:
        logger.warning(f"LLM response has unexpected shape: {e.error_count()} error(s)")
        raise LLMResponseError(
            "LLM response does not match the expected insight shape",
            details=str(e),
            raw=excerpt,
        )


class ExtractionService:
    """Orchestrates one extraction batch."""

    def __init__(self, ai_service: Optional[AIService] = None):
        # Fails fast with ConfigurationError when the LLM key is missing
        self.ai_service = ai_service or AIService()
        self.settings = get_settings()

    async def analyze(
        self,
        db: AsyncSession,
        text: Optional[str],
        source_url: Optional[str] = None,
        source_type: Optional[SourceType] = None,
    ) -> AnalyzeResponse:
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError('Request body must include "text" (string)')

        themes = await ThemeService.list_themes(db)
        uncategorised = ThemeService.find_uncategorised(themes)
        if uncategorised is None:
            raise ConfigurationError(f"{UNCATEGORISED_THEME} theme not found in database")

        try:
            tag_ids_by_name = await TagService.get_tag_ids_by_name(db)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load tags: {e}")
            raise StoreReadError("Failed to load tags", details=str(e))

        theme_ids_by_name = {t.name: t.id for t in themes}
        uncategorised_id = uncategorised.id

        context_bank = await load_context_bank(self.settings.context_dir)
        system_prompt = build_system_prompt(
            [t.name for t in themes],
            sorted(tag_ids_by_name),
            context_bank,
        )
        logger.info(
            f"Extracting insights: {len(text)} chars of feedback, "
            f"{len(tag_ids_by_name)} existing tags, prompt {len(system_prompt)} chars"
        )

        # No read lock may be held while waiting on the LLM
        await db.commit()

        raw = await self.ai_service.complete(
            system_prompt,
            build_user_message(text),
            max_tokens=self.settings.llm_max_tokens,
        )
        extracted = parse_insights_json(raw)
        if not extracted:
            logger.info("LLM returned no insights")
            return AnalyzeResponse(count=0, insight_ids=[])

        try:
            await begin_write(db)
            inserted_ids = await self._persist(
                db,
                extracted,
                theme_ids_by_name,
                uncategorised_id,
                tag_ids_by_name,
                source_url,
                source_type,
            )
        except OperationalError as e:
            logger.error(f"Store rejected writes for this batch: {e}")
            raise StoreWriteError("Failed to store insights", details=str(e))

        logger.info(f"Extraction complete: {len(inserted_ids)}/{len(extracted)} insights stored")
        return AnalyzeResponse(count=len(inserted_ids), insight_ids=inserted_ids)

    async def _persist(
        self,
        db: AsyncSession,
        extracted: List[ExtractedInsight],
        theme_ids_by_name: Dict[str, str],
        uncategorised_id: str,
        tag_ids_by_name: Dict[str, str],
        source_url: Optional[str],
        source_type: Optional[SourceType],
    ) -> List[str]:
        """
        Insert items in LLM order.

        A rejected item is logged and skipped. OperationalError (locked or
        unavailable store) is not item-specific and aborts the batch.
        """
        inserted_ids: List[str] = []

        for idx, item in enumerate(extracted):
            try:
                async with db.begin_nested():
                    insight = Insight(
                        content=item.content[:MAX_INSIGHT_CONTENT_LENGTH],
                        source_url=source_url or None,
                        source_type=source_type,
                        theme_id=uncategorised_id,
                        suggested_theme_id=theme_ids_by_name.get(item.suggested_theme),
                    )
                    db.add(insight)
                    await db.flush()
            except OperationalError:
                raise
            except SQLAlchemyError as e:
                logger.error(f"Insert insight {idx + 1}/{len(extracted)} failed, skipping: {e}")
                continue
            inserted_ids.append(insight.id)

            for name in normalize_tags(item.suggested_tags):
                await self._attach_tag(db, insight.id, name, tag_ids_by_name)

        return inserted_ids

    async def _attach_tag(
        self,
        db: AsyncSession,
        insight_id: str,
        name: str,
        tag_ids_by_name: Dict[str, str],
    ) -> None:
        tag_id = tag_ids_by_name.get(name)
        try:
            if tag_id is None:
                tag_id = await TagService.get_or_create_tag_id(db, name, DEFAULT_TAG_COLOR)
                if tag_id is None:
                    return
                tag_ids_by_name[name] = tag_id
            await TagService.link_tag(db, insight_id, tag_id)
        except OperationalError:
            raise
        except SQLAlchemyError as e:
            logger.warning(f"Could not attach tag '{name}' to insight {insight_id}: {e}")
