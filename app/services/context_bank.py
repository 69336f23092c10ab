"""Context bank: markdown reference docs concatenated into LLM prompts."""

import logging
from pathlib import Path
from typing import Optional

import aiofiles

from app.core.config import get_settings

logger = logging.getLogger(__name__)

NO_CONTEXT_PLACEHOLDER = "(No context files loaded.)"


async def load_context_bank(directory: Optional[str] = None) -> str:
    """
    Read every *.md file in the context directory.

    Each file becomes a "--- <filename>" header followed by its content;
    files are joined with a blank line. A missing directory yields "".
    """
    context_dir = Path(directory or get_settings().context_dir)
    if not context_dir.is_dir():
        logger.debug(f"Context directory not found: {context_dir}")
        return ""

    parts = []
    for path in sorted(context_dir.glob("*.md")):
        if not path.is_file():
            continue
        async with aiofiles.open(path, "r", encoding="utf-8", errors="replace") as f:
            content = await f.read()
        parts.append(f"--- {path.name}\n{content}")

    logger.debug(f"Loaded {len(parts)} context file(s) from {context_dir}")
    return "\n\n".join(parts)
