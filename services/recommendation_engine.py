"""LLM-backed implementation of the external AI engine."""
import asyncio
import json
import logging
import re
from typing import Iterable, List, Optional, Sequence

from config import settings
from core.domain import ChatMessage, TrailEntry
from core.interfaces import IRecommendationEngine
from services.llm_service import LLMService
from utils.common import truncate

logger = logging.getLogger(settings.LOGGER_NAME)


EXTRACTION_PROMPT = """You are a regulatory, legal and policy reviewer.
Read the document "{document_name}" below and list concrete recommendations to improve it.
Respond ONLY with a JSON array of strings, at most {limit} items, each one short actionable point.

--- DOCUMENT ---
{text}
--- END DOCUMENT ---
"""

REWRITE_PROMPT = """You are editing the document "{document_name}".
Apply every recommendation below to the document and return the complete revised document text.
Return only the revised document, without commentary.

Recommendations:
{points}

--- ORIGINAL DOCUMENT ---
{text}
--- END DOCUMENT ---
"""

ANSWER_PROMPT = """You are a regulatory auditor assistant helping a user review documents in folder context.
{document_section}
Current recommendations:
{recommendations}

Conversation so far:
{history}

User: {message}
Assistant:"""

_BULLET = re.compile(r'^\s*(?:[-*•]|\d+[.)])\s+')
_CODE_FENCE = re.compile(r'```(?:json)?\s*\n?')


def _extract_json_array(text: str) -> Optional[list]:
    """Find the first balanced JSON array in text and parse it."""
    text = _CODE_FENCE.sub("", text).strip()
    start = text.find("[")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escape_next = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape_next:
            escape_next = False
            continue
        if ch == "\\":
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                try:
                    result = json.loads(text[start:i + 1])
                except json.JSONDecodeError:
                    return None
                return result if isinstance(result, list) else None
    return None


def _as_point(item) -> str:
    # models sometimes return [{"point": "..."}] instead of plain strings
    if isinstance(item, dict):
        return str(item.get("point") or item.get("recommendation") or "")
    return str(item)


def parse_recommendations(raw: str, limit: int) -> List[str]:
    """
    Turn an LLM reply into recommendation points.

    Tries a JSON array first, then falls back to bullet or numbered lines.
    Blank and duplicate points are dropped; order is kept.
    """
    parsed = _extract_json_array(raw)
    if parsed is not None:
        candidates: Iterable[str] = (_as_point(item) for item in parsed)
    else:
        lines = [line for line in raw.splitlines() if _BULLET.match(line)]
        candidates = (_BULLET.sub("", line) for line in lines)

    points: List[str] = []
    for candidate in candidates:
        point = candidate.strip()
        if point and point not in points:
            points.append(point)
        if len(points) >= limit:
            break
    return points


def _format_points(points: Sequence[str]) -> str:
    return "\n".join(f"{i}. {p}" for i, p in enumerate(points, start=1))


def _format_trail(trail: List[TrailEntry]) -> str:
    if not trail:
        return "(none)"
    lines = []
    for entry in trail:
        lines.append(f"{entry.document_name} v{entry.version}:")
        for rec in entry.recommendations:
            lines.append(f"  [{rec.status.value}] {rec.point}")
    return "\n".join(lines)


class LLMRecommendationEngine(IRecommendationEngine):
    """Prompts a local LLM for extraction, rewriting and Q&A."""

    def __init__(self, llm: LLMService, max_recommendations: int = settings.MAX_RECOMMENDATIONS,
                 max_prompt_chars: int = settings.MAX_PROMPT_CHARS):
        self.llm = llm
        self.max_recommendations = max_recommendations
        self.max_prompt_chars = max_prompt_chars

    async def _generate(self, prompt: str) -> str:
        # requests is blocking; keep the event loop free
        return await asyncio.to_thread(self.llm.generate, prompt)

    async def extract_recommendations(self, document_name: str, text: str) -> List[str]:
        if not text.strip():
            logger.info(f"'{document_name}' has no text, skipping extraction")
            return []
        raw = await self._generate(EXTRACTION_PROMPT.format(
            document_name=document_name,
            limit=self.max_recommendations,
            text=truncate(text, self.max_prompt_chars),
        ))
        points = parse_recommendations(raw, self.max_recommendations)
        logger.info(f"Extracted {len(points)} recommendations from '{document_name}'")
        return points

    async def rewrite_document(self, document_name: str, text: str, points: Sequence[str]) -> str:
        return await self._generate(REWRITE_PROMPT.format(
            document_name=document_name,
            points=_format_points(points),
            text=truncate(text, self.max_prompt_chars),
        ))

    async def answer(
        self,
        message: str,
        document_name: Optional[str],
        text: Optional[str],
        trail: List[TrailEntry],
        history: List[ChatMessage],
    ) -> str:
        if document_name:
            document_section = (
                f'The user is asking about "{document_name}".\n'
                f"--- DOCUMENT ---\n{truncate(text or '', self.max_prompt_chars)}\n--- END DOCUMENT ---"
            )
        else:
            document_section = "No single document is selected."

        recent = history[-settings.CHAT_CONTEXT_LIMIT:] if settings.CHAT_CONTEXT_LIMIT else []
        return await self._generate(ANSWER_PROMPT.format(
            document_section=document_section,
            recommendations=_format_trail(trail),
            history="\n".join(f"{m.sender.value}: {m.content}" for m in recent) or "(none)",
            message=message,
        ))

    def detect_apply_intent(self, message: str) -> bool:
        lowered = message.lower()
        return any(phrase in lowered for phrase in settings.APPLY_INTENT_PHRASES)
