"""
LLM Insight Enhancer

Optionally rewrites the most important insights with a local LLM and adds
narrative insights that connect several metrics. Any failure degrades to
the unmodified insight list.
"""

import asyncio
import json
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from config import EnhancementSettings, get_settings
from core.logging_config import ai_logger as logger
from insights.ranker import InsightRanker, insight_ranker, is_priority
from llm.ollama_client import OllamaClient, OllamaError
from llm.prompts import (
    NARRATIVE_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
    build_enhancement_prompt,
    build_narrative_prompt,
)
from schemas.insights import Insight, InsightEvidence, InsightSeverity, InsightType


RAW_NOTE_LIMIT = 300
MAX_NARRATIVES = 2
MIN_INSIGHTS_FOR_NARRATIVE = 3


@dataclass
class EnhancementResult:
    """Outcome of an enrichment run."""

    insights: list[Insight]
    enhanced: int = 0
    failed: int = 0
    rate_limited: bool = False
    narratives: list[Insight] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "insights": [i.model_dump(mode="json") for i in self.insights],
            "enhanced": self.enhanced,
            "failed": self.failed,
            "rate_limited": self.rate_limited,
            "narratives": len(self.narratives),
        }


def _strip_fences(text: str) -> str:
    return re.sub(r"```(?:json)?\s*", "", text).strip()


def parse_enhancement(insight: Insight, answer: str) -> Insight:
    """
    Merge a model answer into a copy of the insight.

    Tries JSON first, then pulls quoted fields out of malformed text, and
    finally keeps the raw answer as an evidence note.
    """
    text = _strip_fences(answer)

    parsed = None
    match = re.search(r"\{[\s\S]*\}", text)
    if match:
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            logger.debug(f"Answer for {insight.id} is not valid JSON")

    if isinstance(parsed, dict):
        summary = parsed.get("enhancedSummary") or parsed.get("summary") or insight.summary
        recommendations = parsed.get("recommendations")
        if not isinstance(recommendations, list) or not recommendations:
            recommendations = insight.recommendations
        else:
            recommendations = [str(r) for r in recommendations]
        return insight.model_copy(update={
            "summary": str(summary),
            "recommendations": recommendations,
            "ai_enhanced": True,
        })

    summary_match = (
        re.search(r'enhancedSummary[":\s]+"([^"]+)"', answer, re.IGNORECASE)
        or re.search(r'summary[":\s]+"([^"]+)"', answer, re.IGNORECASE)
    )
    recommendations_match = re.search(r'recommendations[":\s]+\[([^\]]+)\]', answer, re.IGNORECASE)

    if summary_match or recommendations_match:
        recommendations = insight.recommendations
        if recommendations_match:
            recommendations = [
                r.strip().replace('"', "").replace("'", "")
                for r in recommendations_match.group(1).split(",")
                if r.strip()
            ]
        return insight.model_copy(update={
            "summary": summary_match.group(1) if summary_match else insight.summary,
            "recommendations": recommendations,
            "ai_enhanced": True,
        })

    evidence = insight.evidence or InsightEvidence()
    notes = list(evidence.notes or [])
    notes.append(f"AI Analysis: {answer[:RAW_NOTE_LIMIT]}")
    return insight.model_copy(update={
        "evidence": evidence.model_copy(update={"notes": notes}),
        "ai_enhanced": True,
    })


def parse_narratives(answer: str) -> list[Insight]:
    """Narrative insights from a JSON array answer; empty when unparseable."""
    match = re.search(r"\[[\s\S]*\]", _strip_fences(answer))
    if not match:
        return []

    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning("Failed to parse narrative insights")
        return []

    narratives = []
    for item in items:
        if not isinstance(item, dict) or not item.get("title") or not item.get("summary"):
            continue
        recommendations = item.get("recommendations")
        narratives.append(Insight(
            id=f"narrative-{uuid.uuid4().hex[:12]}",
            type=InsightType.TREND,
            title=str(item["title"]),
            summary=str(item["summary"]),
            severity=InsightSeverity.INFO,
            recommendations=[str(r) for r in recommendations] if isinstance(recommendations, list) else [],
            ai_enhanced=True,
        ))
        if len(narratives) == MAX_NARRATIVES:
            break
    return narratives


def _is_rate_limit(error: Exception) -> bool:
    return (
        isinstance(error, httpx.HTTPStatusError)
        and error.response.status_code == 429
    )


class InsightEnhancer:
    """
    Enhances engine insights with an LLM.

    - Calls the model one insight at a time with a pause between calls
    - Stops at the first rate-limit response
    - Replaces insights by id, never removes or reorders them
    """

    def __init__(
        self,
        settings: Optional[EnhancementSettings] = None,
        client: Optional[OllamaClient] = None,
        ranker: Optional[InsightRanker] = None,
    ):
        self.settings = settings or get_settings().enhancement
        self.client = client or OllamaClient()
        self.ranker = ranker or insight_ranker

    async def enhance(self, insights: list[Insight]) -> EnhancementResult:
        result = EnhancementResult(insights=list(insights))

        if not self.settings.enabled:
            logger.debug("AI enrichment disabled")
            return result

        if not await self.client.is_available():
            logger.warning("Ollama is not available, skipping AI enrichment")
            return result

        selected = self.ranker.select_for_enhancement(
            insights,
            max_priority=self.settings.max_priority,
            max_other=self.settings.max_other,
            limit=self.settings.max_insights,
        )
        logger.info(f"Enhancing {len(selected)} of {len(insights)} insights")

        enhanced_by_id: dict[str, Insight] = {}
        for index, insight in enumerate(selected):
            if index > 0:
                await self._pause()

            try:
                answer = await self.client.generate(
                    build_enhancement_prompt(insight),
                    system=SYSTEM_PROMPT,
                    max_tokens=300,
                )
            except (httpx.HTTPError, OllamaError) as e:
                if _is_rate_limit(e):
                    logger.warning(f"Rate limit hit on insight {insight.id}, stopping enrichment")
                    result.rate_limited = True
                    break
                logger.error(f"AI enhancement error for {insight.id}: {e}")
                result.failed += 1
                continue

            if not answer.strip():
                logger.warning(f"Empty answer for insight {insight.id}")
                result.failed += 1
                continue

            enhanced_by_id[insight.id] = parse_enhancement(insight, answer)
            logger.info(f"AI enhanced insight: {insight.title}")

        result.enhanced = len(enhanced_by_id)
        result.insights = [enhanced_by_id.get(i.id, i) for i in insights]

        if self.settings.narrative_enabled and result.enhanced > 0 and not result.rate_limited:
            await self._pause()
            result.narratives = await self._generate_narratives(insights, result)
            result.insights.extend(result.narratives)

        logger.success(
            f"AI enrichment done: {result.enhanced} enhanced, {result.failed} failed, "
            f"{len(result.narratives)} narratives"
        )
        return result

    async def _generate_narratives(
        self,
        insights: list[Insight],
        result: EnhancementResult,
    ) -> list[Insight]:
        if len(insights) < MIN_INSIGHTS_FOR_NARRATIVE:
            return []
        if not any(is_priority(i) for i in insights):
            return []

        try:
            answer = await self.client.generate(
                build_narrative_prompt(insights),
                system=NARRATIVE_SYSTEM_PROMPT,
                max_tokens=400,
            )
        except (httpx.HTTPError, OllamaError) as e:
            if _is_rate_limit(e):
                logger.warning("Rate limit hit while generating narrative insights")
                result.rate_limited = True
            else:
                logger.error(f"Narrative insights generation failed: {e}")
            return []

        return parse_narratives(answer)

    async def _pause(self):
        if self.settings.delay_seconds > 0:
            await asyncio.sleep(self.settings.delay_seconds)

    async def close(self):
        await self.client.close()


# Global instance
insight_enhancer = InsightEnhancer()
