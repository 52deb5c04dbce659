# sellspark/services/narrative_renderer.py

import json
import logging
from dataclasses import asdict, dataclass
from typing import Dict, List, Sequence

from sellspark.llm.parsing import NarrativeOutput, parse_model
from sellspark.llm.prompts import ROI_NARRATIVE_PROMPT
from sellspark.services.owner_profile import OwnerProfile
from sellspark.services.roi_simulator import RECIPE_CATALOG, RiskTier, ROIMetrics
from sellspark.utils.errors import CompletionError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

# Owned here, never taken from the model
BADGE_COLORS = {
    RiskTier.LOW: "green",
    RiskTier.MEDIUM: "amber",
    RiskTier.HIGH: "red",
}


@dataclass(frozen=True)
class Narrative:
    recipe_id: str
    headline: str
    explainer: str
    badge_color: str

    def to_dict(self) -> dict:
        return asdict(self)


def fallback_headline(metric: ROIMetrics) -> str:
    return f"{metric.median_roi:.0f}% ROI in {metric.payback_days:.0f} days"


def fallback_explainer(metric: ROIMetrics) -> str:
    return f"Save {metric.monthly_time_saved:.0f} hours monthly while boosting efficiency."


def _prompt_facts(metric: ROIMetrics) -> dict:
    facts = {
        "recipe_id": metric.recipe_id,
        "title": metric.recipe_title,
        "median_roi_percent": metric.median_roi,
        "p75_roi_percent": metric.p75_roi,
        "payback_days": metric.payback_days,
        "monthly_hours_saved": metric.monthly_time_saved,
        "monthly_savings_usd": metric.monthly_cost_saved,
        "implementation_cost_usd": metric.implementation_cost,
        "risk": metric.risk_tier.value,
    }
    recipe = RECIPE_CATALOG.get(metric.recipe_id)
    if recipe:
        facts["benchmark_roi_range"] = [recipe.roi_range_low, recipe.roi_range_high]
    return facts


class NarrativeRenderer:
    def __init__(self, completion_client):
        self.client = completion_client

    def render(self, metrics: Sequence[ROIMetrics], profile: OwnerProfile) -> List[Narrative]:
        """
        One narrative per metric, in the same order.

        Headline and explainer come from the completion service when it
        answers with non-empty text for that recipe, else from the
        deterministic templates. Badge color always follows risk tier.
        """
        generated = self._generate(metrics, profile)

        narratives = []
        for metric in metrics:
            text = generated.get(metric.recipe_id, {})
            narratives.append(Narrative(
                recipe_id=metric.recipe_id,
                headline=text.get("headline") or fallback_headline(metric),
                explainer=text.get("explainer") or fallback_explainer(metric),
                badge_color=BADGE_COLORS[metric.risk_tier],
            ))
        return narratives

    def _generate(self, metrics: Sequence[ROIMetrics], profile: OwnerProfile) -> Dict[str, dict]:
        if not metrics:
            return {}

        prompt = (
            ROI_NARRATIVE_PROMPT
            .replace("{{MONTHLY_REVENUE}}", f"{profile.monthly_revenue:,.0f}")
            .replace("{{HOURLY_RATE}}", f"{profile.hourly_rate:,.0f}")
            .replace("{{BUSINESS_MODEL}}", profile.business_model.value)
            .replace("{{TECH_COMFORT}}", profile.tech_comfort.value)
            .replace("{{ROI_DATA}}", json.dumps([_prompt_facts(m) for m in metrics], indent=2))
        )

        try:
            raw = self.client.generate_chat(
                messages=[{"role": "system", "content": prompt}],
                temperature=0.5,
            )
        except CompletionError as e:
            logger.warning("Narrative generation failed (%s); using templates", e)
            return {}

        result = parse_model(raw, NarrativeOutput)
        if not result.ok:
            logger.warning("Malformed narrative output (%s); using templates", result.error)
            return {}

        generated = {}
        for item in result.value.narratives:
            headline, explainer = item.headline.strip(), item.explainer.strip()
            if headline or explainer:
                generated.setdefault(item.recipe_id, {"headline": headline, "explainer": explainer})
        return generated
