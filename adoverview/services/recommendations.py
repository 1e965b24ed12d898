from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field

from ..models.config_models import RecommendationConfig
from ..models.extraction import Kpis
from .formatting import format_currency
from .kpi import finite_values

"""Rule-based recommendations from KPIs and monthly series.

Rules (evaluated in order, each may fire once):
1. ROAS below target              -> high
2. Average CTR below target       -> med
3. CAC above the user's target    -> high
4. Cost per message rising sharply between the last two reported months -> med
If nothing fires a single low-level "Healthy signals" entry is returned.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "LEVEL_LABELS",
    "Recommendation",
    "build_recommendations",
]

LEVEL_LABELS = {"high": "High", "med": "Medium", "low": "Good"}


@dataclass(frozen=True)
class Recommendation:
    level: str  # high | med | low
    title: str
    why: str
    actions: list[str] = field(default_factory=list)

    @property
    def level_label(self) -> str:
        return LEVEL_LABELS.get(self.level, self.level)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["levelLabel"] = self.level_label
        return data


def _pick_cost_per_message(
    from_sheet: Sequence[float | None] | None, computed: Sequence[float | None] | None
) -> list[float] | None:
    # シートの Cost/Message 行を優先、なければ計算値
    if from_sheet is not None and len(from_sheet) >= 2:
        return finite_values(from_sheet)
    if computed is not None and len(computed) >= 2:
        return finite_values(computed)
    return None


def build_recommendations(
    kpis: Kpis,
    *,
    ctr: Sequence[float | None] | None = None,
    cost_per_message_sheet: Sequence[float | None] | None = None,
    cost_per_message_computed: Sequence[float | None] | None = None,
    target_cac: float | None = None,
    rules: RecommendationConfig | None = None,
    currency_symbol: str = "₱",
) -> list[Recommendation]:
    rules = rules or RecommendationConfig()
    if target_cac is None:
        target_cac = rules.target_cac
    recs: list[Recommendation] = []

    roas = kpis.roas
    if roas is not None and roas < rules.roas_target:
        recs.append(Recommendation(
            "high",
            "Campaign not profitable",
            f"ROAS is {roas:.2f} (target {rules.roas_target:.2f}+)",
            [
                "Test 3 new hooks (UGC / problem-solution / proof)",
                "Tighten targeting (exclude low-quality audiences)",
                "Improve offer + landing page conversion",
            ],
        ))

    ctr_values = finite_values(ctr)
    if ctr_values:
        avg_ctr = sum(ctr_values) / len(ctr_values)
        if avg_ctr < rules.ctr_target:
            recs.append(Recommendation(
                "med",
                "Low CTR (weak hook)",
                f"Average CTR is {avg_ctr:.2f}% (target {rules.ctr_target:g}%+)",
                [
                    "Rewrite first 2 lines (strong hook + pain)",
                    "Try new thumbnails / opening frame",
                    "Use benefit-led headline + clear CTA",
                ],
            ))

    cac = kpis.cac
    if cac is not None and target_cac is not None and cac > target_cac:
        recs.append(Recommendation(
            "high",
            "CAC above target",
            f"CAC is {format_currency(cac, currency_symbol)} vs target {format_currency(target_cac, currency_symbol)}",
            [
                "Refresh creatives (new angles every 7-10 days)",
                "Improve conversion rate (offer + follow-up speed)",
                "Retarget warm users (video viewers, engagers, past messages)",
            ],
        ))

    trend = _pick_cost_per_message(cost_per_message_sheet, cost_per_message_computed)
    if trend is not None and len(trend) >= 2:
        last, prev = trend[-1], trend[-2]
        if last > prev * rules.cost_per_message_rise:
            rise_pct = (rules.cost_per_message_rise - 1) * 100
            recs.append(Recommendation(
                "med",
                "Cost per message rising",
                f"Last {currency_symbol}{last:.2f} vs prev {currency_symbol}{prev:.2f} (+{rise_pct:.0f}%+)",
                [
                    "Refresh creatives (new hook + new first frame)",
                    "Check audience fatigue (frequency/exclusions)",
                    "Improve response speed (slow replies reduce conversion)",
                ],
            ))

    if not recs:
        recs.append(Recommendation(
            "low",
            "Healthy signals",
            "No major red flags detected.",
            [
                "Keep testing creatives weekly",
                "Monitor CAC + ROAS trends monthly",
            ],
        ))

    logger.debug("recommendations: %s", [r.title for r in recs])
    return recs
