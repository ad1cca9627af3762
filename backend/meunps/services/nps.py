"""
NPS arithmetic over lists of responses.

Responses may be ORM rows or plain dicts; only ``score``, ``created_at`` and
``source_id`` are read.
"""
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from meunps.utils import ensure_aware, utcnow

PROMOTER_MIN = 9
DETRACTOR_MAX = 6


def _get(response: Any, key: str) -> Any:
    if isinstance(response, dict):
        return response.get(key)
    return getattr(response, key, None)


def _created_at(response: Any) -> datetime:
    value = _get(response, "created_at")
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return ensure_aware(value)


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity: 12.5 -> 13, -12.5 -> -12."""
    return int(math.floor(value + 0.5))


def calculate_nps(responses: Sequence[Any]) -> int:
    """
    Net Promoter Score in [-100, 100]:
    round(((promoters - detractors) / total) * 100), 0 for no responses.
    """
    if not responses:
        return 0

    promoters = sum(1 for r in responses if _get(r, "score") >= PROMOTER_MIN)
    detractors = sum(1 for r in responses if _get(r, "score") <= DETRACTOR_MAX)

    return round_half_up(((promoters - detractors) / len(responses)) * 100)


def categorize_responses(responses: Sequence[Any]) -> Dict[str, int]:
    """Promoters (9-10), passives (7-8) and detractors (0-6) plus the total."""
    promoters = passives = detractors = 0
    for response in responses:
        score = _get(response, "score")
        if score >= PROMOTER_MIN:
            promoters += 1
        elif score <= DETRACTOR_MAX:
            detractors += 1
        else:
            passives += 1

    return {
        "promoters": promoters,
        "passives": passives,
        "detractors": detractors,
        "total": len(responses),
    }


def responses_by_score(responses: Sequence[Any]) -> Dict[int, int]:
    """Count of responses for every score 0..10, zeros included."""
    by_score = {score: 0 for score in range(11)}
    for response in responses:
        by_score[_get(response, "score")] += 1
    return by_score


def responses_by_source(responses: Sequence[Any]) -> Dict[Optional[str], List[Any]]:
    """Responses grouped by source_id (None for unclassified)."""
    by_source: Dict[Optional[str], List[Any]] = {}
    for response in responses:
        source_id = _get(response, "source_id")
        key = str(source_id) if source_id is not None else None
        by_source.setdefault(key, []).append(response)
    return by_source


def nps_over_time(
    responses: Sequence[Any],
    periods: int = 8,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    NPS trend from the first response up to ``now``.

    The span is cut into ``periods`` buckets of equal width, never narrower
    than 7 days. A bucket holds responses with start <= created_at < end, so
    when the minimum width kicks in later buckets can lie in the future and
    report 0. No responses or a non-positive ``periods`` yields an empty series.
    """
    ordered = sorted(responses, key=_created_at)
    if not ordered or periods <= 0:
        return []

    first_date = _created_at(ordered[0])
    last_date = ensure_aware(now) if now is not None else utcnow()

    total_days = math.ceil((last_date - first_date) / timedelta(days=1))
    days_per_period = max(total_days // periods, 7)
    width = timedelta(days=days_per_period)

    series = []
    for index in range(periods):
        period_start = first_date + index * width
        period_end = period_start + width

        period_responses = [
            r for r in ordered
            if period_start <= _created_at(r) < period_end
        ]

        series.append({
            "date": period_start.date().isoformat(),
            "nps": calculate_nps(period_responses),
        })

    return series
