"""
summary_parser.py

Parse-or-fallback handling of the model completion. The completion is
untrusted free text even though the prompt asks for JSON only, so parsing
never raises: it yields either the validated summary or a degraded summary
that keeps the raw completion verbatim as its only key point.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from domain.models import SummaryOutcome, SummaryResult
from logger import get_logger

log = get_logger("Summary Parser")


def parse_summary(raw: str) -> SummaryOutcome:
    """
    Strict JSON parse of `raw` into a `SummaryResult`.

    The parsed value must be an object holding both `key_points` and
    `action_items` as lists of strings; extra keys are dropped. Anything else
    (syntax error, markdown fences, prose, wrong types, missing keys) yields
    the fallback outcome.
    """
    try:
        obj = json.loads(raw)
    except (TypeError, ValueError) as e:
        log.warning("Completion is not valid JSON, using fallback summary: %s", e)
        return SummaryOutcome.degraded(raw)

    if not isinstance(obj, dict):
        log.warning("Completion JSON is a %s, not an object, using fallback summary", type(obj).__name__)
        return SummaryOutcome.degraded(raw)

    try:
        summary = SummaryResult.model_validate(obj)
    except ValidationError as e:
        log.warning("Completion JSON has the wrong shape, using fallback summary: %d error(s)", e.error_count())
        return SummaryOutcome.degraded(raw)

    return SummaryOutcome.parsed(summary, raw)
