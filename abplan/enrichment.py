"""Advisory warning enrichment.

An enricher (typically backed by a text-completion service) may read a request
and its computed result and suggest extra warnings. It is never trusted for
numbers: only its strings are appended, and any failure leaves the locally
computed result untouched.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, List, Optional

from .models import CalculationRequest, CalculationResult

logger = logging.getLogger(__name__)

WarningEnricher = Callable[[CalculationRequest, CalculationResult], List[str]]


def enrich_warnings(
    request: CalculationRequest,
    result: CalculationResult,
    enricher: Optional[WarningEnricher] = None,
) -> CalculationResult:
    if enricher is None:
        return result

    try:
        extra = enricher(request, result)
    except Exception:
        logger.warning("Warning enricher failed; returning local result", exc_info=True)
        return result

    if not extra:
        return result

    suggestions = [str(w) for w in extra if w]
    return replace(result, warnings=list(result.warnings) + suggestions)
