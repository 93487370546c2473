from __future__ import annotations

import logging
from typing import Protocol

from topic_digest.models import ModerationResult

logger = logging.getLogger(__name__)

WITHHELD_NOTICE = "Suggested post withheld due to safety policies."


class SafetyClassifier(Protocol):
    async def moderate(self, text: str) -> ModerationResult: ...


class ModerationGate:
    """Pass the suggested post through a safety classifier.

    Classifier errors, including payloads without a verdict, propagate
    (fail-closed): an unmoderated post is never returned.
    """

    def __init__(self, classifier: SafetyClassifier):
        self.classifier = classifier

    async def gate(self, suggested_post: str) -> tuple[str, ModerationResult]:
        result = await self.classifier.moderate(suggested_post)
        if result.flagged:
            flagged = [k for k, v in result.categories.items() if v]
            logger.info("Suggested post withheld (categories: %s)", ", ".join(flagged) or "n/a")
            return WITHHELD_NOTICE, result
        return suggested_post, result
