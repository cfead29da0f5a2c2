"""
LLM-based risk evaluation for candidate commands.

The evaluator turns an ordered batch of commands into an equally long,
equally ordered batch of optional risk annotations. ``None`` entries
mean the command was judged safe.
"""

import logging
from typing import List, Optional, Sequence

from oneliner.exceptions import EvaluationError
from oneliner.models.command_models import RiskAnnotation, RiskLevel

logger = logging.getLogger(__name__)


def parse_risk_level(level: Optional[str]) -> RiskLevel:
    """Convert a provider risk string into a RiskLevel."""
    return RiskLevel.parse(level)


class RiskEvaluator:
    """Scores commands through one batched structured-output call."""

    def __init__(self, client):
        """
        Args:
            client: Anything with an async ``assess_commands(commands)``
                returning records with ``risk_level`` and ``reason``.
        """
        self.client = client

    async def evaluate(self, commands: Sequence[str]) -> List[Optional[RiskAnnotation]]:
        """
        Evaluate commands for risk.

        Args:
            commands (Sequence[str]): Commands in display order.

        Returns:
            List[Optional[RiskAnnotation]]: Positional annotations.

        Raises:
            EvaluationError: If the call fails or the batch sizes differ.
        """
        if not commands:
            return []

        if self.client is None:
            raise EvaluationError("evaluator client is not configured")

        try:
            records = await self.client.assess_commands(list(commands))
        except Exception as e:
            raise EvaluationError(f"API call failed: {e}") from e

        if len(records) != len(commands):
            raise EvaluationError(
                f"expected {len(commands)} evaluations, got {len(records)}"
            )

        results: List[Optional[RiskAnnotation]] = []
        for record in records:
            level = parse_risk_level(record.risk_level)
            if level is RiskLevel.NONE:
                results.append(None)
            else:
                results.append(RiskAnnotation(level=level, message=record.reason))

        logger.debug(
            "Safety evaluation flagged %d of %d commands",
            sum(1 for r in results if r is not None),
            len(results),
        )
        return results
