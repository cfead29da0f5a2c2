"""
Command option generation for OneLiner.

The generator runs the two-stage pipeline: one call proposes candidate
commands, a second call scores them for risk. Each stage is a plain
transformation returning a fresh list, so a batch handed to one stage
is never modified by another.
"""

import logging
from typing import Callable, List, Optional, Sequence

from oneliner.exceptions import EvaluationError, GenerationError
from oneliner.models.command_models import CommandOption, PipelineStage
from oneliner.safety.evaluator import RiskEvaluator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[PipelineStage], None]


class OptionGenerator:
    """
    Turns a natural language query into candidate command options.

    Args:
        client: Provider client with async ``generate_options(query, n)``.
        evaluator (Optional[RiskEvaluator]): Risk evaluator; one is built
            on top of ``client`` if omitted.
        option_count (int): Number of options to request.
    """

    def __init__(
        self,
        client,
        evaluator: Optional[RiskEvaluator] = None,
        option_count: int = 3,
    ):
        self.client = client
        self.evaluator = evaluator if evaluator is not None else RiskEvaluator(client)
        self.option_count = option_count

    async def generate(self, query: str) -> List[CommandOption]:
        """
        Generate candidate options for a query. No safety pass is run.

        Raises:
            GenerationError: If the call fails or yields no options.
        """
        if not query or not query.strip():
            raise GenerationError("query is empty")

        try:
            generated = await self.client.generate_options(query, self.option_count)
        except ValueError as e:
            raise GenerationError(f"API call failed: {e}") from e

        options = [
            CommandOption(
                title=item.title,
                command=item.command,
                description=item.description,
            )
            for item in generated
        ]

        if not options:
            raise GenerationError("no options generated")

        if len(options) != self.option_count:
            logger.info(
                f"Requested {self.option_count} options, received {len(options)}"
            )

        return options

    async def evaluate_safety(
        self, options: Sequence[CommandOption]
    ) -> List[CommandOption]:
        """
        Return a copy of ``options`` with risk annotations overlaid.

        Raises:
            EvaluationError: Callers decide whether this is fatal.
        """
        if not options:
            return []

        risks = await self.evaluator.evaluate([opt.command for opt in options])

        result = list(options)
        for i, risk in enumerate(risks):
            if risk is not None:
                result[i] = result[i].with_risk(risk)
        return result

    async def generate_with_progress(
        self,
        query: str,
        on_progress: Optional[ProgressCallback] = None,
        evaluate: bool = False,
    ) -> List[CommandOption]:
        """
        Generate options, reporting each stage change to ``on_progress``.

        With ``evaluate`` the safety pass runs inline after generation on
        a best-effort basis: its failure leaves risks absent.

        Raises:
            GenerationError: If generation fails.
        """

        def notify(stage: PipelineStage) -> None:
            if on_progress is not None:
                on_progress(stage)

        notify(PipelineStage.GENERATING)
        options = await self.generate(query)

        if not evaluate:
            return options

        notify(PipelineStage.EVALUATING)
        try:
            return await self.evaluate_safety(options)
        except EvaluationError as e:
            logger.debug(f"Inline safety evaluation skipped: {e}")
            return options
