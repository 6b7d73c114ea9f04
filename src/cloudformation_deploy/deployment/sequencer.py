"""
Runs the named stages of a workflow in order.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Stage = Tuple[str, Callable[[], Awaitable[None]]]


class Sequencer:
    """Run stages one after another, stopping at the first to fail."""

    def __init__(self, name: str, stages: List[Stage]):
        self.name = name
        self.stages = stages
        self.failed_stage: Optional[str] = None

    async def run(self) -> Optional[Exception]:
        """Run the stages.

        Returns:
            The error raised by the failing stage, or None if all succeeded
        """
        for stage_name, stage in self.stages:
            logger.info(f"{self.name}: {stage_name}")
            try:
                await stage()
            except Exception as e:
                self.failed_stage = stage_name
                logger.error(f"{self.name} failed at {stage_name}: {e}")
                return e

        logger.info(f"{self.name}: complete")
        return None
