"""Best-effort step chains.

Window actions are short sequences of hyprctl calls where each step has a
policy for what happens when it fails. Only ``PortError`` counts as a step
failure; anything else is a bug and propagates.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from minimizer.utils.exceptions import PortError

logger = logging.getLogger(__name__)

class StepPolicy(Enum):
    ABORT = "abort"          # stop the chain
    CONTINUE = "continue"    # log and run the next step
    FALLBACK = "fallback"    # run the step's fallback, then stop

@dataclass
class RecoveryStep:
    name: str
    action: Callable[[Dict[str, Any]], Awaitable[Any]]
    policy: StepPolicy = StepPolicy.ABORT
    fallback: Optional["RecoveryStep"] = None
    store_as: Optional[str] = None

@dataclass
class ChainResult:
    completed: List[str] = field(default_factory=list)
    failed: List[Tuple[str, PortError]] = field(default_factory=list)
    aborted: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.failed and not self.aborted

async def _run_step(step: RecoveryStep, context: Dict[str, Any], result: ChainResult, label: str) -> bool:
    """Run one step, returning False when the chain must stop."""
    try:
        value = await step.action(context)
    except PortError as e:
        result.failed.append((step.name, e))
        logger.error(f"[{label}] {step.name} failed: {e}")

        if step.policy is StepPolicy.CONTINUE:
            return True
        if step.policy is StepPolicy.FALLBACK and step.fallback is not None:
            logger.info(f"[{label}] Falling back to {step.fallback.name}")
            await _run_step(step.fallback, context, result, label)
        result.aborted = True
        return False

    if step.store_as:
        context[step.store_as] = value
    result.completed.append(step.name)
    return True

async def run_chain(steps: Sequence[RecoveryStep], label: str = "chain",
                    context: Optional[Dict[str, Any]] = None) -> ChainResult:
    """Run steps in order, applying each step's failure policy."""
    context = {} if context is None else context
    result = ChainResult()

    for step in steps:
        if not await _run_step(step, context, result, label):
            break

    if result.succeeded:
        logger.debug(f"[{label}] Completed: {', '.join(result.completed)}")
    return result
