"""Bounded retry-with-backoff for readiness checks."""

import logging
import time
from typing import Callable, Iterator, Union

from .models import NotReady, ReadinessPolicy, Ready

logger = logging.getLogger(__name__)

ReadinessResult = Union[Ready, NotReady]


def backoff_delays(policy: ReadinessPolicy) -> Iterator[float]:
    """Yield the delay to wait before each retry (max_attempts - 1 values)."""
    delay = policy.base_delay
    for _ in range(policy.max_attempts - 1):
        yield min(delay, policy.max_delay)
        delay *= policy.backoff_factor


def wait_until_ready(
    probe: Callable[[], bool],
    policy: ReadinessPolicy,
    description: str = 'resource',
    sleep: Callable[[float], None] = time.sleep,
) -> ReadinessResult:
    """
    Call ``probe`` until it returns True or the policy runs out of attempts.

    Exceptions raised by the probe count as a failed attempt; the last one is
    kept as the NotReady reason.

    Args:
        probe: Zero-argument callable returning True once ready
        policy: Attempt count and backoff schedule
        description: Name used in log lines
        sleep: Sleep function (injected by tests)

    Returns:
        Ready(attempts) or NotReady(attempts, reason)
    """
    delays = backoff_delays(policy)
    reason = 'probe never succeeded'

    for attempt in range(1, policy.max_attempts + 1):
        try:
            if probe():
                logger.info("%s ready after %d attempt(s)", description, attempt)
                return Ready(attempts=attempt)
            reason = 'probe reported not ready'
        except Exception as e:  # noqa: BLE001
            reason = f"{type(e).__name__}: {e}"
            logger.debug("%s probe raised: %s", description, reason)

        if attempt == policy.max_attempts:
            break

        delay = next(delays)
        logger.info(
            "%s not ready (attempt %d/%d), retrying in %.0fs",
            description, attempt, policy.max_attempts, delay,
        )
        sleep(delay)

    logger.warning(
        "%s not ready after %d attempts: %s",
        description, policy.max_attempts, reason,
    )
    return NotReady(attempts=policy.max_attempts, reason=reason)
