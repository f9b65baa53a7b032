from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypeVar

from core.errors import ResourceUnavailable
from core.models import Alternative

T = TypeVar("T")


def select_alternative(
    alternatives: Sequence[Alternative[T]],
    *,
    unavailable_message: str,
    logger: logging.Logger,
) -> Alternative[T]:
    """Return the first available alternative.

    Selection happens exactly once. A chosen mechanism that later fails does
    not fall back to the next one.
    """
    for alt in alternatives:
        if alt.available:
            logger.info("Using %s", alt.name, extra={"alternative": alt.name})
            return alt
    logger.error(unavailable_message)
    raise ResourceUnavailable(
        unavailable_message, alternatives=[a.name for a in alternatives]
    )
