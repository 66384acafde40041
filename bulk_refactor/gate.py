from __future__ import annotations
import logging
from typing import Callable

"""
ConfirmationGate: one yes/no decision for the whole batch before any write.
"""

logger = logging.getLogger(__name__)

AFFIRMATIVE = "y"
PROMPT = "Apply these changes? (y/N) "

Reader = Callable[[str], str]


def confirm(reader: Reader, prompt: str = PROMPT) -> bool:
    try:
        answer = reader(prompt)
    except (EOFError, KeyboardInterrupt):
        logger.debug("confirmation aborted; treating as no")
        return False
    answer = answer.rstrip("\r\n")
    logger.debug("confirmation answer: %r", answer)
    return answer == AFFIRMATIVE
