"""Assemble the turn sequence sent with every completion request."""

import logging
from typing import Optional, Sequence

from voicebot.models.messages import ChatTurn, MessageRole
from voicebot.persona.loader import get_system_prompt

logger = logging.getLogger(__name__)


def build_messages(
    message: str,
    history: Optional[Sequence[ChatTurn]] = None,
    *,
    system_prompt: Optional[str] = None,
) -> list[dict[str, str]]:
    """Return ``[system] + history + [user]`` as provider dicts.

    Client-supplied system turns are dropped: the persona prompt is always
    the first and only system instruction.

    Args:
        message: The new user message.
        history: Prior user/assistant turns, oldest first.
        system_prompt: Override for the persona prompt.
    """
    messages = [
        {
            "role": MessageRole.SYSTEM.value,
            "content": system_prompt or get_system_prompt(),
        }
    ]

    dropped = 0
    for turn in history or ():
        if turn.role == MessageRole.SYSTEM:
            dropped += 1
            continue
        messages.append(turn.to_provider())
    if dropped:
        logger.debug("Dropped %d client-supplied system turn(s)", dropped)

    messages.append({"role": MessageRole.USER.value, "content": message})
    return messages
