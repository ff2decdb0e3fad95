"""Macro suppression consulted while collecting macro definitions."""

import enum
from typing import AbstractSet

from ffmpeg_cffi._internals.constants import SUPPRESSED_MACROS


class MacroParsingBehavior(enum.Enum):
    DEFAULT = "default"
    IGNORE = "ignore"


def will_parse_macro(
    name: str, suppressed: AbstractSet[str] = SUPPRESSED_MACROS
) -> MacroParsingBehavior:
    """
    Decide how a macro definition is handled.

    Only consulted for macros: functions, types and enumerators sharing a
    suppressed name are emitted as usual.
    """
    if name in suppressed:
        return MacroParsingBehavior.IGNORE
    return MacroParsingBehavior.DEFAULT
