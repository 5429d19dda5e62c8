from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from src.cfgdot.cfg_nodes import Block, Instruction
from src.cfgdot.dot_escape import NL, escape

LOG = logging.getLogger(__name__)

# Best-effort instruction printer: render(instructions) -> text, never fails
FallbackPrinter = Callable[[Sequence[Instruction]], str]


def fallback_insns(insns: Sequence[Instruction]) -> str:
    """Print instructions one per line, each line started with a newline."""
    lines = []
    for insn in insns:
        line = str(insn)
        if insn.attributes:
            line += "  // " + ", ".join(insn.attributes)
        lines.append("\n" + line)
    return "".join(lines)


def raw_insn_string(insn: Instruction) -> str:
    """Instruction text, a space, then its attribute summary (empty when it has none)."""
    attrs = f"A:{{{', '.join(insn.attributes)}}}" if insn.attributes else ""
    return f"{insn} {attrs}"


class InsnRenderer:
    def __init__(self, raw: bool = False, fallback: FallbackPrinter = fallback_insns) -> None:
        self.raw = raw
        self.fallback = fallback

    def render(self, block: Block) -> str:
        """Render the instructions of a block as escaped label lines."""
        if self.raw:
            return "".join(escape(raw_insn_string(insn)) + NL for insn in block.instructions)

        text = escape(self._print_fallback(block.instructions) + "\n")
        if text.startswith(NL):
            text = text[len(NL):]
        return text

    def _print_fallback(self, insns: Sequence[Instruction]) -> str:
        try:
            return self.fallback(insns)
        except Exception:
            LOG.warning("Fallback printer failed, using literal instruction text", exc_info=True)
            return "".join("\n" + str(insn) for insn in insns)
