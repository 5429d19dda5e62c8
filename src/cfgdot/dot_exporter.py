from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from src.cfgdot.cfg_nodes import Method
from src.cfgdot.dot_escape import escape, escape_file_name
from src.cfgdot.dot_generator import DotGraphGenerator, attributes_string
from src.cfgdot.insn_printer import FallbackPrinter, InsnRenderer, fallback_insns

LOG = logging.getLogger(__name__)

GRAPHS_DIR_SUFFIX = "_graphs"
DOT_EXTENSION = ".dot"


@dataclass(kw_only=True, frozen=True)
class DotGraphConfig:
    out_dir: Path
    use_regions: bool = False
    raw_insns: bool = False


class DotGraphExporter:
    """
    Export the control flow graph of a method as a Graphviz DOT file.

    In region mode the structured region tree is drawn as nested clusters and
    blocks missing from it are outlined in red. Otherwise every basic block is
    drawn in method order.
    """

    def __init__(self, config: DotGraphConfig, fallback: FallbackPrinter = fallback_insns) -> None:
        self.config = config
        self.insn_renderer = InsnRenderer(raw=config.raw_insns, fallback=fallback)

    def visit(self, method: Method) -> Path | None:
        """
        Render the graph of a method and write it to its output file.

        :param method: The method to export.
        :type method: Method

        :return: The path written, or None when the method is skipped.
        :rtype: Path | None
        """
        text = self.render(method)
        if text is None:
            return None

        path = self.output_path(method)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        LOG.debug("Wrote %s", path)
        return path

    def render(self, method: Method) -> str | None:
        """Build the DOT document for a method, or None when there is nothing to draw."""
        if method.no_code:
            LOG.debug("Skipping %s: no code", method.full_name)
            return None
        if self.config.use_regions and method.region is None:
            LOG.debug("Skipping %s: no region tree", method.full_name)
            return None

        generator = DotGraphGenerator(method, self.insn_renderer)
        if self.config.use_regions:
            generator.process_method_region()
        else:
            generator.process_blocks()

        lines = [f'digraph "CFG for{escape(method.full_name)}" {{']
        lines.extend(generator.nodes)
        lines.append("\t" + self._method_node(method))
        enter_block = method.enter_block
        if enter_block is not None:
            lines.append(f"\tMethodNode -> {generator.names.name(enter_block)};")
        lines.extend(generator.edges)
        lines.append("}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _method_node(method: Method) -> str:
        signature = (f"{method.return_type} {method.class_info.full_name}.{method.name}"
                     f"({', '.join(method.arguments)}) ")
        label = escape(method.access_string) + escape(signature)
        attrs = attributes_string(method)
        if attrs:
            label += " | " + attrs
        return f'MethodNode[shape=record,label="{{{label}}}"];'

    def output_path(self, method: Method) -> Path:
        file_name = escape_file_name(method.short_id)
        if self.config.use_regions:
            file_name += ".regions"
        if self.config.raw_insns:
            file_name += ".raw"
        file_name += DOT_EXTENSION
        return self.config.out_dir / (method.class_info.full_path + GRAPHS_DIR_SUFFIX) / file_name
