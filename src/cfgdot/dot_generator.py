from __future__ import annotations

import logging
from typing import Protocol

from src.cfgdot.cfg_nodes import Block, Method, Region, collect_region_blocks
from src.cfgdot.dot_escape import NL, escape
from src.cfgdot.dot_names import NameAllocator
from src.cfgdot.insn_printer import InsnRenderer

LOG = logging.getLogger(__name__)


class Attributed(Protocol):
    attributes: list[str]


def attributes_string(node: Attributed) -> str:
    return "".join(escape(attr) + NL for attr in node.attributes)


def format_offset(offset: int) -> str:
    return f"0x{offset:04x}"


class DotGraphGenerator:
    """
    Emit the node and edge declarations for the body of one method's graph.

    Nodes and clusters are collected in `nodes`, edges in `edges`, so the
    document can list every node before the first edge.
    """

    def __init__(self, method: Method, insn_renderer: InsnRenderer) -> None:
        self.method = method
        self.insn_renderer = insn_renderer
        self.names = NameAllocator()
        self.nodes: list[str] = []
        self.edges: list[str] = []
        self._depth = 1

    def _node_line(self, line: str) -> None:
        self.nodes.append("\t" * self._depth + line)

    def _edge_line(self, line: str) -> None:
        self.edges.append("\t" + line)

    def process_blocks(self) -> None:
        for block in self.method.blocks:
            self.process_block(block)

    def process_method_region(self) -> None:
        """Render the region trees of the method, then every block they leave out."""
        if self.method.region is None:
            raise ValueError(f"{self.method.full_name} has no region tree")
        trees = [self.method.region] + self.method.handler_regions()
        for region in trees:
            self.process_region(region)

        region_blocks = collect_region_blocks(trees)
        for block in self.method.blocks:
            if block not in region_blocks:
                LOG.debug("Block %d of %s is not covered by any region", block.id, self.method.full_name)
                self.process_block(block, error=True)

    def process_region(self, region: Region) -> None:
        self._node_line(f"subgraph {self.names.name(region)} {{")
        self._depth += 1

        label = escape(region.description)
        attrs = attributes_string(region)
        if attrs:
            label += " | " + attrs
        self._node_line(f'label = "{label}";')
        self._node_line("node [shape=record,color=blue];")

        for child in region.children:
            if isinstance(child, Region):
                self.process_region(child)
            else:
                self.process_block(child)

        self._depth -= 1
        self._node_line("}")

    def process_block(self, block: Block, error: bool = False) -> None:
        name = self.names.name(block)

        label = f"{block.id}\\:\\ {format_offset(block.start_offset)}"
        attrs = attributes_string(block)
        if attrs:
            label += "|" + attrs
        insns = self.insn_renderer.render(block)
        if insns:
            label += "|" + insns

        color = "color=red," if error else ""
        self._node_line(f'{name} [shape=record,{color}label="{{{label}}}"];')

        false_path = block.else_block
        for succ in block.successors:
            style = "[style=dotted]" if succ is false_path else ""
            self._edge_line(f"{name} -> {self.names.name(succ)}{style};")
