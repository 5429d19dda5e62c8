from __future__ import annotations

import re

from src.cfgdot.cfg_nodes import Block, Container, Region

# DOT identifiers only allow letters, digits and underscores
_NON_ID_CHARS = re.compile(r"[^0-9A-Za-z_]")


class NameAllocator:
    """
    Hand out DOT identifiers for the blocks and regions of one document.

    Block names come from the block id, which is unique within a method.
    Region names use a sequential counter assigned the first time a region is
    seen. The table keeps a reference to every named region so an object id
    cannot be reused by another region while the document is being built.
    """

    def __init__(self) -> None:
        self._regions: dict[int, tuple[Region, int]] = {}

    def name(self, container: Container) -> str:
        if isinstance(container, Block):
            return f"Node_{container.id}"
        kind = _NON_ID_CHARS.sub("_", container.kind)
        return f"cluster_{kind}_{self._region_index(container)}"

    def _region_index(self, region: Region) -> int:
        entry = self._regions.get(id(region))
        if entry is None:
            entry = (region, len(self._regions))
            self._regions[id(region)] = entry
        return entry[1]
