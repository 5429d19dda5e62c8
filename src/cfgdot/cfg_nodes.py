from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto


class InsnType(Enum):
    NOP = auto()
    CONST = auto()
    MOVE = auto()
    ARITH = auto()
    NEG = auto()
    CMP = auto()

    # Control Flow
    IF = auto()       # Conditional branch
    GOTO = auto()
    SWITCH = auto()
    RETURN = auto()
    THROW = auto()

    # Object and Array Access
    NEW_INSTANCE = auto()
    NEW_ARRAY = auto()
    AGET = auto()
    APUT = auto()
    IGET = auto()
    IPUT = auto()
    SGET = auto()
    SPUT = auto()
    CHECK_CAST = auto()
    INSTANCE_OF = auto()

    INVOKE = auto()
    MONITOR_ENTER = auto()
    MONITOR_EXIT = auto()
    MOVE_EXCEPTION = auto()
    PHI = auto()


@dataclass(kw_only=True, eq=False)
class Instruction:
    type: InsnType
    text: str
    attributes: list[str] = field(default_factory=list)
    # Only set on IF instructions
    else_block: Block | None = field(default=None, repr=False)

    def __str__(self) -> str:
        return self.text


@dataclass(kw_only=True, eq=False)
class Block:
    """A basic block: straight-line instructions with ordered successors."""
    id: int
    start_offset: int = 0
    instructions: list[Instruction] = field(default_factory=list)
    successors: list[Block] = field(default_factory=list, repr=False)
    attributes: list[str] = field(default_factory=list)

    @property
    def else_block(self) -> Block | None:
        """The false-path successor when the block starts with a conditional branch."""
        if self.instructions and self.instructions[0].type == InsnType.IF:
            return self.instructions[0].else_block
        return None


@dataclass(kw_only=True, eq=False)
class Region:
    """A structured region grouping blocks and nested regions."""
    kind: str = "Region"
    description: str = ""
    children: list[Container] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)

    def iter_blocks(self) -> Iterator[Block]:
        for child in self.children:
            if isinstance(child, Region):
                yield from child.iter_blocks()
            else:
                yield child


Container = Block | Region


@dataclass(kw_only=True)
class ExceptionHandler:
    catch_type: str = "Throwable"
    handler_region: Region | None = None


@dataclass(kw_only=True, frozen=True)
class ClassInfo:
    full_name: str

    @property
    def full_path(self) -> str:
        return self.full_name.replace(".", "/")


@dataclass(kw_only=True)
class Method:
    """A decompiled method: its blocks, optional region tree and signature details."""
    class_info: ClassInfo
    short_id: str
    return_type: str = "void"
    arguments: list[str] = field(default_factory=list)
    access_flags: list[str] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    blocks: list[Block] = field(default_factory=list)
    region: Region | None = None
    exception_handlers: list[ExceptionHandler] = field(default_factory=list)
    no_code: bool = False
    entry: Block | None = None

    @property
    def name(self) -> str:
        return self.short_id.split("(", 1)[0]

    @property
    def full_name(self) -> str:
        return f"{self.class_info.full_name}.{self.short_id}"

    @property
    def enter_block(self) -> Block | None:
        if self.entry is not None:
            return self.entry
        return self.blocks[0] if self.blocks else None

    @property
    def access_string(self) -> str:
        return "".join(f"{flag} " for flag in self.access_flags)

    def handler_regions(self) -> list[Region]:
        return [h.handler_region for h in self.exception_handlers if h.handler_region is not None]


def collect_region_blocks(regions: Iterable[Region]) -> set[Block]:
    """Collect every block reachable from the given region trees."""
    blocks: set[Block] = set()
    for region in regions:
        blocks.update(region.iter_blocks())
    return blocks
