from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from lark import Lark
from lark.lexer import Token
from lark.tree import Tree

from src.cfgdot.cfg_nodes import (
    Block, ClassInfo, Container, ExceptionHandler, InsnType, Instruction, Method, Region
)

_STRING_ESCAPE = re.compile(r"\\(.)")
_STRING_ESCAPE_MAP = {"n": "\n", "t": "\t"}


def _unquote(token: Token) -> str:
    return _STRING_ESCAPE.sub(lambda m: _STRING_ESCAPE_MAP.get(m.group(1), m.group(1)), token.value[1:-1])


def _strings(tree: Tree[Any] | None) -> list[str]:
    if tree is None:
        return []
    return [_unquote(tok) for tok in tree.children if isinstance(tok, Token)]


def _subtree(tree: Tree[Any], data: str) -> Tree[Any] | None:
    for child in tree.children:
        if isinstance(child, Tree) and child.data == data:
            return child
    return None


class ListingParser:
    """
    Read methods from a textual listing of blocks, instructions and regions.

    Parsing happens in two steps: the blocks of a method are created first, then
    successor, branch, entry and region references are resolved by block id.
    """

    def __init__(self) -> None:
        grammar_path = Path(__file__).parent / "listing.lark"
        if not grammar_path.exists():
            raise FileNotFoundError(f"Grammar file 'listing.lark' not found at {grammar_path.resolve()}.")

        with open(grammar_path, 'r') as f:
            grammar = f.read()
        self.parser = Lark(grammar, parser='lalr', start='start')

    def parse(self, text: str) -> list[Method]:
        tree = self.parser.parse(text)
        return [self._convert_method(child) for child in tree.children
                if isinstance(child, Tree) and child.data == 'method']

    def parse_file(self, path: Path) -> list[Method]:
        return self.parse(Path(path).read_text(encoding="utf-8"))

    def _convert_method(self, tree: Tree[Any]) -> Method:
        class_token, short_id_token = tree.children[0], tree.children[1]
        method = Method(class_info=ClassInfo(full_name=_unquote(class_token)), short_id=_unquote(short_id_token))
        items = [child for child in tree.children[2:] if isinstance(child, Tree)]

        # Blocks first, so every later item can refer to them by id
        blocks: dict[int, Block] = {}
        for item in items:
            if item.data == 'block':
                block = self._convert_block(item)
                if block.id in blocks:
                    raise ValueError(f"Duplicate block id {block.id} in {method.full_name}")
                blocks[block.id] = block
                method.blocks.append(block)

        for item in items:
            if item.data == 'flags':
                method.access_flags.extend(str(tok) for tok in item.children)
            elif item.data == 'returns':
                method.return_type = _unquote(item.children[0])
            elif item.data == 'args':
                method.arguments.extend(_strings(item))
            elif item.data == 'attrs':
                method.attributes.extend(_strings(item.children[0]))
            elif item.data == 'nocode':
                method.no_code = True
            elif item.data == 'entry':
                method.entry = self._lookup(blocks, item.children[0], method)
            elif item.data == 'block':
                self._link_block(item, blocks, method)
            elif item.data == 'region':
                if method.region is not None:
                    raise ValueError(f"More than one root region in {method.full_name}")
                method.region = self._convert_region(item, blocks, method)
            elif item.data == 'handler':
                method.exception_handlers.append(self._convert_handler(item, blocks, method))
            else:
                raise ValueError(f"Unknown method item: {item.data}")

        return method

    def _convert_block(self, tree: Tree[Any]) -> Block:
        block = Block(id=int(tree.children[0]), start_offset=int(tree.children[1]))
        block.attributes.extend(_strings(_subtree(tree, 'attr_list')))
        for child in tree.children[2:]:
            if isinstance(child, Tree) and child.data == 'insn':
                block.instructions.append(self._convert_insn(child))
        return block

    @staticmethod
    def _convert_insn(tree: Tree[Any]) -> Instruction:
        type_token = tree.children[0]
        try:
            insn_type = InsnType[str(type_token).upper()]
        except KeyError:
            raise ValueError(f"Unknown instruction type: {type_token}") from None

        insn = Instruction(type=insn_type, text=_unquote(tree.children[1]))
        insn.attributes.extend(_strings(_subtree(tree, 'attr_list')))
        return insn

    def _link_block(self, tree: Tree[Any], blocks: dict[int, Block], method: Method) -> None:
        block = blocks[int(tree.children[0])]
        successors = _subtree(tree, 'successors')
        if successors is not None:
            block.successors.extend(self._lookup(blocks, tok, method) for tok in successors.children)

        insn_trees = [child for child in tree.children if isinstance(child, Tree) and child.data == 'insn']
        for insn, insn_tree in zip(block.instructions, insn_trees):
            else_target = _subtree(insn_tree, 'else_target')
            if else_target is None:
                continue
            if insn.type != InsnType.IF:
                raise ValueError(f"Only IF instructions may have an else target, got {insn.type.name} in block {block.id}")
            target = self._lookup(blocks, else_target.children[0], method)
            if not any(succ is target for succ in block.successors):
                raise ValueError(f"Else target {target.id} of block {block.id} is not one of its successors")
            insn.else_block = target

    def _convert_region(self, tree: Tree[Any], blocks: dict[int, Block], method: Method) -> Region:
        region = Region(kind=str(tree.children[0]), description=_unquote(tree.children[1]))
        region.attributes.extend(_strings(_subtree(tree, 'attr_list')))
        for child in tree.children[2:]:
            if not isinstance(child, Tree):
                continue
            sub: Container
            if child.data == 'region':
                sub = self._convert_region(child, blocks, method)
            elif child.data == 'block_ref':
                sub = self._lookup(blocks, child.children[0], method)
            else:
                continue
            region.children.append(sub)
        return region

    def _convert_handler(self, tree: Tree[Any], blocks: dict[int, Block], method: Method) -> ExceptionHandler:
        handler = ExceptionHandler()
        for child in tree.children:
            if isinstance(child, Token):
                handler.catch_type = _unquote(child)
            elif isinstance(child, Tree) and child.data == 'region':
                handler.handler_region = self._convert_region(child, blocks, method)
        return handler

    @staticmethod
    def _lookup(blocks: dict[int, Block], token: Token, method: Method) -> Block:
        block_id = int(token)
        if block_id not in blocks:
            raise ValueError(f"Unknown block id {block_id} in {method.full_name}")
        return blocks[block_id]
