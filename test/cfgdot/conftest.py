import pytest

from src.cfgdot.cfg_nodes import (
    Block, ClassInfo, ExceptionHandler, InsnType, Instruction, Method, Region
)


def make_branch_method() -> Method:
    """B0 branches to B1 when the condition holds and to B2 otherwise."""
    b0 = Block(id=0, start_offset=0)
    b1 = Block(id=1, start_offset=3, instructions=[Instruction(type=InsnType.RETURN, text="return a")])
    b2 = Block(id=2, start_offset=4, instructions=[Instruction(type=InsnType.RETURN, text="return b")])
    b0.instructions.append(Instruction(type=InsnType.IF, text="if a <= b", else_block=b2))
    b0.successors.extend([b1, b2])
    return Method(
        class_info=ClassInfo(full_name="com.example.Foo"),
        short_id="max(II)I",
        return_type="int",
        arguments=["int a", "int b"],
        access_flags=["public", "static"],
        blocks=[b0, b1, b2],
    )


def make_region_method() -> Method:
    """Four blocks; the region tree covers B0-B2 and leaves B3 out."""
    b0 = Block(id=0, start_offset=0)
    b1 = Block(id=1, start_offset=2, instructions=[Instruction(type=InsnType.INVOKE, text="log()")])
    b2 = Block(id=2, start_offset=5, instructions=[Instruction(type=InsnType.RETURN, text="return")])
    b3 = Block(id=3, start_offset=8, instructions=[Instruction(type=InsnType.RETURN, text="return")])
    b0.instructions.append(Instruction(type=InsnType.IF, text="if x == 0", else_block=b2))
    b0.successors.extend([b1, b2])
    b1.successors.append(b2)

    if_region = Region(kind="IfRegion", description="if", children=[b1])
    root = Region(kind="Region", description="seq", children=[b0, if_region, b2])
    return Method(
        class_info=ClassInfo(full_name="com.example.Foo"),
        short_id="pick(I)V",
        arguments=["int x"],
        blocks=[b0, b1, b2, b3],
        region=root,
    )


def make_handler_method() -> Method:
    """A try region plus a catch handler region, with no orphaned blocks."""
    b0 = Block(id=0, start_offset=0, instructions=[Instruction(type=InsnType.INVOKE, text="risky()")])
    b1 = Block(id=1, start_offset=3, instructions=[Instruction(type=InsnType.RETURN, text="return")])
    b2 = Block(id=2, start_offset=6, instructions=[Instruction(type=InsnType.MOVE_EXCEPTION, text="e = move-exception")])
    b0.successors.extend([b1, b2])
    b2.successors.append(b1)

    root = Region(kind="TryCatchRegion", description="try", children=[b0, b1])
    catch = Region(kind="Region", description="catch", children=[b2])
    return Method(
        class_info=ClassInfo(full_name="com.example.Foo"),
        short_id="safe()V",
        blocks=[b0, b1, b2],
        region=root,
        exception_handlers=[
            ExceptionHandler(catch_type="java.io.IOException", handler_region=catch),
            ExceptionHandler(catch_type="java.lang.Error"),
        ],
    )


@pytest.fixture
def branch_method() -> Method:
    return make_branch_method()


@pytest.fixture
def region_method() -> Method:
    return make_region_method()


@pytest.fixture
def handler_method() -> Method:
    return make_handler_method()
