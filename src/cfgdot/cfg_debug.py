from src.cfgdot.cfg_nodes import Method, Region
from src.cfgdot.dot_generator import format_offset


def debug_method(method: Method) -> str:
    def format_region(region: Region, indent: int) -> list[str]:
        indent_str = '  ' * indent
        lines = [f"{indent_str}{region.kind}: {region.description}"]
        for child in region.children:
            if isinstance(child, Region):
                lines.extend(format_region(child, indent + 1))
            else:
                lines.append(f"{indent_str}  block {child.id}")
        return lines

    enter_block = method.enter_block
    lines = [f"{method.full_name}:"]
    if method.no_code:
        lines.append("  no code")
        return "\n".join(lines)
    lines.append(f"  entry: {enter_block.id if enter_block is not None else '-'}")
    if method.attributes:
        lines.append(f"  attributes: {method.attributes}")

    for block in method.blocks:
        lines.append(f"  block {block.id} @ {format_offset(block.start_offset)}:")
        lines.append(f"    successors: {[succ.id for succ in block.successors]}")

        # Mark the false path of a conditional branch
        if block.else_block is not None:
            lines.append(f"    else: {block.else_block.id}")
        if block.attributes:
            lines.append(f"    attributes: {block.attributes}")

        lines.append("    instructions:")
        for insn in block.instructions:
            lines.append(f"      {insn.type.name.lower()} {insn}")

    if method.region is not None:
        lines.append("  regions:")
        lines.extend(format_region(method.region, 2))
    for handler in method.exception_handlers:
        lines.append(f"  handler {handler.catch_type}:")
        if handler.handler_region is not None:
            lines.extend(format_region(handler.handler_region, 2))

    return "\n".join(lines).strip()
