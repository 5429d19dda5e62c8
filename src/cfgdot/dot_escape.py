from __future__ import annotations

# Left-justified line break inside a DOT label
NL = "\\l"

# Characters with meaning inside record labels, escaped with a leading backslash
_RESERVED = "/><{}\"-|"

_FILE_NAME_MAP = str.maketrans({
    '.': '_', '/': '_', ';': '_', '$': '_', ' ': '_', ',': '_', '<': '_',
    '[': 'A',
    ']': None, '>': None, '?': None, '*': None,
})


def escape(text: str) -> str:
    """
    Make arbitrary diagnostic text safe to embed in a quoted record label.

    Literal backslashes are deleted before anything else, so the escapes added
    afterwards are kept. Newlines become left-justified line breaks.
    """
    text = text.replace("\\", "")
    for ch in _RESERVED:
        text = text.replace(ch, "\\" + ch)
    return text.replace("\n", NL)


def escape_file_name(text: str) -> str:
    """Map a method short id to a file name safe on common file systems."""
    return text.translate(_FILE_NAME_MAP)
