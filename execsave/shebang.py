"""
Shebang detection on the leading characters of a document.
"""

SHEBANG = "#!"


def read_prefix(text: str, length: int = 2) -> str:
    """Return at most ``length`` leading characters of ``text``.

    Shorter (or empty) text yields a shorter prefix instead of an error.
    """
    if length <= 0:
        return ""
    return text[:length]


def has_shebang(prefix: str) -> bool:
    """Check whether a two-character prefix is exactly ``#!``.

    No byte-order mark or whitespace is stripped: the kernel only honors
    the literal bytes at offset zero.
    """
    return prefix == SHEBANG


def starts_with_shebang(text: str) -> bool:
    return has_shebang(read_prefix(text, len(SHEBANG)))
