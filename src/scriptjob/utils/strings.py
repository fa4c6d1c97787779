"""
Text helpers exposed to guest scripts
"""

_KEY = 0x1CCC
_FIRST = 0x20
_SURROGATES = range(0xD800, 0xE000)


def _obscure_char(c: str) -> str:
    code = ord(c)
    if code < _FIRST or code in _SURROGATES:
        return c
    mapped = code ^ _KEY
    # characters whose image would be a lone surrogate stay as they are
    if mapped in _SURROGATES:
        return c
    return chr(mapped)


def obscure(text: str) -> str:
    """
    Reversibly obscure a string.

    This is not encryption: applying obscure() twice returns the original
    text. It only keeps values such as passwords from being readable at a
    glance in logs or storage dumps. The result is always encodable as UTF-8.
    """
    return "".join(_obscure_char(c) for c in text)
