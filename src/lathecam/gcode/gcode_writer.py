"""Low-level G-code word and block formatting helpers."""

from __future__ import annotations

from typing import Optional


def fmt(value: float, decimals: int = 3, decimal_point: bool = False) -> str:
    """Format a float for G-code, stripping trailing zeros.

    With *decimal_point* a trailing ``.`` is kept on whole numbers
    (``20.``), which Fanuc-family controls need to avoid reading the value
    in least-input increments.
    """
    text = f"{value:.{decimals}f}".rstrip("0")
    if text in ("-0.", "-."):
        text = "0."
    if not decimal_point:
        text = text.rstrip(".")
        return "0" if text in ("", "-0") else text
    return text


def word(letter: str, value: Optional[float], decimals: int = 3, decimal_point: bool = False) -> str:
    """A single address word such as ``X12.5``; empty when *value* is None."""
    if value is None:
        return ""
    return f"{letter}{fmt(value, decimals, decimal_point)}"


def block(*words: str) -> str:
    """Join non-empty words with single spaces."""
    return " ".join(w for w in words if w)


def comment(text: str) -> str:
    """Wrap *text* in a parenthetical comment."""
    # nested parens end the comment early on most controls
    cleaned = text.replace("(", "").replace(")", "")
    return f"({cleaned})"


def semicolon_comment(text: str) -> str:
    """Sinumerik-style ``; text`` comment."""
    return f"; {text.replace(';', ',')}"
