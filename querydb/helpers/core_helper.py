# ========================================================================
# File:       querydb/helpers/core_helper.py
# Purpose:    Bezbedni pozivi + sitni helperi za SQL tekst
# Created:    2025-08-07
# Updated:    2025-08-19
# ========================================================================

from __future__ import annotations
from typing import Any, Callable


def safe_call(func: Callable, *args, **kwargs):
    """Poziva funkciju i prepušta izuzetke višem sloju; zadržavamo postojeći ugovor."""
    return func(*args, **kwargs)


def quote_literal(value: Any) -> str:
    """SQL string literal u jednostrukim navodnicima (' se duplira)."""
    return "'" + str(value).replace("'", "''") + "'"


def shorten(text: str, limit: int = 300) -> str:
    text = " ".join(str(text).split())
    return text if len(text) <= limit else text[: limit - 3] + "..."
