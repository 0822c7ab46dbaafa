import re
import unicodedata
from typing import List

ELLIPSIS = "..."


def truncate(text: str, budget: int) -> str:
    """Cut text longer than budget to exactly budget chars plus an ellipsis."""
    text = text or ""
    if len(text) <= budget:
        return text
    return text[:budget] + ELLIPSIS


def split_lines(text: str, width: int) -> List[str]:
    """
    Split text into lines of at most `width` characters on word boundaries.
    Words longer than a line are hard-split.
    """
    words = (text or "").split()
    lines: List[str] = []
    current = ""
    for word in words:
        while len(word) > width:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:width])
            word = word[width:]
        if not word:
            continue
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def pdf_safe(text: str, unicode_font: bool = False) -> str:
    """
    Normalise text for drawing. Built-in Type 1 fonts only cover Latin-1, so
    anything outside it is transliterated (accents dropped) or replaced.
    """
    normalized = unicodedata.normalize("NFKC", str(text or ""))
    normalized = "".join(
        ch for ch in normalized if ch == " " or unicodedata.category(ch) not in ("Cc", "Cf")
    )
    normalized = normalized.replace("—", "-").replace("–", "-")
    if unicode_font:
        return normalized

    out = []
    for ch in normalized:
        if ord(ch) < 256:
            out.append(ch)
            continue
        if ch in ("đ", "Đ"):  # d with stroke has no decomposition
            out.append("d" if ch == "đ" else "D")
            continue
        base = "".join(
            c for c in unicodedata.normalize("NFKD", ch) if not unicodedata.combining(c)
        )
        out.append(base if base and all(ord(c) < 256 for c in base) else "?")
    return "".join(out)


def slugify(text: str, max_length: int = 60) -> str:
    slug = unicodedata.normalize("NFKD", pdf_safe(text)).encode("ascii", "ignore").decode().lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug).strip("-")
    return slug[:max_length].rstrip("-") or "report"
