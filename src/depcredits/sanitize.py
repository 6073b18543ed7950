"""Normalize free-text package fields for markdown output."""

from __future__ import annotations

import unicodedata
from urllib.parse import urlparse

# Characters with markdown meaning, and the entities that neutralize them.
_MARKDOWN_ENTITIES = {
    "#": "&#35;",
    "*": "&#42;",
    "<": "&lt;",
    ">": "&gt;",
    "[": "&#91;",
    "]": "&#93;",
    "^": "&#94;",
    "_": "&#95;",
    "`": "&#96;",
    "|": "&#124;",
    "~": "&#126;",
}

# The local part of an email address allows a lot; escape the noisy bits.
_EMAIL_LOCAL_ENTITIES = {
    "#": "&#35;",
    "%": "&#37;",
    "&": "&#38;",
    "*": "&#42;",
    "+": "&#43;",
    "/": "&#47;",
    "=": "&#61;",
    "?": "&#63;",
    "^": "&#94;",
    "_": "&#95;",
    "`": "&#96;",
    "|": "&#124;",
    "~": "&#126;",
}


def normalize_string(raw: str) -> str:
    """Strip control characters and compact whitespace."""
    kept = "".join(
        c for c in raw if c.isspace() or unicodedata.category(c) != "Cc"
    )
    return " ".join(kept.split())


def esc_markdown(raw: str) -> str:
    return "".join(_MARKDOWN_ENTITIES.get(c, c) for c in raw)


def package_name(raw: str) -> str:
    """Validate and lowercase a package name.

    Names must start with an ASCII letter and may otherwise contain ASCII
    letters, digits, ``-`` and ``_``.  Raises ValueError on anything else.
    """
    src = raw.strip()
    out: list[str] = []
    for c in src:
        if "a" <= c <= "z" or "A" <= c <= "Z":
            out.append(c.lower())
        elif out and (c.isascii() and c.isdigit() or c in "-_"):
            out.append(c)
        else:
            raise ValueError(f"invalid package name: {raw!r}")
    if not out:
        raise ValueError(f"invalid package name: {raw!r}")
    return "".join(out)


def nice_license(raw: str | None) -> str | None:
    """Return a display-safe license expression, or None if there isn't one."""
    if not isinstance(raw, str) or not any(c.isascii() and c.isalpha() for c in raw):
        return None
    # Slash separators are deprecated in favor of OR.
    out = normalize_string(esc_markdown(raw).replace("/", " OR "))
    return out or None


def nice_email(raw: str) -> str | None:
    """Return a lowercased, markdown-safe email, or None if it looks bogus."""
    local, sep, host = raw.strip().rpartition("@")
    if not sep or not local or not host:
        return None
    if any(c.isspace() or c in "<>" for c in local):
        return None

    try:
        host = host.lower().encode("idna").decode("ascii")
    except UnicodeError:
        return None
    labels = host.split(".")
    if len(labels) < 2 or not all(labels):
        return None
    tld = labels[-1]
    if len(tld) < 2 or not (tld.isalpha() or tld.startswith("xn--")):
        return None

    local = "".join(_EMAIL_LOCAL_ENTITIES.get(c, c) for c in local.lower())
    return f"{local}@{host}"


def nice_author(raw: str) -> str:
    """Tidy an author line, turning ``Name <email>`` into a mailto link.

    Returns an empty string if nothing usable remains.
    """
    raw = raw.strip()
    start = raw.find("<")
    end = raw.rfind(">")
    if 0 <= start < end:
        email = nice_email(raw[start + 1 : end])
        raw = raw[:start]
        if email is not None:
            name = normalize_string(esc_markdown(raw))
            if not name:
                return f"<{email}>"
            return f"[{name}](mailto:{email})"

    if any(c.isascii() and c.isalpha() for c in raw):
        return normalize_string(esc_markdown(raw))
    return ""


def nice_authors(raw: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    out = (nice_author(line) for line in raw if isinstance(line, str))
    return tuple(line for line in out if line)


def nice_url(raw: str | None) -> str | None:
    """Keep *raw* only if it is an absolute http(s) URL.

    Characters that would end a markdown link target early are
    percent-encoded.
    """
    if not raw or not isinstance(raw, str):
        return None
    raw = raw.strip()
    try:
        parsed = urlparse(raw)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return "".join(f"%{ord(c):02X}" if c.isspace() or c in "()<>" else c for c in raw)
