"""Lexical helpers for TypeScript text returned by the text-generation service.

Nothing here parses TypeScript. The scanner knows just enough about quoting
and comments to tell code from literal contents. Regex literals are not
recognized.
"""
import re

_FENCE_RE = re.compile(r"```[A-Za-z0-9_+\-]*[ \t]*\n?")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences such as ```typescript ... ```."""
    return _FENCE_RE.sub("", text).strip()


def _scan(text: str, keep_comments: bool, mask: bool) -> str:
    """
    Walk ``text`` once, tracking whether we are inside a quote, a template
    literal or a comment.

    keep_comments=False drops ``//`` and ``/* */`` comments outside literals.
    mask=True replaces every character inside a literal with a space
    (newlines are kept so line numbers survive).
    """
    out = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if ch == "/" and nxt == "/":
            end = text.find("\n", i)
            end = n if end == -1 else end
            if keep_comments:
                out.append(text[i:end])
            i = end
            continue
        if ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            if keep_comments:
                out.append(text[i:end])
            i = end
            continue

        if ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
            i += 1
            while i < n:
                c = text[i]
                if c == "\\" and i + 1 < n:
                    out.append("  " if mask else text[i:i + 2])
                    i += 2
                    continue
                if c == quote:
                    break
                # plain quotes cannot span lines; stop so one stray quote
                # does not swallow the rest of the file
                if c == "\n" and quote != "`":
                    break
                out.append(" " if mask and c != "\n" else c)
                i += 1
            if i < n and text[i] == quote:
                out.append(quote)
                i += 1
            continue

        out.append(ch)
        i += 1
    return "".join(out)


def strip_comments(text: str) -> str:
    """Drop comments, leaving string and template literals intact."""
    return _scan(text, keep_comments=False, mask=False)


def mask_literals(text: str) -> str:
    """Blank out literal contents so braces inside strings are not counted."""
    return _scan(text, keep_comments=True, mask=True)


def clean_generated_text(text: str) -> str:
    """Fences and comments removed; what the validators expect as input."""
    stripped = strip_comments(strip_code_fences(text))
    lines = [line.rstrip() for line in stripped.splitlines()]
    return "\n".join(lines).strip() + "\n"
