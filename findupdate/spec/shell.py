"""Shell-style variable expansion for spec values.

Spec files are shell fragments, so SRCS templates reference other fields:
``$VER``, ``${VER}``, and common parameter expansions such as
``${VER//./_}`` or ``${VER%.*}``. This module implements the subset used in
abbs trees:

- ``$NAME`` and ``${NAME}``
- ``${NAME//pattern/replacement}`` and ``${NAME/pattern/replacement}``
- ``${NAME%pattern}``, ``${NAME%%pattern}``
- ``${NAME#pattern}``, ``${NAME##pattern}``
- ``${NAME:offset}`` and ``${NAME:offset:length}``

Patterns use shell globbing (``*``, ``?``, ``[...]``). Variable values are
expanded recursively so ``SRCS`` may reference a helper such as
``__VER=${VER//./_}``.
"""

from __future__ import annotations

from collections.abc import Mapping
import re

__all__ = [
    "ExpansionError",
    "expand_variables",
    "glob_to_regex",
    "references",
]

_REF_RE = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)"
    r"(?P<op>//|/|%%|%|##|#|:)?(?P<arg>[^}]*)\}"
    r"|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))"
)

_MAX_DEPTH = 8


class ExpansionError(ValueError):
    """Raised when a reference cannot be expanded.

    Attributes:
        name: Variable that caused the failure.
    """

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name


def glob_to_regex(pattern: str) -> str:
    """Translate a shell glob into an (unanchored) regular expression."""
    out: list[str] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "*":
            out.append(".*")
        elif c == "?":
            out.append(".")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        elif c == "\\" and i + 1 < len(pattern):
            i += 1
            out.append(re.escape(pattern[i]))
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def references(text: str) -> set[str]:
    """Return the names of all variables referenced in text."""
    return {m.group("braced") or m.group("bare") for m in _REF_RE.finditer(text)}


def _strip_suffix(value: str, pattern: str, longest: bool) -> str:
    rx = re.compile(glob_to_regex(pattern), re.DOTALL)
    starts = range(len(value) + 1) if longest else range(len(value), -1, -1)
    for i in starts:
        if rx.fullmatch(value, i):
            return value[:i]
    return value


def _strip_prefix(value: str, pattern: str, longest: bool) -> str:
    rx = re.compile(glob_to_regex(pattern), re.DOTALL)
    ends = range(len(value), -1, -1) if longest else range(len(value) + 1)
    for i in ends:
        if rx.fullmatch(value, 0, i):
            return value[i:]
    return value


def _substring(value: str, arg: str, name: str) -> str:
    parts = arg.split(":")
    try:
        offset = int(parts[0].strip() or 0)
        length = int(parts[1].strip()) if len(parts) > 1 else None
    except ValueError as err:
        raise ExpansionError(f"invalid substring expansion for {name}", name) from err
    if offset < 0:
        offset = max(len(value) + offset, 0)
    if length is None:
        return value[offset:]
    if length < 0:
        return value[offset : len(value) + length]
    return value[offset : offset + length]


def _apply(value: str, op: str, arg: str, name: str) -> str:
    if op in ("//", "/"):
        pattern, _, replacement = arg.partition("/")
        if not pattern:
            return value
        rx = re.compile(glob_to_regex(pattern), re.DOTALL)
        return rx.sub(lambda _m: replacement, value, count=0 if op == "//" else 1)
    if op in ("%", "%%"):
        return _strip_suffix(value, arg, longest=op == "%%")
    if op in ("#", "##"):
        return _strip_prefix(value, arg, longest=op == "##")
    if op == ":":
        return _substring(value, arg, name)
    raise ExpansionError(f"unsupported expansion operator {op!r}", name)


def expand_variables(
    text: str,
    variables: Mapping[str, str],
    *,
    opaque: str | None = None,
    _depth: int = 0,
) -> str:
    """Expand variable references in text.

    Args:
        text: Text containing ``$NAME`` / ``${NAME...}`` references.
        variables: Raw (unexpanded) variable values, usually spec fields.
        opaque: Optional marker string. Any parameter expansion that would
            transform a value containing this marker raises ExpansionError.
            The locator uses it to detect templates that transform the
            version instead of embedding it.

    Returns:
        The expanded text.

    Raises:
        ExpansionError: On undefined variables, unsupported operators,
            recursion deeper than 8 levels, or a transformation of the
            opaque marker.
    """
    if _depth > _MAX_DEPTH:
        raise ExpansionError("variable expansion nested too deeply", "")

    def replace(m: re.Match[str]) -> str:
        name = m.group("braced") or m.group("bare")
        if name not in variables:
            raise ExpansionError(f"undefined variable ${name}", name)
        value = expand_variables(
            variables[name], variables, opaque=opaque, _depth=_depth + 1
        )
        op = m.group("op")
        if m.group("braced") and not op and m.group("arg"):
            raise ExpansionError(f"unsupported expansion ${{{name}{m.group('arg')}}}", name)
        if not op:
            return value
        if opaque is not None and opaque in value:
            raise ExpansionError(
                f"${{{name}{op}{m.group('arg')}}} transforms the version", name
            )
        return _apply(value, op, m.group("arg"), name)

    return _REF_RE.sub(replace, text)
