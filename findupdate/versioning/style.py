"""
House-style version normalization for findupdate.

Upstream projects spell versions in many ways; the distribution's packaging
style wants a small set of canonical forms. This module rewrites a raw
upstream version with an ordered list of regular-expression rules.

Rules
-----
Each rule is tried in order; the first whose classifier matches the
lower-cased version is applied. The rules are then tried again on the
result until none of them changes it.

================  ==================  ==================
Rule              Upstream            House style
================  ==================  ==================
release_type      4.5-rc1, 2.4a1      4.5~rc1, 2.4~a1
dashes            2023-05-07          2023.05.07
underscores       10_2                10.2
letter_notation   1.2.3-p5            1.2.3p5
revision          5.4.3-2             5.4.3+2
================  ==================  ==================

Anything else is returned lower-cased and otherwise unchanged.

Caveats
-------
Normalization is a heuristic. It reduces but does not eliminate the need
for manual review: an unanticipated upstream spelling can be rewritten into
something that is syntactically fine but wrong. Callers must surface
``StyleResult.changed`` to the user (the survey driver attaches a warning
to the package outcome) rather than trusting the output silently.

Applying the rules to their own output is a no-op, since normalization only
stops once no rule changes the version.
"""

from __future__ import annotations

from dataclasses import dataclass
import re


@dataclass(frozen=True)
class StyleRule:
    """One normalization rule.

    Attributes:
        name: Short identifier used in warnings.
        classifier: Pattern that must fully match the version for the rule
            to apply.
        pattern: Substitution pattern applied to the whole version.
        replacement: Replacement string for ``pattern``.
    """

    name: str
    classifier: re.Pattern[str]
    pattern: re.Pattern[str]
    replacement: str


@dataclass(frozen=True)
class StyleResult:
    """Outcome of a normalization.

    Attributes:
        version: Normalized version.
        original: Version before normalization.
        rule: Name of the rule that was applied, or None. When several rules
            fired in turn their names are joined with "+".
    """

    version: str
    original: str
    rule: str | None

    @property
    def changed(self) -> bool:
        return self.version != self.original


STYLE_RULES: tuple[StyleRule, ...] = (
    StyleRule(
        "release_type",
        re.compile(r"\d+(?:\.\d+)+[-_~^]*(?:rc|a|alpha|b|beta)\d*"),
        re.compile(r"[-_~^]*((?:rc|alpha|a|beta|b)\d*)$"),
        r"~\1",
    ),
    StyleRule(
        "dashes",
        re.compile(r"\d+(?:-\d+)+"),
        re.compile(r"[-_]"),
        ".",
    ),
    StyleRule(
        "underscores",
        re.compile(r"\d+(?:_[0-9a-z]+)+"),
        re.compile(r"[-_]"),
        ".",
    ),
    StyleRule(
        "letter_notation",
        re.compile(r"\d+(?:\.\d+)+[-_~+^][a-z]\d+"),
        re.compile(r"[-_~+^]"),
        "",
    ),
    StyleRule(
        "revision",
        re.compile(r"\d+(?:\.\d+)+(?:-\d+)+"),
        re.compile(r"[-_~+^]"),
        "+",
    ),
)


def normalize_version(
    raw: str, rules: tuple[StyleRule, ...] = STYLE_RULES
) -> StyleResult:
    """Rewrite a raw upstream version into house style.

    Parameters
    ----------
    raw : str
        Version as discovered upstream.
    rules : tuple of StyleRule, optional
        Ordered rules to try. Defaults to STYLE_RULES.

    Returns
    -------
    StyleResult
        The normalized version, the input, and the rule that fired.

    Examples
    --------
        >>> normalize_version("2.16-RC1").version
        '2.16~rc1'
        >>> normalize_version("1.2.3").changed
        False
    """
    version = raw.strip().lower()
    fired: list[str] = []
    # A rewrite can expose a spelling an earlier rule handles ("1_2b3" ->
    # "1.2b3" -> "1.2~b3"), so repeat until no rule changes the version.
    for _ in range(len(rules)):
        rule = next((r for r in rules if r.classifier.fullmatch(version)), None)
        if rule is None:
            break
        rewritten = rule.pattern.sub(rule.replacement, version)
        if rewritten == version:
            break
        version = rewritten
        fired.append(rule.name)
    return StyleResult(
        version=version,
        original=raw,
        rule="+".join(fired) if fired else None,
    )
