"""Banner pseudo-rule used to split rule output into sections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from git_ruler.git import GitRepository
from git_ruler.rules.base import RuleOptions, RuleParameters, RuleResult

DEFAULT_SEPARATOR = "-"
DEFAULT_WIDTH = 60


@dataclass(frozen=True, slots=True)
class TextBanner:
    """Renders a heading line; never checked, scored or skipped."""

    kind: ClassVar[str] = "text"
    heading: str = ""
    separator: str = DEFAULT_SEPARATOR
    width: int = DEFAULT_WIDTH
    double_space: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> TextBanner:
        separator = params.optional_string("separator")
        width = params.integer("width", DEFAULT_WIDTH)
        if width < 0:
            raise ValueError(f"{params.label}: 'width' must be >= 0")
        return cls(
            heading=params.optional_string("heading") or "",
            separator=separator or DEFAULT_SEPARATOR,
            width=width,
            double_space=params.boolean("double-space"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        if self.heading:
            label = f" {self.heading} "
            fill = max(self.width - len(label), 0)
            left = fill // 2
            line = _repeat(self.separator, left) + label + _repeat(self.separator, fill - left)
        else:
            line = _repeat(self.separator, self.width)
        if self.double_space:
            return "\n" + line
        return line

    def evaluate(self, repo: GitRepository) -> RuleResult:
        return RuleResult(passed=True)


def _repeat(separator: str, length: int) -> str:
    if length <= 0:
        return ""
    return (separator * length)[:length]
