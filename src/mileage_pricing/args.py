"""Option-spec driven parsing of raw ``name=value`` command tokens.

Commands receive their tokens untouched from the CLI layer. Each token is
matched against every registered ``OptionSpec``; a token that fails to parse
is reported and ignored instead of aborting the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

_TRUE_VALUES = ("true", "t", "y")
_FALSE_VALUES = ("false", "f", "n")


class OptionKind(StrEnum):
    """Value kinds an option can carry."""

    FLAG = "flag"
    FLOAT = "float"
    INT = "int"
    STRING = "string"
    PATH = "path"


_VALUE_HINTS: dict[OptionKind, str] = {
    OptionKind.FLAG: "|".join(_TRUE_VALUES + _FALSE_VALUES),
    OptionKind.FLOAT: "<float>",
    OptionKind.INT: "<int>",
    OptionKind.STRING: "<string>",
    OptionKind.PATH: "<path>",
}


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """One recognised option: its names, value kind and fallback value."""

    key: str
    names: tuple[str, ...]
    kind: OptionKind
    description: str
    default: Any = None

    def match(self, token: str) -> tuple[bool, str | None]:
        """Return whether ``token`` names this option, plus its inline value."""
        for name in self.names:
            if token == name:
                return True, None
            if token.startswith(name + "="):
                return True, token[len(name) + 1 :]
        return False, None

    def parse_value(self, raw: str | None) -> Any:
        """Convert the raw inline value, raising ValueError with a readable message."""
        if self.kind == OptionKind.FLAG:
            if raw is None:
                return True
            lowered = raw.lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
            raise ValueError(
                f"Invalid value \"{raw}\", must be one of "
                f"{', '.join(_TRUE_VALUES + _FALSE_VALUES)}"
            )
        if raw is None:
            raise ValueError("Arg value is not optional, --help for more info")
        if self.kind == OptionKind.FLOAT:
            try:
                return float(raw)
            except ValueError as exc:
                raise ValueError(f"\"{raw}\": not a valid float") from exc
        if self.kind == OptionKind.INT:
            try:
                return int(raw)
            except ValueError as exc:
                raise ValueError(f"\"{raw}\": not a valid integer") from exc
        if self.kind == OptionKind.PATH:
            return Path(raw)
        return raw

    def usage(self) -> str:
        names = ", ".join(self.names)
        return f"{names}={_VALUE_HINTS[self.kind]}  {self.description}"


@dataclass(slots=True)
class ParsedOptions:
    """Result of one dispatch pass over a token list."""

    tokens: list[str]
    specs: tuple[OptionSpec, ...]
    values: dict[str, Any] = field(default_factory=dict)
    used: list[bool] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def get(self, key: str) -> Any:
        """Return the parsed value or the spec default when the option was absent."""
        if key in self.values:
            return self.values[key]
        for spec in self.specs:
            if spec.key == key:
                return spec.default
        raise KeyError(key)

    def mark_used(self, idx: int) -> None:
        self.used[idx] = True

    def unused(self) -> list[tuple[int, str]]:
        return [(idx, token) for idx, token in enumerate(self.tokens) if not self.used[idx]]

    def report_unrecognized(self) -> list[str]:
        """Record an error for every token nothing has consumed, and return them."""
        messages = [
            arg_error(idx, token, "Arg is not recognized, ignoring. --help for more info")
            for idx, token in self.unused()
        ]
        self.errors.extend(messages)
        return messages


def arg_error(idx: int, token: str, message: str) -> str:
    """Format a per-token diagnostic using a 1-based position."""
    return f"Error in arg {idx + 1} \"{token}\": {message}"


def parse_options(tokens: list[str], specs: tuple[OptionSpec, ...]) -> ParsedOptions:
    """Scan ``tokens`` once, dispatching each to the first spec that names it."""
    parsed = ParsedOptions(tokens=list(tokens), specs=specs, used=[False] * len(tokens))
    for idx, token in enumerate(tokens):
        for spec in specs:
            matched, raw = spec.match(token)
            if not matched:
                continue
            parsed.mark_used(idx)
            try:
                value = spec.parse_value(raw)
            except ValueError as exc:
                parsed.errors.append(arg_error(idx, token, str(exc)))
                break
            if spec.key in parsed.values:
                parsed.errors.append(
                    arg_error(idx, token, "Arg has already been set, ignoring")
                )
            else:
                parsed.values[spec.key] = value
            break
    return parsed
