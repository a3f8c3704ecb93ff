"""Command-aware completion: command names first, then per-argument completers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator

from tabline.completer import NO_MATCH, Completer, ResolvingStringSetCompleter
from tabline.types import Candidate
from tabline.utils import ends_token

_WHITESPACE_RE = re.compile(r"\s+")


class ArgumentTokenizer:
    """Splits a command line on runs of whitespace.

    The first word is the command, the rest are its arguments. ``offset`` is
    where the last argument starts, found by searching for the last
    occurrence of its text in the line. The cursor is not consulted: with
    the cursor inside an earlier word, the offset and argument index still
    describe the final word of the line.
    """

    def __init__(self, line: str) -> None:
        self.line = line
        parts = _WHITESPACE_RE.split(line)
        if line:
            while parts and parts[-1] == "":
                parts.pop()

        self.command: str | None = parts[0] if parts else None
        self.arguments: list[str] = parts[1:]

        if self.arguments:
            self.last_argument: str | None = self.arguments[-1]
            self.offset = line.rfind(self.last_argument)
        else:
            self.last_argument = None
            self.offset = len(line)

    @property
    def last_argument_index(self) -> int:
        return len(self.arguments) - 1

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(command={self.command!r}, "
            f"arguments={self.arguments!r}, offset={self.offset})"
        )


@dataclass
class CommandSpec:
    """A registered command and the completers for its positional arguments."""

    name: str
    completers: list[Completer] = field(default_factory=list)
    description: str | None = None


class CompleterRegistry:
    """Maps command names to their :class:`CommandSpec`.

    Built once when the shell is set up and only read during completion.
    """

    def __init__(self, commands: list[CommandSpec] | None = None) -> None:
        self._commands: dict[str, CommandSpec] = {}
        for spec in commands or []:
            self.add(spec)

    def add(self, spec: CommandSpec) -> None:
        self._commands[spec.name] = spec

    def register(self, name: str, *completers: Completer, description: str | None = None) -> CommandSpec:
        spec = CommandSpec(name=name, completers=list(completers), description=description)
        self.add(spec)
        return spec

    def add_help_command(self, name: str = "help") -> CommandSpec:
        """Register a help command whose single argument is a command name."""
        return self.register(
            name,
            ResolvingStringSetCompleter(self.names),
            description="Show usage for a command",
        )

    def get(self, name: str) -> CommandSpec | None:
        return self._commands.get(name)

    def names(self) -> list[str]:
        return sorted(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)


class CommandDispatchCompleter:
    """Completes command names, then delegates to the command's completers.

    Command-name completion wins whenever it matches. Otherwise the line is
    tokenized and the completer registered for the current argument
    position receives just the last argument; its offset is shifted back
    into whole-line coordinates.
    """

    def __init__(self, registry: CompleterRegistry) -> None:
        self._registry = registry
        self._command_names = ResolvingStringSetCompleter(registry.names)

    @property
    def registry(self) -> CompleterRegistry:
        return self._registry

    def complete(self, buffer: str, cursor: int, candidates: list[Candidate]) -> int:
        buffer = buffer or ""
        pos = self._command_names.complete(buffer, cursor, candidates)
        if pos != NO_MATCH:
            return pos

        tokens = ArgumentTokenizer(buffer)
        if tokens.command is None:
            return NO_MATCH
        spec = self._registry.get(tokens.command)
        if spec is None:
            return NO_MATCH

        index = max(tokens.last_argument_index, 0)
        if index >= len(spec.completers):
            return NO_MATCH

        start = len(candidates)
        argument = tokens.last_argument or ""
        result = spec.completers[index].complete(argument, len(argument), candidates)
        if result == NO_MATCH or len(candidates) == start:
            return NO_MATCH

        if len(candidates) - start == 1:
            only = candidates[start]
            if not ends_token(only.value):
                candidates[start] = only.with_value(only.value + " ")
        return result + tokens.offset

