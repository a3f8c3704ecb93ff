"""tabline: tab completion and non-blocking input for terminal line editors."""

# Completion application
from tabline.applier import CompletionApplier

# Command-aware completion
from tabline.arguments import (
    ArgumentTokenizer,
    CommandDispatchCompleter,
    CommandSpec,
    CompleterRegistry,
)

# Edit buffer
from tabline.buffer import EditBuffer, LineBuffer

# Non-blocking input
from tabline.char_source import CharSource, CharSourceShutdownError

# Completers
from tabline.completer import (
    NO_MATCH,
    AggregateCompleter,
    Completer,
    ResolvingStringSetCompleter,
    StringSetCompleter,
    run_completer,
)

# Configuration
from tabline.config import CompletionOptions, Messages

# File name completion
from tabline.file_completer import (
    FileSystemCompleter,
    PathEntry,
    parse_rendered_name,
    render_name,
)

# Terminal collaborators
from tabline.terminal import (
    FixedTerminalAttributes,
    StreamTerminalOutput,
    TerminalAttributes,
    TerminalOutput,
)

# Shared types
from tabline.types import (
    EOF,
    NOT_READY,
    Candidate,
    CharSourceState,
    CompletionOutcome,
    ReadSignal,
)

# Text utilities
from tabline.utils import common_prefix, format_columns, strip_ansi, visible_width

__all__ = [
    # Completion application
    "CompletionApplier",
    # Command-aware completion
    "ArgumentTokenizer",
    "CommandDispatchCompleter",
    "CommandSpec",
    "CompleterRegistry",
    # Edit buffer
    "EditBuffer",
    "LineBuffer",
    # Non-blocking input
    "CharSource",
    "CharSourceShutdownError",
    # Completers
    "NO_MATCH",
    "AggregateCompleter",
    "Completer",
    "ResolvingStringSetCompleter",
    "StringSetCompleter",
    "run_completer",
    # Configuration
    "CompletionOptions",
    "Messages",
    # File name completion
    "FileSystemCompleter",
    "PathEntry",
    "parse_rendered_name",
    "render_name",
    # Terminal collaborators
    "FixedTerminalAttributes",
    "StreamTerminalOutput",
    "TerminalAttributes",
    "TerminalOutput",
    # Shared types
    "EOF",
    "NOT_READY",
    "Candidate",
    "CharSourceState",
    "CompletionOutcome",
    "ReadSignal",
    # Text utilities
    "common_prefix",
    "format_columns",
    "strip_ansi",
    "visible_width",
]
