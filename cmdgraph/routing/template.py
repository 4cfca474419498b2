"""Template parsing and compilation into the shared automaton.

A template is a space separated list of segments::

    ?config set key={} value={}     literal words followed by key/value flags
    ?ping {name}                    one whitespace-free token
    ?notify note...                 everything up to the end of the message
    ?run `code`                     single-line code, one or three backticks
    ?eval ```\\ncode```             fenced block with optional language tag
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from cmdgraph.routing.automaton import Automaton
from cmdgraph.routing.charclass import WHITESPACE, CharacterClass

FENCE = "```"
HELP_COMMAND = "help"

_KEY_VALUE = re.compile(r"^(?P<name>[^=]+)=\{\}$")

_ANY = CharacterClass.any()
_TOKEN = CharacterClass.any_except(" ")
_FLAG_VALUE = CharacterClass.any_except(" \n")
_LANGUAGE_TAG = CharacterClass.any_except("` \n")
_NEWLINE = CharacterClass.literal("\n")


class CompileError(ValueError):
    """Raised when a template cannot be compiled."""

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"Invalid command template {template!r}: {reason}")


class SegmentKind(Enum):
    """Kinds of template segments."""

    LITERAL = "literal"
    KEY_VALUE = "key_value"
    PLACEHOLDER = "placeholder"
    REMAINDER = "remainder"
    INLINE_CODE = "inline_code"
    BLOCK_CODE = "block_code"
    HELP_QUERY = "help_query"


@dataclass(frozen=True, slots=True)
class Segment:
    """A parsed template segment.

    ``value`` is the literal text for LITERAL, the base command for
    HELP_QUERY, and the parameter name for every other kind. ``fence``
    is the backtick count of INLINE_CODE segments.
    """

    kind: SegmentKind
    value: str
    fence: int = 0


def parse_segment(text: str, template: str) -> Segment:
    """Classify one whitespace-free chunk of a template.

    Raises:
        CompileError: If the chunk looks like a special form but is malformed.
    """
    key_value = _KEY_VALUE.match(text)
    if key_value:
        return Segment(SegmentKind.KEY_VALUE, key_value.group("name"))
    if text == "={}":
        raise CompileError(template, "key/value flag needs a name before '={}'")

    if text.startswith(FENCE + "\n"):
        if len(text) < 7 or not text.endswith(FENCE):
            raise CompileError(template, f"unterminated code block {text!r}")
        return _named(SegmentKind.BLOCK_CODE, text[4:-3], text, template)

    if text.startswith("`"):
        width = 3 if text.startswith(FENCE) and len(text) >= 6 else 1
        fence = "`" * width
        if len(text) < 2 * width or not text.endswith(fence):
            raise CompileError(template, f"unterminated code segment {text!r}")
        segment = _named(SegmentKind.INLINE_CODE, text[width:-width], text, template)
        return Segment(segment.kind, segment.value, fence=width)

    if text.startswith("{") and text.endswith("}"):
        return _named(SegmentKind.PLACEHOLDER, text[1:-1], text, template)

    if text.endswith("..."):
        return _named(SegmentKind.REMAINDER, text[:-3], text, template)

    return Segment(SegmentKind.LITERAL, text)


def _named(kind: SegmentKind, name: str, text: str, template: str) -> Segment:
    if not name or any(ch in name for ch in "` \n{}"):
        raise CompileError(template, f"invalid parameter name in {text!r}")
    return Segment(kind, name)


def parse_template(template: str) -> list[Segment]:
    """Split a template on spaces and classify every segment.

    Examples::

        "?say {msg}"   -> [Segment(LITERAL, "?say"), Segment(PLACEHOLDER, "msg")]
        "?cfg a={}"    -> [Segment(LITERAL, "?cfg"), Segment(KEY_VALUE, "a")]

    Raises:
        CompileError: If the template is empty or structurally invalid.
    """
    segments = [parse_segment(chunk, template) for chunk in template.split(" ") if chunk]
    if not segments:
        raise CompileError(template, "template is empty")

    for i, segment in enumerate(segments):
        if segment.kind is SegmentKind.REMAINDER and i != len(segments) - 1:
            raise CompileError(template, f"'{segment.value}...' must be the last segment")
        if (
            segment.kind is not SegmentKind.KEY_VALUE
            and i > 0
            and segments[i - 1].kind is SegmentKind.KEY_VALUE
        ):
            raise CompileError(template, "key/value flags must form a trailing run")
    if segments[0].kind is SegmentKind.KEY_VALUE:
        raise CompileError(template, "template cannot start with a key/value flag")

    return segments


def parameter_names(segments: list[Segment]) -> tuple[str, ...]:
    """Names a template can capture, in template order, without duplicates."""
    names: list[str] = []
    for segment in segments:
        if segment.kind is SegmentKind.BLOCK_CODE:
            candidates = [f"{segment.value}_lang", segment.value]
        elif segment.kind in (SegmentKind.LITERAL, SegmentKind.HELP_QUERY):
            candidates = []
        else:
            candidates = [segment.value]
        names.extend(name for name in candidates if name not in names)
    return tuple(names)


class TemplateCompiler:
    """Adds template paths to a shared automaton.

    Each call to ``compile`` grows the graph, reusing any existing prefix,
    and marks the accepting state(s) with the caller's binding.
    """

    def __init__(self, automaton: Automaton[Any]) -> None:
        self._automaton = automaton

    def compile(self, template: str, binding: Any) -> list[int]:
        """Compile ``template`` and bind its accepting states to ``binding``.

        Returns:
            The states marked final, in the order they were reached.

        Raises:
            CompileError: If the template is malformed.
        """
        return self.compile_segments(parse_template(template), binding)

    def compile_help(self, prefix: str, command: str, binding: Any) -> list[int]:
        """Compile the ``<prefix>help <command>`` query path for ``command``.

        The command's leading ``prefix`` is stripped.
        """
        base = command[len(prefix):] if command.startswith(prefix) else command
        if not base or any(ch.isspace() for ch in base):
            raise CompileError(command, "help entries need a single-word command")
        segments = [
            Segment(SegmentKind.LITERAL, f"{prefix}{HELP_COMMAND}"),
            Segment(SegmentKind.HELP_QUERY, base),
        ]
        return self.compile_segments(segments, binding)

    def compile_segments(self, segments: list[Segment], binding: Any) -> list[int]:
        state = 0
        hub: int | None = None
        finals: list[int] = []

        for i, segment in enumerate(segments):
            if segment.kind is SegmentKind.KEY_VALUE:
                if hub is None:
                    finals.append(state)
                    hub = self._whitespace(state)
                state = self._key_value(segment.value, hub)
                self._automaton.add_alias_edge(state, WHITESPACE, hub)
                finals.append(state)
                continue

            if i > 0:
                state = self._whitespace(state)

            if segment.kind is SegmentKind.BLOCK_CODE:
                state = self._block_code(segment.value, state)
            elif segment.kind is SegmentKind.INLINE_CODE:
                state = self._inline_code(segment.value, state, segment.fence)
            elif segment.kind is SegmentKind.PLACEHOLDER:
                state = self._capture(segment.value, state, _TOKEN)
            elif segment.kind is SegmentKind.REMAINDER:
                state = self._capture(segment.value, state, _ANY)
            else:
                state = self._literal(segment.value, state)

        if hub is None:
            finals = [state]
        for final in finals:
            self._automaton.mark_final(final, binding)
        return finals

    def _literal(self, text: str, state: int) -> int:
        for char in text:
            state = self._automaton.add_edge(state, CharacterClass.literal(char))
        return state

    def _whitespace(self, state: int) -> int:
        state = self._automaton.add_edge(state, WHITESPACE)
        self._automaton.add_alias_edge(state, WHITESPACE, state)
        return state

    def _capture(self, name: str, state: int, label: CharacterClass) -> int:
        state = self._automaton.add_edge(state, label)
        self._automaton.add_alias_edge(state, label, state)
        self._automaton.mark_capture_begin(state, name)
        self._automaton.mark_capture_end(state, name)
        return state

    def _key_value(self, name: str, hub: int) -> int:
        state = self._literal(f"{name}=", hub)
        return self._capture(name, state, _FLAG_VALUE)

    def _inline_code(self, name: str, state: int, width: int) -> int:
        fence = "`" * width
        state = self._literal(fence, state)
        state = self._capture(name, state, _ANY)
        return self._literal(fence, state)

    def _block_code(self, name: str, state: int) -> int:
        opening = self._literal(FENCE, state)

        language = self._capture(f"{name}_lang", opening, _LANGUAGE_TAG)
        body_start = self._automaton.add_edge(language, _NEWLINE)
        self._automaton.add_alias_edge(opening, _NEWLINE, body_start)

        state = self._capture(name, body_start, _ANY)
        return self._literal(FENCE, state)
