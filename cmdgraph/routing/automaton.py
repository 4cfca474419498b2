"""Shared command automaton.

States are dense integer ids stored in parallel lists (an arena), so the
self-loops and back-edges that templates produce never form reference
cycles. The graph grows during registration and is frozen before traffic
starts; after that ``match`` only reads it.
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from cmdgraph.routing.charclass import CharacterClass

T = TypeVar("T")

START = 0


@dataclass(frozen=True, slots=True)
class Edge:
    """A labelled transition to ``target``."""

    label: CharacterClass
    target: int


@dataclass
class MatchResult(Generic[T]):
    """Result of a successful whole-input match."""

    binding: T
    params: dict[str, str] = field(default_factory=dict)
    state: int = START


@dataclass(slots=True)
class _Path:
    """One live walk through the graph during a scan.

    Captures are kept as one ``(start, end)`` span per name into the input,
    so advancing a path never copies captured text. Re-entering a capture
    replaces its span.
    """

    state: int
    open_names: tuple[str, ...] = ()
    spans: dict[str, tuple[int, int]] = field(default_factory=dict)


class Automaton(Generic[T]):
    """Character-level automaton with prefix sharing and named captures.

    Usage::

        automaton = Automaton()
        state = automaton.add_edge(0, CharacterClass.literal("a"))
        automaton.mark_final(state, binding)
        automaton.freeze()
        result = automaton.match("a")
    """

    __slots__ = ("_bindings", "_capture_begin", "_capture_end", "_edges", "_frozen")

    def __init__(self) -> None:
        self._edges: list[list[Edge]] = [[]]
        self._bindings: list[T | None] = [None]
        self._capture_begin: list[tuple[str, ...]] = [()]
        self._capture_end: list[tuple[str, ...]] = [()]
        self._frozen = False

    @property
    def state_count(self) -> int:
        """Number of allocated states."""
        return len(self._edges)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def edges(self, state: int) -> tuple[Edge, ...]:
        """Outgoing edges of ``state`` in insertion order."""
        self._check_state(state)
        return tuple(self._edges[state])

    def is_final(self, state: int) -> bool:
        self._check_state(state)
        return self._bindings[state] is not None

    def binding(self, state: int) -> T | None:
        self._check_state(state)
        return self._bindings[state]

    def captures_at(self, state: int) -> tuple[str, ...]:
        """Names whose capture region begins at ``state``."""
        self._check_state(state)
        return self._capture_begin[state]

    def add_edge(self, state: int, label: CharacterClass) -> int:
        """Follow or create an edge from ``state`` labelled ``label``.

        Returns the target of an existing structurally equal edge when
        there is one, otherwise a freshly allocated state.
        """
        self._check_mutable()
        self._check_state(state)
        for edge in self._edges[state]:
            if edge.label == label:
                return edge.target

        target = self._new_state()
        self._edges[state].append(Edge(label, target))
        return target

    def add_alias_edge(self, state: int, label: CharacterClass, target: int) -> None:
        """Add an edge from ``state`` to an already existing ``target``.

        Used for self-loops and for returning to a hub state. An
        identical edge is never added twice.
        """
        self._check_mutable()
        self._check_state(state)
        self._check_state(target)
        edge = Edge(label, target)
        if edge not in self._edges[state]:
            self._edges[state].append(edge)

    def mark_final(self, state: int, binding: T) -> None:
        """Bind ``binding`` to ``state``. The latest binding wins."""
        self._check_mutable()
        self._check_state(state)
        self._bindings[state] = binding

    def mark_capture_begin(self, state: int, name: str) -> None:
        self._check_mutable()
        self._check_state(state)
        if name not in self._capture_begin[state]:
            self._capture_begin[state] += (name,)

    def mark_capture_end(self, state: int, name: str) -> None:
        self._check_mutable()
        self._check_state(state)
        if name not in self._capture_end[state]:
            self._capture_end[state] += (name,)

    def freeze(self) -> None:
        """Stop accepting construction calls. Safe to call repeatedly."""
        self._frozen = True

    def match(self, text: str) -> MatchResult[T] | None:
        """Match the whole of ``text`` starting at the start state.

        All live paths advance one character at a time. Paths are kept in
        priority order: a path created by an earlier-inserted edge outranks
        one created by a later edge, and only the highest-ranked path per
        state survives each step. After the last character the
        highest-ranked path resting on a final state wins.

        Returns:
            MatchResult with the binding and captured parameters, or None.
        """
        paths = [_Path(START)]

        for index, char in enumerate(text):
            next_paths: list[_Path] = []
            seen: set[int] = set()
            for path in paths:
                for edge in self._edges[path.state]:
                    if edge.target in seen or not edge.label.accepts(char):
                        continue
                    seen.add(edge.target)
                    next_paths.append(self._step(path, edge.target, index))
            if not next_paths:
                return None
            paths = next_paths

        for path in paths:
            binding = self._bindings[path.state]
            if binding is not None:
                params = {name: text[start:end] for name, (start, end) in path.spans.items()}
                return MatchResult(binding=binding, params=params, state=path.state)
        return None

    def _step(self, path: _Path, target: int, index: int) -> _Path:
        """Advance ``path`` into ``target`` over the character at ``index``."""
        open_names = path.open_names
        if target != path.state and self._capture_end[path.state]:
            closing = self._capture_end[path.state]
            open_names = tuple(name for name in open_names if name not in closing)

        opening = tuple(name for name in self._capture_begin[target] if name not in open_names)
        if not opening and not open_names:
            return _Path(target, open_names, path.spans)

        spans = dict(path.spans)
        for name in open_names:
            spans[name] = (spans[name][0], index + 1)
        for name in opening:
            spans[name] = (index, index + 1)

        return _Path(target, open_names + opening, spans)

    def _new_state(self) -> int:
        self._edges.append([])
        self._bindings.append(None)
        self._capture_begin.append(())
        self._capture_end.append(())
        return len(self._edges) - 1

    def _check_state(self, state: int) -> None:
        if not 0 <= state < len(self._edges):
            raise IndexError(f"Unknown state {state}")

    def _check_mutable(self) -> None:
        if self._frozen:
            msg = "Cannot modify the automaton after it has been frozen."
            raise RuntimeError(msg)
