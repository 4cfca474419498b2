"""Routing: character classes, the shared automaton, and template compilation."""

from cmdgraph.routing.automaton import Automaton, Edge, MatchResult
from cmdgraph.routing.charclass import CharacterClass, ClassKind
from cmdgraph.routing.template import (
    CompileError,
    Segment,
    SegmentKind,
    TemplateCompiler,
    parse_template,
)

__all__ = [
    "Automaton",
    "CharacterClass",
    "ClassKind",
    "CompileError",
    "Edge",
    "MatchResult",
    "Segment",
    "SegmentKind",
    "TemplateCompiler",
    "parse_template",
]
