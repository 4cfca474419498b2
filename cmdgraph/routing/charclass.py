"""Single-character predicates used as automaton edge labels."""

from dataclasses import dataclass
from enum import Enum


class ClassKind(Enum):
    """How a character class decides membership."""

    LITERAL = "literal"
    INCLUDE = "include"
    EXCLUDE_ALL = "exclude_all"


@dataclass(frozen=True, slots=True)
class CharacterClass:
    """A predicate over one input character.

    Equality is structural (same kind, same characters), which is what
    edge merging relies on: two templates that spell the same class at
    the same state share one outgoing edge.

    Attributes:
        kind: Literal, inclusion set, or "anything except" set.
        chars: The literal character, the included set, or the excluded set.
    """

    kind: ClassKind
    chars: frozenset[str]

    @classmethod
    def literal(cls, char: str) -> "CharacterClass":
        """Class accepting exactly ``char``."""
        if len(char) != 1:
            raise ValueError(f"Literal class needs exactly one character, got {char!r}")
        return cls(ClassKind.LITERAL, frozenset(char))

    @classmethod
    def any(cls) -> "CharacterClass":
        """Class accepting every character."""
        return cls(ClassKind.EXCLUDE_ALL, frozenset())

    @classmethod
    def include(cls, chars: str | frozenset[str] | set[str]) -> "CharacterClass":
        """Class accepting any character in ``chars``."""
        return cls(ClassKind.INCLUDE, frozenset(chars))

    @classmethod
    def any_except(cls, chars: str | frozenset[str] | set[str]) -> "CharacterClass":
        """Class accepting any character not in ``chars``."""
        return cls(ClassKind.EXCLUDE_ALL, frozenset(chars))

    def accepts(self, char: str) -> bool:
        """Check whether ``char`` belongs to this class."""
        if self.kind is ClassKind.EXCLUDE_ALL:
            return char not in self.chars
        return char in self.chars

    def insert(self, char: str) -> "CharacterClass":
        """Return a class that additionally accepts ``char``."""
        if self.kind is ClassKind.EXCLUDE_ALL:
            return CharacterClass(ClassKind.EXCLUDE_ALL, self.chars - {char})
        if self.kind is ClassKind.LITERAL and char in self.chars:
            return self
        return CharacterClass(ClassKind.INCLUDE, self.chars | {char})

    def remove(self, char: str) -> "CharacterClass":
        """Return a class that no longer accepts ``char``."""
        if self.kind is ClassKind.EXCLUDE_ALL:
            return CharacterClass(ClassKind.EXCLUDE_ALL, self.chars | {char})
        if self.kind is ClassKind.LITERAL and char not in self.chars:
            return self
        return CharacterClass(ClassKind.INCLUDE, self.chars - {char})

    def __repr__(self) -> str:
        chars = "".join(sorted(self.chars))
        if self.kind is ClassKind.LITERAL:
            return f"CharacterClass.literal({chars!r})"
        if self.kind is ClassKind.INCLUDE:
            return f"CharacterClass.include({chars!r})"
        return f"CharacterClass.any_except({chars!r})"


WHITESPACE = CharacterClass.include(" \n")
