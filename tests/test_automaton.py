"""Tests for the shared command automaton."""

import pytest

from cmdgraph.routing.automaton import START, Automaton
from cmdgraph.routing.charclass import CharacterClass

A = CharacterClass.literal("a")
B = CharacterClass.literal("b")
TOKEN = CharacterClass.any_except(" ")


def _word(automaton: Automaton, word: str, state: int = START) -> int:
    for ch in word:
        state = automaton.add_edge(state, CharacterClass.literal(ch))
    return state


def _loop(automaton: Automaton, state: int, label: CharacterClass, name: str) -> int:
    state = automaton.add_edge(state, label)
    automaton.add_alias_edge(state, label, state)
    automaton.mark_capture_begin(state, name)
    automaton.mark_capture_end(state, name)
    return state


@pytest.fixture
def automaton() -> Automaton:
    return Automaton()


class TestConstruction:
    """Edge building and prefix sharing."""

    def test_starts_with_single_state(self, automaton):
        assert automaton.state_count == 1
        assert automaton.edges(START) == ()

    def test_add_edge_allocates_fresh_state(self, automaton):
        target = automaton.add_edge(START, A)
        assert target == 1
        assert automaton.state_count == 2
        assert automaton.edges(START)[0].target == target

    def test_add_edge_reuses_equal_edge(self, automaton):
        first = automaton.add_edge(START, A)
        second = automaton.add_edge(START, CharacterClass.literal("a"))
        assert first == second
        assert automaton.state_count == 2

    def test_prefix_shared_between_words(self, automaton):
        ping = _word(automaton, "ping")
        pong = _word(automaton, "pong")
        # "p" shared, "ing" and "ong" separate
        assert automaton.state_count == 1 + 1 + 3 + 3
        assert ping != pong

    def test_alias_edge_not_duplicated(self, automaton):
        state = automaton.add_edge(START, A)
        automaton.add_alias_edge(state, A, state)
        automaton.add_alias_edge(state, A, state)
        assert len(automaton.edges(state)) == 1

    def test_alias_edge_to_unknown_state(self, automaton):
        with pytest.raises(IndexError):
            automaton.add_alias_edge(START, A, 42)

    def test_edges_keep_insertion_order(self, automaton):
        automaton.add_edge(START, B)
        automaton.add_edge(START, A)
        assert [edge.label for edge in automaton.edges(START)] == [B, A]

    def test_mark_final_last_binding_wins(self, automaton):
        state = automaton.add_edge(START, A)
        automaton.mark_final(state, "first")
        automaton.mark_final(state, "second")
        assert automaton.binding(state) == "second"
        assert automaton.is_final(state)
        assert not automaton.is_final(START)

    def test_capture_names_accumulate(self, automaton):
        state = automaton.add_edge(START, A)
        automaton.mark_capture_begin(state, "x")
        automaton.mark_capture_begin(state, "y")
        automaton.mark_capture_begin(state, "x")
        assert automaton.captures_at(state) == ("x", "y")

    def test_frozen_rejects_construction(self, automaton):
        automaton.freeze()
        assert automaton.frozen
        with pytest.raises(RuntimeError):
            automaton.add_edge(START, A)
        with pytest.raises(RuntimeError):
            automaton.mark_final(START, "x")


class TestMatch:
    """Whole-input scanning."""

    def test_exact_word(self, automaton):
        automaton.mark_final(_word(automaton, "ping"), "ping")
        result = automaton.match("ping")
        assert result is not None
        assert result.binding == "ping"
        assert result.params == {}

    def test_partial_prefix_fails(self, automaton):
        automaton.mark_final(_word(automaton, "ping"), "ping")
        assert automaton.match("pin") is None

    def test_trailing_input_fails(self, automaton):
        automaton.mark_final(_word(automaton, "ping"), "ping")
        assert automaton.match("pings") is None

    def test_empty_input_on_non_final_start(self, automaton):
        automaton.mark_final(_word(automaton, "ping"), "ping")
        assert automaton.match("") is None

    def test_empty_input_on_final_start(self, automaton):
        automaton.mark_final(START, "root")
        result = automaton.match("")
        assert result is not None
        assert result.binding == "root"

    def test_final_state_with_onward_edges(self, automaton):
        short = _word(automaton, "ab")
        long = _word(automaton, "c", short)
        automaton.mark_final(short, "short")
        automaton.mark_final(long, "long")
        assert automaton.match("ab").binding == "short"
        assert automaton.match("abc").binding == "long"

    def test_self_loop_capture(self, automaton):
        state = _word(automaton, "x")
        state = _loop(automaton, state, TOKEN, "value")
        automaton.mark_final(state, "x")
        result = automaton.match("xhello")
        assert result.params == {"value": "hello"}

    def test_capture_closes_when_leaving_anchor(self, automaton):
        state = _loop(automaton, START, CharacterClass.any_except(";"), "head")
        state = _word(automaton, ";", state)
        automaton.mark_final(state, "done")
        assert automaton.match("abc;").params == {"head": "abc"}

    def test_earlier_edge_wins_on_tie(self, automaton):
        literal = _word(automaton, "hi")
        automaton.mark_final(literal, "literal")
        wildcard = _loop(automaton, START, TOKEN, "word")
        automaton.mark_final(wildcard, "wildcard")

        assert automaton.match("hi").binding == "literal"
        result = automaton.match("ho")
        assert result.binding == "wildcard"
        assert result.params == {"word": "ho"}

    def test_later_edge_wins_when_registered_first(self, automaton):
        wildcard = _loop(automaton, START, TOKEN, "word")
        automaton.mark_final(wildcard, "wildcard")
        literal = _word(automaton, "hi")
        automaton.mark_final(literal, "literal")

        assert automaton.match("hi").binding == "wildcard"

    def test_loop_and_terminator_coexist(self, automaton):
        # A permissive loop inserted before its literal terminator must not
        # swallow the terminator.
        state = _loop(automaton, START, CharacterClass.any(), "body")
        end = _word(automaton, "!", state)
        automaton.mark_final(end, "bang")

        result = automaton.match("a!b!")
        assert result.binding == "bang"
        assert result.params == {"body": "a!b"}

    def test_no_edge_fails_early(self, automaton):
        automaton.mark_final(_word(automaton, "ab"), "ab")
        assert automaton.match("xb") is None

    def test_long_input_is_linear(self, automaton):
        state = _loop(automaton, START, CharacterClass.any(), "rest")
        automaton.mark_final(state, "rest")
        text = "x" * 50_000
        assert automaton.match(text).params == {"rest": text}

    def test_match_reports_final_state(self, automaton):
        state = _word(automaton, "ok")
        automaton.mark_final(state, "ok")
        assert automaton.match("ok").state == state
