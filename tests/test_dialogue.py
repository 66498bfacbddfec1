"""Unit tests for core/dialogue.py."""

import pytest

from core.dialogue import Dialogue, Turn, assemble_prompt, word_count


class TestWordCount:
    """Tests for the word-count approximation."""

    def test_counts_space_separated_words(self):
        assert word_count("the quick brown fox") == 4

    def test_trims_surrounding_whitespace(self):
        assert word_count("  hello world \n") == 2

    def test_empty_text_counts_as_one(self):
        """Splitting an empty string still yields one (empty) token."""
        assert word_count("") == 1
        assert word_count("   ") == 1

    def test_only_literal_spaces_split(self):
        """Newlines and doubled spaces are not normalised."""
        assert word_count("one\ntwo") == 1
        assert word_count("one  two") == 3


class TestDialogue:
    """Tests for Dialogue push/append/reset."""

    def test_len_and_truncation(self):
        """Three 400-word pushes into an 800 budget: 400, 800, 800."""
        d = Dialogue(800)
        big = "test " * 400
        totals = []

        for _ in range(3):
            d.push("t", big)
            totals.append(d.total_len)

        assert totals == [400, 800, 800]
        assert len(d) == 2

    def test_total_len_matches_turns(self):
        """total_len should always equal the sum of the present turns."""
        d = Dialogue(50)
        for i in range(40):
            d.push("user" if i % 2 else "model", "word " * (i % 9 + 1))
            assert d.total_len == sum(word_count(t.text) for t in d)
            assert d.total_len <= d.max_len or len(d) == 0

    def test_oversized_turn_empties_buffer(self):
        """A single turn over budget evicts everything, itself included."""
        d = Dialogue(10)
        d.push("user", "a b c")
        d.push("user", "word " * 20)

        assert len(d) == 0
        assert d.total_len == 0

    def test_evicts_oldest_first(self):
        d = Dialogue(4)
        d.push("user", "one two")
        d.push("model", "three four")
        d.push("user", "five")

        assert [t.text for t in d] == ["three four", "five"]

    def test_append_pushes_one_at_a_time(self):
        """Eviction during append can drop turns of the receiving buffer."""
        a = Dialogue(5)
        a.push("user", "a1 a2")
        a.push("model", "a3 a4")

        b = Dialogue(100)
        b.push("user", "b1 b2")
        b.push("model", "b3 b4 b5")

        a.append(b)

        assert [t.text for t in a] == ["b1 b2", "b3 b4 b5"]
        assert a.total_len == 5

    def test_append_preserves_order(self):
        a = Dialogue(100)
        a.push("user", "first")
        b = Dialogue(100)
        b.push("model", "second")
        b.push("user", "third")

        a.append(b)

        assert a.turns == [Turn("user", "first"), Turn("model", "second"), Turn("user", "third")]
        assert len(b) == 2

    def test_reset_keeps_budget(self):
        d = Dialogue(123)
        d.push("user", "hello there")
        d.reset()

        assert len(d) == 0
        assert d.total_len == 0
        assert d.max_len == 123

    def test_copy_is_independent(self):
        d = Dialogue(100)
        d.push("user", "hello")
        clone = d.copy()
        clone.push("model", "hi")

        assert len(d) == 1
        assert len(clone) == 2
        assert clone.max_len == 100

    def test_turns_are_immutable(self):
        turn = Turn("user", "hi")
        with pytest.raises(AttributeError):
            turn.text = "changed"


class TestAssemblePrompt:
    """Tests for assemble_prompt."""

    def test_groups_adjacent_roles(self):
        d = Dialogue()
        d.push("user", "ab")
        d.push("user", "cd")
        d.push("model", "ef")
        d.push("model", "gh")

        assert assemble_prompt(d) == [("user", "ab\n\ncd"), ("model", "ef\n\ngh")]

    def test_grouping_is_adjacency_only(self):
        d = Dialogue()
        d.push("user", "1")
        d.push("model", "2")
        d.push("user", "3")

        assert assemble_prompt(d) == [("user", "1"), ("model", "2"), ("user", "3")]

    def test_concatenated_buffers(self):
        """Preamble and dialogue turns fold across the boundary."""
        preamble = Dialogue()
        preamble.push("model", "I am a bot.")
        dialogue = Dialogue()
        dialogue.push("model", "Hello!")
        dialogue.push("user", "Hi")

        result = assemble_prompt([*preamble, *dialogue])

        assert result == [("model", "I am a bot.\n\nHello!"), ("user", "Hi")]

    def test_empty(self):
        assert assemble_prompt([]) == []
