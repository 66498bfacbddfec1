"""Unit tests for utils package."""

import pytest
from unittest.mock import AsyncMock, MagicMock

import discord


# =========================
# Tests for utils/logging.py
# =========================

class TestLogging:
    """Tests for logging utilities."""

    def test_log_outputs_with_timestamp(self, capsys):
        """log() should print message with timestamp prefix."""
        from utils.logging import log

        log("test message")
        captured = capsys.readouterr()

        assert "test message" in captured.out
        assert captured.out.startswith("[")
        assert "]" in captured.out

    def test_log_user_and_ai_are_marked(self, capsys):
        """log_user() and log_ai() should tag the direction of the text."""
        from utils.logging import log_user, log_ai

        log_user("alice: hello")
        log_ai("hi alice")
        out = capsys.readouterr().out.splitlines()

        assert "### alice: hello" in out[0]
        assert ">>> hi alice" in out[1]


# =========================
# Tests for utils/errors.py
# =========================

class TestErrors:
    """Tests for error helpers."""

    def test_error_keeps_cause(self):
        """CluthaError should carry the underlying exception."""
        from utils.errors import CluthaError

        cause = ValueError("boom")
        err = CluthaError("wrapped", cause=cause)

        assert str(err) == "wrapped"
        assert err.cause is cause

    def test_log_error_includes_traceback(self, capsys):
        """log_error() should print the traceback of the exception."""
        from utils.errors import log_error

        try:
            raise RuntimeError("kaput")
        except RuntimeError as exc:
            log_error("Something failed.", exc)

        out = capsys.readouterr().out
        assert "[ERROR] Something failed." in out
        assert "RuntimeError: kaput" in out

    @pytest.mark.asyncio
    async def test_report_discord_error_sends_notice(self):
        """report_discord_error() should post a visible notice."""
        from utils.errors import report_discord_error

        channel = MagicMock()
        channel.send = AsyncMock()

        await report_discord_error(channel, "Could not do it.")

        channel.send.assert_awaited_once_with("❌ Could not do it.")

    @pytest.mark.asyncio
    async def test_report_discord_error_survives_send_failure(self, capsys):
        """A failing send should be logged, not raised."""
        from utils.errors import report_discord_error

        channel = MagicMock()
        channel.send = AsyncMock(side_effect=discord.DiscordException("offline"))

        await report_discord_error(channel, "Could not do it.")

        assert "Could not post error notice" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_wrap_discord_errors_logs_and_swallows(self, capsys):
        """Wrapped handlers should not let exceptions escape the event loop."""
        from utils.errors import wrap_discord_errors

        @wrap_discord_errors
        async def on_message(message):
            raise RuntimeError("handler broke")

        assert on_message.__name__ == "on_message"
        await on_message(MagicMock())

        out = capsys.readouterr().out
        assert "Unhandled error in on_message" in out
        assert "handler broke" in out


# =========================
# Tests for utils/text.py
# =========================

class TestSplitResult:
    """Tests for split_result function."""

    def test_heading_stays_with_paragraph(self):
        """A blank line straight after a heading should not end the group."""
        from utils.text import split_result

        result = split_result("line 1\n\n* heading *\n\nline 2")

        assert result == ["line 1\n\n", "* heading *\n\nline 2\n"]

    def test_code_block_is_one_group(self):
        """A fenced block should come out whole, blank lines and all."""
        from utils.text import split_result

        text = "Here is some code:\n```python\ncode\n\nmore\n```\nThat was it."
        result = split_result(text)

        assert result == [
            "Here is some code:\n",
            "```python\ncode\n\nmore\n```\n",
            "That was it.\n",
        ]

    def test_blank_lines_split_paragraphs(self):
        """Each blank line should close the current paragraph."""
        from utils.text import split_result

        result = split_result("one\ntwo\n\nthree\n\nfour")

        assert result == ["one\ntwo\n\n", "three\n\n", "four\n"]

    def test_concatenation_is_lossless(self):
        """Joining the groups should give back the input plus a final newline."""
        from utils.text import split_result

        text = (
            "**Intro**\n\nSome words here.\n\n\nMore words.\n"
            "```\nx = 1\n\ny = 2\n```\n*note*\nend"
        )

        assert "".join(split_result(text)) == text + "\n"

    def test_unterminated_code_block_runs_to_end(self):
        """An unclosed fence should swallow the rest of the text."""
        from utils.text import split_result

        result = split_result("before\n```\nline\n\nline")

        assert result == ["before\n", "```\nline\n\nline\n"]

    def test_only_newlines_end_lines(self):
        """Form feeds and unicode separators should stay inside their line."""
        from utils.text import split_result

        text = "page one\x0cpage two same line\x85too\n\nnext"

        assert split_result(text) == ["page one\x0cpage two same line\x85too\n\n", "next\n"]

    def test_crlf_line_endings(self):
        """A trailing carriage return should not stop a blank line from splitting."""
        from utils.text import split_result

        assert split_result("one\r\n\r\ntwo\r\n") == ["one\n\n", "two\n"]

    def test_empty_text_returns_no_groups(self):
        """Empty text should produce no groups."""
        from utils.text import split_result

        assert split_result("") == []


class TestMergeGroups:
    """Tests for merge_groups function."""

    def test_splits_when_over_limit(self):
        """Groups that do not fit together should be separate segments."""
        from utils.text import merge_groups

        assert merge_groups(["group1\n\n", "group2"], 10) == ["group1\n\n", "group2"]

    def test_merges_when_under_limit(self):
        """Groups that fit together should be joined."""
        from utils.text import merge_groups

        assert merge_groups(["group1\n\n", "group2"], 20) == ["group1\n\ngroup2"]

    def test_oversized_group_replaced(self):
        """A group longer than the limit should become the placeholder."""
        from utils.text import merge_groups, OVERSIZED_PLACEHOLDER

        result = merge_groups(["ok\n\n", "x" * 500, "tail\n"], 100)

        assert result[0] == "ok\n\n"
        assert OVERSIZED_PLACEHOLDER in result[1]
        assert "x" * 500 not in "".join(result)
        assert result[-1].endswith("tail\n")

    def test_segments_respect_limit(self):
        """Every segment should fit within max_size."""
        from utils.text import merge_groups

        groups = [f"paragraph {i} " + "word " * (i % 7) + "\n\n" for i in range(60)]
        result = merge_groups(groups, 80)

        assert all(len(segment) <= 80 for segment in result)
        assert "".join(result) == "".join(groups)

    def test_no_groups(self):
        """No groups should mean no segments."""
        from utils.text import merge_groups

        assert merge_groups([], 10) == []


class TestPrepareResponse:
    """Tests for prepare_response function."""

    def test_short_text_unchanged(self):
        """Text under the limit should be returned as-is."""
        from utils.text import prepare_response

        text = "  * odd *\n\n\nformatting  "

        assert prepare_response(text, 1900) == [text]

    def test_long_text_is_segmented(self):
        """Long text should be split into segments under the limit."""
        from utils.text import prepare_response

        paragraphs = [("sentence " * 20).strip() for _ in range(30)]
        text = "\n\n".join(paragraphs)

        result = prepare_response(text, 500)

        assert len(result) > 1
        assert all(len(segment) <= 500 for segment in result)
        assert "".join(result) == text + "\n"

    def test_code_block_never_split(self):
        """A code block should land whole in one segment."""
        from utils.text import prepare_response

        block = "```python\n" + "print('hi')\n" * 20 + "```\n"
        text = "intro " * 50 + "\n\n" + block + "\n" + "outro " * 50

        result = prepare_response(text, 400)

        assert sum(block in segment for segment in result) == 1


# =========================
# Run tests
# =========================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
