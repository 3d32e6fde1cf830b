"""Tests for transcript summarizing and title extraction."""

from datetime import timedelta

from conftest import NOW, assistant_line, user_line, write_jsonl

from claude_chats.transcript import (
    TranscriptSummary,
    extract_user_text,
    is_warmup,
    parse_timestamp,
    summarize_transcript,
    truncate_title,
)


class TestExtractUserText:
    def test_string_content(self):
        assert extract_user_text({"message": {"content": "  hello\nworld  "}}) == "hello"

    def test_list_content_skips_ide_blocks(self):
        entry = {"message": {"content": [
            {"type": "text", "text": "<ide_opened_file>foo.py</ide_opened_file>"},
            {"type": "tool_result", "content": "x"},
            {"type": "text", "text": "Fix\tthe bug"},
        ]}}
        assert extract_user_text(entry) == "Fix the bug"

    def test_tool_results_only(self):
        entry = {"message": {"content": [{"type": "tool_result", "content": "x"}]}}
        assert extract_user_text(entry) == ""

    def test_non_dict_message(self):
        assert extract_user_text({"message": "oops"}) == ""


class TestParseTimestamp:
    def test_zulu(self):
        assert parse_timestamp("2025-06-01T12:00:00.000Z") == NOW

    def test_naive_is_utc(self):
        assert parse_timestamp("2025-06-01T12:00:00") == NOW

    def test_garbage(self):
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp(None) is None


def test_truncate_title():
    assert truncate_title("x" * 50) == "x" * 50
    assert truncate_title("x" * 51) == "x" * 50 + "..."


class TestSummarizeTranscript:
    def test_title_and_last_timestamp(self, tmp_path):
        path = write_jsonl(tmp_path / "a.jsonl", [
            user_line("[Request interrupted by user]", NOW - timedelta(hours=2), "a"),
            user_line("Refactor the parser", NOW - timedelta(hours=1), "a"),
            assistant_line("Done.", NOW - timedelta(minutes=30), "a"),
            "{not json",
        ])
        summary = summarize_transcript(path)
        assert summary.title == "Refactor the parser"
        assert summary.last_timestamp == NOW - timedelta(minutes=30)
        assert summary.session_id == "a"
        assert not is_warmup(summary)

    def test_lines_without_timestamp_keep_previous(self, tmp_path):
        path = write_jsonl(tmp_path / "a.jsonl", [
            user_line("hi", NOW, "a"),
            {"type": "summary", "summary": "Chat about things"},
        ])
        assert summarize_transcript(path).last_timestamp == NOW

    def test_warmup(self, tmp_path):
        path = write_jsonl(tmp_path / "agent-1.jsonl", [
            user_line("Warmup", NOW, "a"),
            assistant_line("I'm ready to help.", NOW, "a"),
        ])
        summary = summarize_transcript(path)
        assert summary.title is None
        assert is_warmup(summary)

    def test_no_user_text_is_not_warmup(self):
        assert not is_warmup(TranscriptSummary())
