"""Tests for the legacy .doc heuristic decoder."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from conftest import legacy_doc_bytes, utf16
from docsearch.ingestion.legacy_doc import (
    collect_segments,
    extract_legacy_text,
    filter_segment,
    is_cjk,
    read_legacy_doc,
    scan_ascii,
    scan_utf16,
)


class TestScanners:
    """Test the raw UTF-16 and ASCII scanners."""

    def test_scan_utf16_aligned(self) -> None:
        """Should yield printable runs split on control characters."""
        data = utf16("项目计划") + b"\x00\x00" + utf16("hello")

        runs = list(scan_utf16(data, 0))

        assert runs == ["项目计划", "hello"]

    def test_scan_utf16_drops_single_characters(self) -> None:
        """Runs shorter than two characters are not reported."""
        data = utf16("a") + b"\x00\x00" + utf16("报告")

        assert list(scan_utf16(data, 0)) == ["报告"]

    def test_scan_utf16_odd_length_input(self) -> None:
        """A trailing odd byte is ignored instead of raising."""
        data = utf16("报告") + b"\x41"

        assert list(scan_utf16(data, 0)) == ["报告"]

    def test_scan_ascii_minimum_length(self) -> None:
        """ASCII runs need at least four bytes."""
        data = b"\x01abc\x02abcd\x03line one\nline two\x00"

        assert list(scan_ascii(data)) == ["abcd", "line one\nline two"]

    def test_collect_segments_skips_misaligned_shadow(self) -> None:
        """ASCII UTF-16 text read one byte off should not produce segments."""
        data = b"\x00\x00" + utf16("Hello there") + b"\x00\x00"

        segments = collect_segments(data)

        assert "Hello there" in segments
        assert all(not any(0x3400 <= ord(c) <= 0x9FFF for c in s) for s in segments)

    def test_collect_segments_skips_ascii_read_as_utf16(self) -> None:
        """Plain ASCII bytes should not reappear as pseudo-ideographs."""
        data = b"\x00\x00abcdefghijklmnop\x00\x00"

        segments = collect_segments(data)

        assert segments == ["abcdefghijklmnop"]

    def test_collect_segments_keeps_ideographs_made_of_ascii_bytes(self) -> None:
        """Ideographs whose bytes look like ASCII survive when no prose covers them."""
        data = b"\x07\x00" + utf16("上海大学中文") + b"\x07\x00"

        assert "上海大学中文" in collect_segments(data)


class TestFilterSegment:
    """Test segment level noise filtering."""

    def test_keeps_cjk_text(self) -> None:
        assert filter_segment("  项目进度报告  ") == "项目进度报告"

    def test_truncates_at_mergeformat(self) -> None:
        """Text in front of a field code survives, the code does not."""
        assert filter_segment("第一章 概述 \\* MERGEFORMAT") == "第一章 概述"

    def test_truncates_at_mergeformat_case_insensitive(self) -> None:
        assert filter_segment("Introduction mergeformat 12") == "Introduction"

    def test_truncates_at_field_instruction(self) -> None:
        """Uppercase field instructions start compiled field code."""
        segment = 'Quarterly summary HYPERLINK "http://example.com"'

        assert filter_segment(segment) == "Quarterly summary"

    def test_field_words_in_prose_are_kept(self) -> None:
        """Mixed-case words that merely look like field names are prose."""
        assert filter_segment("Date of birth") == "Date of birth"

    def test_field_code_only_is_dropped(self) -> None:
        assert filter_segment("PAGEREF _Toc123 \\h") is None

    @pytest.mark.parametrize(
        "segment",
        ["Root Entry", "WordDocument", "SUMMARYINFORMATION", "Times New Roman", "Normal.dotm"],
    )
    def test_drops_noise_without_cjk(self, segment: str) -> None:
        assert filter_segment(segment) is None

    def test_removes_noise_tokens_from_cjk_segment(self) -> None:
        """Noise tokens are cut out of segments that also carry CJK text."""
        assert filter_segment("宋体 正文内容") == "正文内容"

    def test_removes_noise_glued_to_cjk(self) -> None:
        assert filter_segment("项目WORDDOCUMENT") == "项目"

    def test_noise_token_inside_word_is_prose(self) -> None:
        """A font name hidden inside an ordinary word is not noise."""
        assert filter_segment("Training materials") == "Training materials"

    def test_drops_cjk_segment_made_only_of_noise(self) -> None:
        assert filter_segment("微软雅黑") is None

    def test_drops_mostly_uppercase_latin(self) -> None:
        assert filter_segment("XKCDQWERTY ZZ") is None

    def test_drops_long_latin_segment(self) -> None:
        assert filter_segment("abcde " * 40) is None

    def test_keeps_plain_latin_sentence(self) -> None:
        assert filter_segment("Meeting notes for Monday") == "Meeting notes for Monday"

    def test_blank_segment(self) -> None:
        assert filter_segment("   ") is None


class TestExtractLegacyText:
    """Test end-to-end recovery from synthetic .doc bytes."""

    def test_recovers_cjk_and_drops_stream_names(self) -> None:
        """CJK body text survives while OLE stream names are filtered out."""
        data = legacy_doc_bytes(
            utf16("Root Entry"),
            b"\x00\x00",
            utf16("项目进度报告"),
            b"\x00\x00",
            b"\x01WordDocument\x00",
        )

        text = extract_legacy_text(data)

        assert "项目进度报告" in text
        assert "Root Entry" not in text
        assert "WordDocument" not in text

    def test_field_code_removed_preceding_text_kept(self) -> None:
        data = legacy_doc_bytes(utf16("第一章 概述 \\* MERGEFORMAT"), b"\x00\x00")

        text = extract_legacy_text(data)

        assert "第一章 概述" in text
        assert "MERGEFORMAT" not in text

    def test_table_cells_made_of_ascii_pair_ideographs(self) -> None:
        """Short cells split by cell marks keep their CJK text."""
        data = legacy_doc_bytes(
            b"\x07\x00",
            utf16("上海大学中文"),
            b"\x07\x00",
            utf16("年度总结报告"),
            b"\x07\x00",
        )

        text = extract_legacy_text(data)

        assert "上海大学中文" in text
        assert "年度总结报告" in text

    def test_recovers_8bit_ascii_text(self) -> None:
        data = legacy_doc_bytes(b"Minutes of the budget meeting\x00\x00")

        assert "Minutes of the budget meeting" in extract_legacy_text(data)

    def test_fallback_keeps_non_ascii_segments(self) -> None:
        """When every segment is filtered out, non-ASCII runs are returned."""
        data = utf16("ＡＢＣＤ")

        assert extract_legacy_text(data) == "ＡＢＣＤ"

    def test_empty_input(self) -> None:
        assert extract_legacy_text(b"") == ""

    def test_only_noise_yields_empty_string(self) -> None:
        data = legacy_doc_bytes(utf16("Root Entry"), b"\x00\x00")

        assert extract_legacy_text(data) == ""


class TestReadLegacyDoc:
    """Test reading .doc files from disk."""

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "报告.doc"
        path.write_bytes(legacy_doc_bytes(utf16("年度总结"), b"\x00\x00"))

        assert "年度总结" in read_legacy_doc(path)

    @patch("docsearch.ingestion.legacy_doc.LOGGER")
    def test_missing_file(self, mock_logger: MagicMock, tmp_path: Path) -> None:
        """Should log a warning and return empty text."""
        assert read_legacy_doc(tmp_path / "missing.doc") == ""
        assert mock_logger.warning.called


def test_is_cjk() -> None:
    assert is_cjk("中")
    assert is_cjk("㐀")
    assert not is_cjk("a")
    assert not is_cjk("。")
