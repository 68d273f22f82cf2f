"""Unit tests for kholagy.documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kholagy.documents import DocumentResolver, registry_from_directory, search_document

if TYPE_CHECKING:
    from pathlib import Path


class TestResolve:
    def test_exact_language(self) -> None:
        resolver = DocumentResolver({"liturgy-basil:ar": "h-ar", "liturgy-basil:en": "h-en"})

        resolved = resolver.resolve("liturgy-basil", "ar")

        assert resolved is not None
        assert (resolved.language, resolved.handle, resolved.is_fallback) == ("ar", "h-ar", False)

    def test_falls_back_to_default_language(self) -> None:
        resolver = DocumentResolver({"liturgy-basil:en": "h-en", "liturgy-basil:cop": "h-cop"})

        resolved = resolver.resolve("liturgy-basil", "ru")

        assert resolved is not None
        assert (resolved.language, resolved.requested_language, resolved.is_fallback) == ("en", "ru", True)

    def test_falls_back_to_any_language_in_registry_order(self) -> None:
        resolver = DocumentResolver({"other:en": "x", "agpeya-prime:arcop": "h-arcop", "agpeya-prime:cop": "h-cop"})

        resolved = resolver.resolve("agpeya-prime", "ru")

        assert resolved is not None
        assert resolved.language == "arcop"
        assert resolved.is_fallback is True

    def test_prefix_must_match_whole_id(self) -> None:
        resolver = DocumentResolver({"agpeya-prime-extra:en": "x"})
        assert resolver.resolve("agpeya-prime", "ru") is None

    def test_unknown_document(self) -> None:
        assert DocumentResolver({}).resolve("missing", "en") is None


class TestLoadDocument:
    def test_reads_resolved_file(self, tmp_path: Path) -> None:
        (tmp_path / "liturgy-basil.en.md").write_text("# The Liturgy of St. Basil\n", encoding="utf-8")
        resolver = DocumentResolver(registry_from_directory(tmp_path))

        document = resolver.load_document("liturgy-basil", "ar")

        assert document is not None
        assert document.markdown.startswith("# The Liturgy")
        assert (document.language, document.is_fallback) == ("en", True)

    def test_missing_document_returns_none(self, tmp_path: Path) -> None:
        assert DocumentResolver(registry_from_directory(tmp_path)).load_document("x", "en") is None


class TestRegistryFromDirectory:
    def test_maps_id_and_language(self, tmp_path: Path) -> None:
        (tmp_path / "agpeya").mkdir()
        (tmp_path / "agpeya" / "prime.AR.md").write_text("", encoding="utf-8")
        (tmp_path / "notes.md").write_text("", encoding="utf-8")

        registry = registry_from_directory(tmp_path)

        assert list(registry) == ["prime:ar"]


class TestSearchDocument:
    MARKDOWN = "# Prime\n\nO come let us worship\r\n\n  Let us worship and bow down  \nAmen."

    def test_case_insensitive_with_line_numbers(self) -> None:
        hits = search_document(self.MARKDOWN, "WORSHIP")

        assert [(h.id, h.line, h.snippet) for h in hits] == [
            ("line-2", 2, "O come let us worship"),
            ("line-4", 4, "Let us worship and bow down"),
        ]

    def test_blank_query(self) -> None:
        assert search_document(self.MARKDOWN, "   ") == []

    def test_limit(self) -> None:
        markdown = "\n".join(["Lord have mercy"] * 40)
        assert len(search_document(markdown, "mercy")) == 12
        assert len(search_document(markdown, "mercy", limit=3)) == 3

    def test_long_lines_are_truncated(self) -> None:
        hits = search_document("amen " * 100, "amen")
        assert len(hits[0].snippet) == 218
        assert hits[0].snippet.endswith("…")
