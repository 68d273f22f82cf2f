"""Unit tests for kholagy.normalizer."""

from __future__ import annotations

from typing import Any

import pytest

from kholagy.errors import ParseError
from kholagy.normalizer import extract_verse, extract_verses, gather_text, normalize_chapter


def _verse(verse_id: str, text: str, **extra: Any) -> dict[str, Any]:
    return {"type": "verse", "id": verse_id, "text": text, **extra}


def _wrap(node: dict[str, Any], depth: int) -> dict[str, Any]:
    for level in range(depth):
        field = ("content", "items", "children")[level % 3]
        node = {"type": "paragraph", field: [node]}
    return node


class TestGatherText:
    def test_collects_text_and_value_depth_first(self) -> None:
        node = {"text": "a", "content": [{"value": "b", "items": [{"text": "c"}]}, {"children": [{"text": "d"}]}]}
        assert gather_text(node) == ["a", "b", "c", "d"]

    def test_ignores_non_string_scalars(self) -> None:
        assert gather_text({"text": 3, "value": None}) == []


class TestExtractVerse:
    def test_number_from_reference(self) -> None:
        verse = extract_verse(
            {"id": "JHN.3.16", "reference": "John 3:16", "text": "For God"},
            chapter_id="JHN.3",
            book_id="JHN",
        )
        assert verse is not None
        assert verse.number == "16"

    def test_number_from_id_when_no_reference(self) -> None:
        verse = extract_verse({"id": "GEN.1.5", "text": "And God called"}, chapter_id="GEN.1", book_id="GEN")
        assert verse is not None
        assert verse.number == "5"
        assert verse.reference == "GEN 5"

    def test_explicit_number_wins(self) -> None:
        verse = extract_verse(
            {"id": "GEN.1.5", "number": 7, "reference": "Gen 1:5", "text": "x"},
            chapter_id="GEN.1",
            book_id="GEN",
        )
        assert verse is not None
        assert verse.number == "7"

    @pytest.mark.parametrize(
        "node",
        [
            {"text": "no id"},
            {"id": "GEN.1.1"},
            {"id": "GEN.1.1", "text": "   \n  "},
        ],
    )
    def test_placeholders_are_dropped(self, node: dict[str, Any]) -> None:
        assert extract_verse(node, chapter_id="GEN.1", book_id="GEN") is None


class TestVerseTextNesting:
    @pytest.mark.parametrize(
        "body",
        [
            {"text": "In  the\nbeginning"},
            {"content": [{"text": "In  the\nbeginning"}]},
            {"items": [{"value": "In  the\nbeginning"}]},
            {"content": [{"items": [{"children": [{"text": "In  the\nbeginning"}]}]}]},
            {"children": [{"content": [{"items": [{"value": "In  the\nbeginning"}]}]}]},
        ],
        ids=["depth-0", "depth-1-content", "depth-1-items", "depth-3", "depth-3-value"],
    )
    def test_text_depth_does_not_change_text(self, body: dict[str, Any]) -> None:
        verse = extract_verse({"type": "verse", "id": "GEN.1.1", **body}, chapter_id="GEN.1", book_id="GEN")

        assert verse is not None
        assert verse.text == "In the beginning"

    def test_fragments_across_aliases(self) -> None:
        node = {
            "type": "verse",
            "id": "JHN.1.1",
            "reference": "John 1:1",
            "content": [{"text": "In the "}, {"items": [{"value": "beginning"}]}],
        }

        verse = extract_verse(node, chapter_id="JHN.1", book_id="JHN")

        assert verse is not None
        assert (verse.number, verse.reference, verse.text) == ("1", "John 1:1", "In the beginning")


class TestExtractVerses:
    @pytest.mark.parametrize("depth", [0, 1, 2, 5])
    def test_depth_does_not_change_result(self, depth: int) -> None:
        nodes = [_wrap(_verse("GEN.1.1", "In the beginning"), depth), _verse("GEN.1.2", "And the earth")]

        verses = extract_verses(nodes, chapter_id="GEN.1", book_id="GEN")

        assert [(v.id, v.text) for v in verses] == [
            ("GEN.1.1", "In the beginning"),
            ("GEN.1.2", "And the earth"),
        ]

    def test_container_text_is_not_collected(self) -> None:
        nodes = [{"type": "paragraph", "text": "heading", "content": [_verse("GEN.1.1", "In the beginning")]}]
        verses = extract_verses(nodes, chapter_id="GEN.1", book_id="GEN")
        assert [v.text for v in verses] == ["In the beginning"]

    def test_verse_children_are_not_walked_again(self) -> None:
        nested = _verse("GEN.1.1", "outer", content=[_verse("GEN.1.2", "inner")])
        verses = extract_verses([nested], chapter_id="GEN.1", book_id="GEN")
        assert [v.id for v in verses] == ["GEN.1.1"]
        assert verses[0].text == "outer inner"

    def test_non_list_input_yields_nothing(self) -> None:
        assert extract_verses(None, chapter_id="GEN.1", book_id="GEN") == []


class TestNormalizeChapter:
    def test_mixed_depth_payload(self, chapter_payload: dict[str, Any]) -> None:
        chapter = normalize_chapter(chapter_payload)

        assert chapter.id == "JHN.3"
        assert chapter.book_id == "JHN"
        assert chapter.number == "3"
        assert [(v.id, v.number, v.reference, v.text) for v in chapter.verses] == [
            ("JHN.3.16", "16", "John 3:16", "For God so loved the world,"),
            ("JHN.3.17", "17", "JHN 17", "For God sent"),
        ]
        assert all(v.chapter_id == "JHN.3" for v in chapter.verses)

    def test_single_verse_example(self) -> None:
        payload = {
            "data": {
                "id": "GEN.1",
                "bookId": "GEN",
                "content": [
                    {
                        "type": "paragraph",
                        "items": [
                            {"type": "verse", "id": "GEN.1.1", "content": [{"text": "In the"}, {"text": "beginning"}]},
                        ],
                    }
                ],
            }
        }

        chapter = normalize_chapter(payload)

        assert chapter.number == "1"
        assert chapter.reference == "GEN 1"
        assert [(v.id, v.number, v.text) for v in chapter.verses] == [("GEN.1.1", "1", "In the beginning")]

    def test_accepts_bare_chapter_object(self, chapter_payload: dict[str, Any]) -> None:
        assert normalize_chapter(chapter_payload["data"]) == normalize_chapter(chapter_payload)

    def test_normalizing_twice_is_stable(self, chapter_payload: dict[str, Any]) -> None:
        assert normalize_chapter(chapter_payload) == normalize_chapter(chapter_payload)

    def test_missing_identity_raises(self) -> None:
        with pytest.raises(ParseError):
            normalize_chapter({"data": {"content": []}})

    def test_non_object_payload_raises(self) -> None:
        with pytest.raises(ParseError):
            normalize_chapter(["not", "a", "chapter"])
