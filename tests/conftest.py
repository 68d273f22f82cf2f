"""Shared test fixtures for the kholagy test suite."""

from __future__ import annotations

from typing import Any

import pytest

from kholagy.config import Settings


@pytest.fixture()
def settings() -> Settings:
    """Settings with a scripture key and no local content directories."""
    return Settings(scripture={"api_key": "test-key"})


@pytest.fixture()
def chapter_payload() -> dict[str, Any]:
    """A chapter-content response with verses nested at mixed depths."""
    return {
        "data": {
            "id": "JHN.3",
            "bookId": "JHN",
            "number": "3",
            "reference": "John 3",
            "content": [
                {
                    "type": "paragraph",
                    "text": "¶",
                    "items": [
                        {
                            "type": "verse",
                            "id": "JHN.3.16",
                            "reference": "John 3:16",
                            "content": [
                                {"text": "For God so loved"},
                                {"children": [{"value": "  the world,"}]},
                            ],
                        },
                    ],
                },
                {
                    "type": "section",
                    "children": [
                        {
                            "type": "paragraph",
                            "content": [
                                {"type": "verse", "verseId": "JHN.3.17", "number": 17, "text": "For God sent"},
                            ],
                        },
                    ],
                },
                {"type": "verse", "id": "JHN.3.18"},
            ],
        }
    }


@pytest.fixture()
def books_payload() -> dict[str, Any]:
    return {
        "data": [
            {"id": "GEN", "name": "Genesis", "abbreviation": "Gen", "nameLong": "The First Book of Moses"},
            {"id": "1SAM", "name": "1 Samuel", "abbreviation": "1Sa"},
            {"id": "TOB", "name": "Tobit"},
            {"id": "JHN", "name": "John", "nameLong": "The Gospel of John"},
            {"id": "XYZ", "name": "Odes"},
        ]
    }


@pytest.fixture()
def coptic_date_payload() -> dict[str, Any]:
    return {"data": {"calendar": {"coptic": {"copticYear": "1741", "month": 4.0, "dayOfMonth": 29}}}}


@pytest.fixture()
def readings_payload() -> dict[str, Any]:
    return {
        "data": {
            "readings": {
                "Matins": [
                    {"title": "Psalm", "citation": "Psalm 2:7-8"},
                    {"irrelevant": True},
                ],
                "eveningReadings": {"entries": [{"reference": "Luke 2:1-20", "verses": ["And it came", 2]}]},
                "divineLiturgy": {
                    "pauline": {"name": "Pauline Epistle", "text": "Galatians 4:4-18", "service": "Mass"},
                    "gospel": {"slug": "gospel", "passage": "Luke 2:8-20"},
                },
            }
        }
    }
