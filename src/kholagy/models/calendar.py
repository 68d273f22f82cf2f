from __future__ import annotations

from pydantic import BaseModel, Field


class CopticDateInfo(BaseModel):
    year: int
    month: int = Field(ge=1, le=13)
    day: int
    month_name: str = Field(min_length=1)


class DailyReadingItem(BaseModel):
    id: str
    title: str
    reference: str | None = None
    text: str | None = None
    source: str


class DailyReadings(BaseModel):
    matins: list[DailyReadingItem] = []
    vespers: list[DailyReadingItem] = []
    liturgy: list[DailyReadingItem] = []


class FeastDay(BaseModel):
    id: str
    title: str
    rank: str | None = None
    color: str | None = None
    description: str | None = None


class FastInfo(BaseModel):
    id: str
    name: str
    fasting_level: str | None = None
    color: str | None = None
    description: str | None = None
