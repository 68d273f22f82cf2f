"""Canonical book table and greedy book grouping.

Upstream catalogs spell book ids in several dialects ("1SA" vs "1SAM",
"PSA" vs "PS"). ``group_books`` walks the canonical table in order and gives
each slot the first unused upstream book matching its id, an alternate id,
or an alternate name. This is a greedy bipartite match, not an optimal
assignment: table order decides ties. Anything unmatched lands in ``other``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from kholagy.models.scripture import BookGroup

if TYPE_CHECKING:
    from collections.abc import Sequence

    from kholagy.models.scripture import BibleBook

OLD_TESTAMENT = "old_testament"
DEUTEROCANON = "deuterocanon"
NEW_TESTAMENT = "new_testament"
OTHER = "other"

GROUP_ORDER = (OLD_TESTAMENT, DEUTEROCANON, NEW_TESTAMENT)


@dataclass(frozen=True)
class CanonicalBook:
    id: str
    alt_ids: tuple[str, ...]
    alt_names: tuple[str, ...]
    group: str


def _book(book_id: str, alt_ids: str, names: str, group: str) -> CanonicalBook:
    return CanonicalBook(
        id=book_id,
        alt_ids=tuple(alt_ids.split()),
        alt_names=tuple(name.strip() for name in names.split("|") if name.strip()),
        group=group,
    )


_OT, _DC, _NT = OLD_TESTAMENT, DEUTEROCANON, NEW_TESTAMENT

CANONICAL_BOOKS: tuple[CanonicalBook, ...] = (
    _book("GEN", "GN GE", "genesis", _OT),
    _book("EXO", "EX EXOD", "exodus", _OT),
    _book("LEV", "LV LE", "leviticus", _OT),
    _book("NUM", "NM NU", "numbers", _OT),
    _book("DEU", "DT DEUT", "deuteronomy", _OT),
    _book("JOS", "JOSH", "joshua", _OT),
    _book("JDG", "JUDG JG", "judges", _OT),
    _book("RUT", "RU RUTH", "ruth", _OT),
    _book("1SA", "1SAM 1S", "1 samuel|i samuel|1 kingdoms", _OT),
    _book("2SA", "2SAM 2S", "2 samuel|ii samuel|2 kingdoms", _OT),
    _book("1KI", "1KGS 1K", "1 kings|i kings|3 kingdoms", _OT),
    _book("2KI", "2KGS 2K", "2 kings|ii kings|4 kingdoms", _OT),
    _book("1CH", "1CHR", "1 chronicles|i chronicles", _OT),
    _book("2CH", "2CHR", "2 chronicles|ii chronicles", _OT),
    _book("EZR", "EZRA", "ezra", _OT),
    _book("NEH", "NE", "nehemiah", _OT),
    _book("EST", "ESTH ES", "esther", _OT),
    _book("JOB", "JB", "job", _OT),
    _book("PSA", "PS PSS PSALM", "psalms|psalm", _OT),
    _book("PRO", "PROV PR", "proverbs", _OT),
    _book("ECC", "ECCL QOH", "ecclesiastes|qoheleth", _OT),
    _book("SNG", "SONG SOS CANT", "song of songs|song of solomon|canticles", _OT),
    _book("ISA", "IS", "isaiah", _OT),
    _book("JER", "JE", "jeremiah", _OT),
    _book("LAM", "LA", "lamentations", _OT),
    _book("EZK", "EZEK EZE", "ezekiel", _OT),
    _book("DAN", "DA DN", "daniel", _OT),
    _book("HOS", "HO", "hosea", _OT),
    _book("JOL", "JOEL JL", "joel", _OT),
    _book("AMO", "AM AMOS", "amos", _OT),
    _book("OBA", "OB OBAD", "obadiah", _OT),
    _book("JON", "JNH JONAH", "jonah", _OT),
    _book("MIC", "MI", "micah", _OT),
    _book("NAM", "NAH NA", "nahum", _OT),
    _book("HAB", "HB", "habakkuk", _OT),
    _book("ZEP", "ZEPH", "zephaniah", _OT),
    _book("HAG", "HG", "haggai", _OT),
    _book("ZEC", "ZECH", "zechariah", _OT),
    _book("MAL", "ML", "malachi", _OT),
    _book("TOB", "TB", "tobit|tobias", _DC),
    _book("JDT", "JTH", "judith", _DC),
    _book("ESG", "ADE", "esther (greek)|additions to esther", _DC),
    _book("WIS", "WS", "wisdom|wisdom of solomon", _DC),
    _book("SIR", "ECCLUS", "sirach|ecclesiasticus", _DC),
    _book("BAR", "BA", "baruch", _DC),
    _book("1MA", "1MACC 1M", "1 maccabees|i maccabees", _DC),
    _book("2MA", "2MACC 2M", "2 maccabees|ii maccabees", _DC),
    _book("MAT", "MT MATT", "matthew", _NT),
    _book("MRK", "MK MAR MARK", "mark", _NT),
    _book("LUK", "LK LUKE", "luke", _NT),
    _book("JHN", "JN JOHN", "john", _NT),
    _book("ACT", "ACTS AC", "acts|acts of the apostles", _NT),
    _book("ROM", "RO RM", "romans", _NT),
    _book("1CO", "1COR", "1 corinthians|i corinthians", _NT),
    _book("2CO", "2COR", "2 corinthians|ii corinthians", _NT),
    _book("GAL", "GA", "galatians", _NT),
    _book("EPH", "EP", "ephesians", _NT),
    _book("PHP", "PHIL PP", "philippians", _NT),
    _book("COL", "CL", "colossians", _NT),
    _book("1TH", "1THESS", "1 thessalonians|i thessalonians", _NT),
    _book("2TH", "2THESS", "2 thessalonians|ii thessalonians", _NT),
    _book("1TI", "1TIM", "1 timothy|i timothy", _NT),
    _book("2TI", "2TIM", "2 timothy|ii timothy", _NT),
    _book("TIT", "TI", "titus", _NT),
    _book("PHM", "PHLM", "philemon", _NT),
    _book("HEB", "HE", "hebrews", _NT),
    _book("JAS", "JAM JM", "james", _NT),
    _book("1PE", "1PET 1PT", "1 peter|i peter", _NT),
    _book("2PE", "2PET 2PT", "2 peter|ii peter", _NT),
    _book("1JN", "1JOHN 1JO", "1 john|i john", _NT),
    _book("2JN", "2JOHN 2JO", "2 john|ii john", _NT),
    _book("3JN", "3JOHN 3JO", "3 john|iii john", _NT),
    _book("JUD", "JUDE", "jude", _NT),
    _book("REV", "RE RV", "revelation|apocalypse", _NT),
)


def _matches(canonical: CanonicalBook, book: BibleBook) -> bool:
    book_id = book.id.upper()
    if book_id == canonical.id or book_id in canonical.alt_ids:
        return True
    names = {name.casefold() for name in (book.name, book.name_long, book.abbreviation) if name}
    return any(alt in names for alt in canonical.alt_names)


def group_books(
    books: Sequence[BibleBook],
    canonical: Sequence[CanonicalBook] = CANONICAL_BOOKS,
) -> list[BookGroup]:
    """Assign upstream books to canonical groups.

    Books inside a group follow canonical order; ``other`` keeps upstream
    order. Empty groups are omitted.
    """
    used: set[int] = set()
    grouped: dict[str, list[BibleBook]] = {key: [] for key in GROUP_ORDER}

    for slot in canonical:
        for index, book in enumerate(books):
            if index in used or not _matches(slot, book):
                continue
            used.add(index)
            grouped.setdefault(slot.group, []).append(book)
            break

    leftovers = [book for index, book in enumerate(books) if index not in used]
    result = [BookGroup(key=key, books=members) for key, members in grouped.items() if members]
    if leftovers:
        result.append(BookGroup(key=OTHER, books=leftovers))
    return result
