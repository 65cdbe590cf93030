# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Static curriculum reference data.

The memorization curriculum is the sequence of the 114 surahs of the
Qur'an. Each unit carries its ordinal, transliterated name, the juz it
starts in, and its ayah count. Ordinal order defines curriculum order.

Example:
    >>> reference = get_curriculum_reference()
    >>> reference.require_unit(2).unit_length
    286
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache

from src.domains.errors import EngineValidationError

logger = logging.getLogger(__name__)


# (ordinal, name, juz, ayah count)
QURAN_SURAHS: tuple[tuple[int, str, int, int], ...] = (
    (1, "Al-Fatiha", 1, 7),
    (2, "Al-Baqarah", 1, 286),
    (3, "Ali 'Imran", 3, 200),
    (4, "An-Nisa", 4, 176),
    (5, "Al-Ma'idah", 6, 120),
    (6, "Al-An'am", 7, 165),
    (7, "Al-A'raf", 8, 206),
    (8, "Al-Anfal", 9, 75),
    (9, "At-Tawbah", 10, 129),
    (10, "Yunus", 11, 109),
    (11, "Hud", 11, 123),
    (12, "Yusuf", 12, 111),
    (13, "Ar-Ra'd", 13, 43),
    (14, "Ibrahim", 13, 52),
    (15, "Al-Hijr", 14, 99),
    (16, "An-Nahl", 14, 128),
    (17, "Al-Isra'", 15, 111),
    (18, "Al-Kahf", 15, 110),
    (19, "Maryam", 16, 98),
    (20, "Ta-Ha", 16, 135),
    (21, "Al-Anbiya'", 17, 112),
    (22, "Al-Hajj", 17, 78),
    (23, "Al-Mu'minun", 18, 118),
    (24, "An-Nur", 18, 64),
    (25, "Al-Furqan", 18, 77),
    (26, "Ash-Shu'ara'", 19, 227),
    (27, "An-Naml", 19, 93),
    (28, "Al-Qasas", 20, 88),
    (29, "Al-'Ankabut", 20, 69),
    (30, "Ar-Rum", 21, 60),
    (31, "Luqman", 21, 34),
    (32, "As-Sajdah", 21, 30),
    (33, "Al-Ahzab", 21, 73),
    (34, "Saba'", 22, 54),
    (35, "Fatir", 22, 45),
    (36, "Ya-Sin", 22, 83),
    (37, "As-Saffat", 23, 182),
    (38, "Sad", 23, 88),
    (39, "Az-Zumar", 23, 75),
    (40, "Ghafir", 24, 85),
    (41, "Fussilat", 24, 54),
    (42, "Ash-Shura", 25, 53),
    (43, "Az-Zukhruf", 25, 89),
    (44, "Ad-Dukhan", 25, 59),
    (45, "Al-Jathiyah", 25, 37),
    (46, "Al-Ahqaf", 26, 35),
    (47, "Muhammad", 26, 38),
    (48, "Al-Fath", 26, 29),
    (49, "Al-Hujurat", 26, 18),
    (50, "Qaf", 26, 45),
    (51, "Adh-Dhariyat", 26, 60),
    (52, "At-Tur", 27, 49),
    (53, "An-Najm", 27, 62),
    (54, "Al-Qamar", 27, 55),
    (55, "Ar-Rahman", 27, 78),
    (56, "Al-Waqi'ah", 27, 96),
    (57, "Al-Hadid", 27, 29),
    (58, "Al-Mujadilah", 28, 22),
    (59, "Al-Hashr", 28, 24),
    (60, "Al-Mumtahanah", 28, 13),
    (61, "As-Saff", 28, 14),
    (62, "Al-Jumu'ah", 28, 11),
    (63, "Al-Munafiqun", 28, 11),
    (64, "At-Taghabun", 28, 18),
    (65, "At-Talaq", 28, 12),
    (66, "At-Tahrim", 28, 12),
    (67, "Al-Mulk", 29, 30),
    (68, "Al-Qalam", 29, 52),
    (69, "Al-Haqqah", 29, 52),
    (70, "Al-Ma'arij", 29, 44),
    (71, "Nuh", 29, 28),
    (72, "Al-Jinn", 29, 28),
    (73, "Al-Muzzammil", 29, 20),
    (74, "Al-Muddaththir", 29, 56),
    (75, "Al-Qiyamah", 29, 40),
    (76, "Al-Insan", 29, 31),
    (77, "Al-Mursalat", 29, 50),
    (78, "An-Naba'", 30, 40),
    (79, "An-Nazi'at", 30, 46),
    (80, "Abasa", 30, 42),
    (81, "At-Takwir", 30, 29),
    (82, "Al-Infitar", 30, 19),
    (83, "Al-Mutaffifin", 30, 36),
    (84, "Al-Inshiqaq", 30, 25),
    (85, "Al-Buruj", 30, 22),
    (86, "At-Tariq", 30, 17),
    (87, "Al-A'la", 30, 19),
    (88, "Al-Ghashiyah", 30, 26),
    (89, "Al-Fajr", 30, 30),
    (90, "Al-Balad", 30, 20),
    (91, "Ash-Shams", 30, 15),
    (92, "Al-Layl", 30, 21),
    (93, "Ad-Duha", 30, 11),
    (94, "Ash-Sharh", 30, 8),
    (95, "At-Tin", 30, 8),
    (96, "Al-'Alaq", 30, 19),
    (97, "Al-Qadr", 30, 5),
    (98, "Al-Bayyinah", 30, 8),
    (99, "Az-Zalzalah", 30, 8),
    (100, "Al-'Adiyat", 30, 11),
    (101, "Al-Qari'ah", 30, 11),
    (102, "At-Takathur", 30, 8),
    (103, "Al-'Asr", 30, 3),
    (104, "Al-Humazah", 30, 9),
    (105, "Al-Fil", 30, 5),
    (106, "Quraysh", 30, 4),
    (107, "Al-Ma'un", 30, 7),
    (108, "Al-Kawthar", 30, 3),
    (109, "Al-Kafirun", 30, 6),
    (110, "An-Nasr", 30, 3),
    (111, "Al-Masad", 30, 5),
    (112, "Al-Ikhlas", 30, 4),
    (113, "Al-Falaq", 30, 5),
    (114, "An-Nas", 30, 6),
)


class UnknownUnitError(EngineValidationError):
    """Raised when a unit ordinal is not part of the curriculum."""

    def __init__(self, ordinal: int, field: str = "unit_ordinal") -> None:
        super().__init__(field, f"Unknown curriculum unit: {ordinal}")
        self.ordinal = ordinal


@dataclass(frozen=True)
class CurriculumUnit:
    """One curriculum unit (a surah).

    Attributes:
        ordinal: Position in the curriculum sequence, starting at 1.
        name: Human-readable name.
        group: Display grouping (juz) the unit starts in.
        unit_length: Number of sub-units (ayahs).
    """

    ordinal: int
    name: str
    group: int
    unit_length: int

    def contains(self, offset: int) -> bool:
        """Whether a sub-unit index lies within this unit."""
        return 1 <= offset <= self.unit_length


class CurriculumReference:
    """Read-only lookup of curriculum units by ordinal."""

    def __init__(self, units: Iterable[CurriculumUnit]) -> None:
        ordered = sorted(units, key=lambda unit: unit.ordinal)
        self._units: dict[int, CurriculumUnit] = {}
        for unit in ordered:
            if unit.ordinal in self._units:
                raise ValueError(f"Duplicate curriculum ordinal: {unit.ordinal}")
            if unit.unit_length < 1:
                raise ValueError(f"Unit {unit.ordinal} has no sub-units")
            self._units[unit.ordinal] = unit

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[int, str, int, int]]) -> "CurriculumReference":
        """Build a reference from (ordinal, name, group, length) rows."""
        return cls(
            CurriculumUnit(ordinal=o, name=n, group=g, unit_length=length)
            for o, n, g, length in rows
        )

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[CurriculumUnit]:
        return iter(self._units.values())

    def __contains__(self, ordinal: object) -> bool:
        return ordinal in self._units

    def list_units(self) -> list[CurriculumUnit]:
        """All units in curriculum order."""
        return list(self._units.values())

    def get_unit(self, ordinal: int) -> CurriculumUnit | None:
        """Look up a unit, returning None when unknown."""
        return self._units.get(ordinal)

    def require_unit(self, ordinal: int) -> CurriculumUnit:
        """Look up a unit.

        Raises:
            UnknownUnitError: If the ordinal is not in the curriculum.
        """
        unit = self._units.get(ordinal)
        if unit is None:
            raise UnknownUnitError(ordinal)
        return unit

    def units_in_group(self, group: int) -> list[CurriculumUnit]:
        """Units starting in the given group (juz)."""
        return [unit for unit in self._units.values() if unit.group == group]

    def total_units(self) -> int:
        return len(self._units)


@lru_cache(maxsize=1)
def get_curriculum_reference() -> CurriculumReference:
    """Get the cached Qur'an curriculum reference."""
    reference = CurriculumReference.from_rows(QURAN_SURAHS)
    logger.debug("Loaded curriculum reference with %d units", len(reference))
    return reference
