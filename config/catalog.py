"""
Scholarship catalog.

Static, read-only table of the scholarships the department awards: which
honor and code combinations each scholarship accepts and, where the
award is fixed, the expected amount for a code.

The catalog is built once and handed to the validator and the import/export
services at construction. It is never mutated after creation.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

# Export selection sentinel meaning "every class"
ALL_CLASSES = "全部"


# ===================
# CATALOG DATA
# ===================

HONORS = (
    "综合优秀奖",
    "学业优秀奖",
    "好读书奖",
    "科技创新优秀奖",
    "社会工作优秀奖",
    "体育优秀奖",
    "文艺优秀奖",
    "社会实践优秀奖",
    "志愿公益优秀奖",
    "学业进步奖",
)

# Scholarship name -> list of (honor, code, expected amount or None).
# Codes end with the award in hundreds of yuan, e.g. J3032030 -> 3000.
SCHOLARSHIPS = {
    "国家奖学金": [
        ("综合优秀奖", "J1012080", 8000),
    ],
    "蒋南翔奖学金": [
        ("综合优秀奖", "J1022150", 15000),
    ],
    "清华之友——华为奖学金": [
        ("学业优秀奖", "J2022050", 5000),
        ("科技创新优秀奖", "J2022080", 8000),
    ],
    "清华之友——丰田奖学金": [
        ("学业优秀奖", "J2032040", 4000),
        ("社会工作优秀奖", "J2032040", 4000),
    ],
    "清华之友——科技创新奖学金": [
        ("科技创新优秀奖", "J2052030", 3000),
        ("科技创新优秀奖", "J2052050", 5000),
    ],
    "好读书奖学金": [
        ("好读书奖", "J3032030", 3000),
        ("好读书奖", "J3032080", 8000),
    ],
    "社会工作奖学金": [
        ("社会工作优秀奖", "J3042020", 2000),
        ("社会实践优秀奖", "J3042020", 2000),
        ("志愿公益优秀奖", "J3042020", 2000),
    ],
    "文体奖学金": [
        ("体育优秀奖", "J3052010", None),
        ("文艺优秀奖", "J3052010", None),
    ],
    "学业进步奖学金": [
        ("学业进步奖", "J3062010", None),
    ],
}

# Class names known to the department (无61 .. 无98)
CLASS_NAMES = tuple(
    f"无{year}{number}"
    for year in (6, 7, 8, 9)
    for number in range(1, 9)
)


# ===================
# CATALOG
# ===================

@dataclass(frozen=True)
class CatalogEntry:
    """One accepted (honor, code) pair of a scholarship."""
    honor: str
    code: str
    amount: Optional[int] = None


@dataclass(frozen=True)
class Catalog:
    """
    Immutable scholarship catalog.

    Attributes:
        scholarships: Ordered (name, entries) pairs, in configured order
        honor_names: Ordered honor names
        class_names: Ordered class names offered by export selectors
    """
    scholarships: tuple[tuple[str, tuple[CatalogEntry, ...]], ...]
    honor_names: tuple[str, ...]
    class_names: tuple[str, ...] = ()
    _index: Mapping[str, tuple[CatalogEntry, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(
            self, "_index", MappingProxyType(dict(self.scholarships))
        )

    @classmethod
    def from_dict(
        cls,
        scholarships: Mapping[str, list],
        honors: tuple[str, ...] | list[str],
        class_names: tuple[str, ...] | list[str] = (),
    ) -> "Catalog":
        """
        Build a catalog from plain configuration data.

        Args:
            scholarships: Name -> list of (honor, code) or (honor, code, amount)
            honors: Honor names in display order
            class_names: Class names offered by export selectors

        Returns:
            Catalog
        """
        entries = []
        for name, pairs in scholarships.items():
            entries.append((
                name,
                tuple(CatalogEntry(*pair) for pair in pairs),
            ))
        return cls(
            scholarships=tuple(entries),
            honor_names=tuple(honors),
            class_names=tuple(class_names),
        )

    def scholarship_names(self) -> tuple[str, ...]:
        """Scholarship names in configured order."""
        return tuple(name for name, _ in self.scholarships)

    def honors(self) -> tuple[str, ...]:
        return self.honor_names

    def class_options(self) -> tuple[str, ...]:
        """Export class choices, "all classes" first."""
        return (ALL_CLASSES, *self.class_names)

    def entries_for(self, scholarship: str) -> tuple[CatalogEntry, ...]:
        return self._index.get(scholarship, ())

    def codes_for(self, scholarship: str) -> frozenset[str]:
        """Codes accepted by a scholarship; empty for unknown names."""
        return frozenset(entry.code for entry in self.entries_for(scholarship))

    def is_valid_honor(self, honor: str) -> bool:
        return honor in self.honor_names

    def is_valid_combination(self, scholarship: str, honor: str, code: str) -> bool:
        return any(
            entry.honor == honor and entry.code == code
            for entry in self.entries_for(scholarship)
        )

    def expected_amount(self, scholarship: str, code: str) -> Optional[int]:
        """Fixed award for a code, or None when the catalog has no hint."""
        for entry in self.entries_for(scholarship):
            if entry.code == code and entry.amount is not None:
                return entry.amount
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "scholarships": [
                {
                    "name": name,
                    "entries": [
                        {"honor": e.honor, "code": e.code, "amount": e.amount}
                        for e in entries
                    ],
                }
                for name, entries in self.scholarships
            ],
            "honors": list(self.honor_names),
            "class_options": list(self.class_options()),
        }


@lru_cache()
def get_catalog() -> Catalog:
    """Get the department catalog (built once)."""
    return Catalog.from_dict(SCHOLARSHIPS, HONORS, CLASS_NAMES)
