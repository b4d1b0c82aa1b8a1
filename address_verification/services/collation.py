# address_verification/services/collation.py
"""
Turkish collation for address names, backed by ICU.

Python's default ordering compares code points, which puts "Çankırı" after
"Zonguldak" and treats "I"/"ı" and "İ"/"i" as unrelated letters. Names are
sorted with the ICU Turkish collator instead, the same rules MongoDB
applies for `collation={"locale": "tr"}`.
"""
from typing import Iterable, List, TypeVar

import icu

T = TypeVar("T")

TURKISH = icu.Locale("tr")

_sort_collator = icu.Collator.createInstance(TURKISH)

# Secondary strength ignores case but keeps letters such as ı/i apart
_match_collator = icu.Collator.createInstance(TURKISH)
_match_collator.setStrength(icu.Collator.SECONDARY)


def turkish_sort_key(text: str) -> bytes:
    return _sort_collator.getSortKey(text)


def turkish_equals(left: str, right: str) -> bool:
    return _match_collator.compare(left.strip(), right.strip()) == 0


def sorted_by_name(items: Iterable[T], key=lambda item: item.name) -> List[T]:
    """Sorts items by a name attribute in Turkish alphabetical order."""
    return sorted(items, key=lambda item: turkish_sort_key(key(item)))
