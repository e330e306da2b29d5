"""Keyword search predicate over designated text fields of cached records."""

from typing import Any


class KeywordFilter:
    """Substring match of a keyword against a fixed set of record fields."""

    def __init__(self, fields: list[str], case_sensitive: bool = True):
        self.fields = list(fields)
        self.case_sensitive = case_sensitive

    def matches(self, record: Any, keyword: str) -> bool:
        if not isinstance(record, dict):
            return False
        needle = keyword if self.case_sensitive else keyword.lower()
        for field in self.fields:
            value = record.get(field)
            if not isinstance(value, str):
                continue
            haystack = value if self.case_sensitive else value.lower()
            if needle in haystack:
                return True
        return False

    def apply(self, records: list[Any], keyword: str | None) -> list[Any]:
        """Filter records; a blank keyword keeps everything."""
        if not keyword:
            return list(records)
        return [r for r in records if self.matches(r, keyword)]
