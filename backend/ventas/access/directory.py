# Overview: Per-user set of named permissions loaded after authentication.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping


@dataclass(frozen=True)
class PermissionEntry:
    name: str
    description: str = ""
    module: str = ""

    @classmethod
    def from_record(cls, record) -> "PermissionEntry":
        """
        Build an entry from a get_permissions record, a Permission row or a bare name.

        Records use the wire keys permission_name/description/module.
        """
        if isinstance(record, PermissionEntry):
            return record
        if isinstance(record, str):
            return cls(name=record)
        if isinstance(record, Mapping):
            name = record.get("permission_name") or record.get("name")
            if not name:
                raise ValueError("Permission record without a name")
            return cls(
                name=name,
                description=record.get("description") or record.get("permission_description") or "",
                module=record.get("module") or "",
            )
        return cls(
            name=record.name,
            description=getattr(record, "description", "") or "",
            module=getattr(record, "module", "") or "",
        )


class PermissionDirectory:
    """
    The current user's permissions.

    Replaced wholesale on every sign-in; emptied on sign-out.
    Membership is exact string equality, there are no wildcards.
    """

    def __init__(self, records: Iterable = ()):
        self._entries: dict[str, PermissionEntry] = {}
        self.load(records)

    def load(self, records: Iterable) -> None:
        entries = {}
        for record in records:
            entry = PermissionEntry.from_record(record)
            entries[entry.name] = entry
        self._entries = entries

    def clear(self) -> None:
        self._entries = {}

    def has(self, name: str) -> bool:
        return name in self._entries

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._entries)

    @property
    def entries(self) -> list[PermissionEntry]:
        return list(self._entries.values())

    def by_module(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for entry in self._entries.values():
            grouped.setdefault(entry.module, []).append(entry.name)
        return grouped

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PermissionDirectory({sorted(self._entries)!r})"
