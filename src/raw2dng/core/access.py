from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Protocol


class ResourceRef(Protocol):
    """A file or folder that must be opened for access before use.

    begin_access()/end_access() calls are balanced: end_access() is only
    called after a begin_access() that returned True.
    """

    @property
    def path(self) -> Path: ...

    def begin_access(self) -> bool: ...

    def end_access(self) -> None: ...


@dataclass(frozen=True)
class LocalResource:
    """Plain filesystem path with access granted by OS permissions.

    Files need read permission; directories need write permission when
    `writable` is set (used for the output folder).
    """
    path: Path
    writable: bool = False

    @property
    def extension(self) -> str:
        return self.path.suffix.lower().lstrip(".")

    def begin_access(self) -> bool:
        if not self.path.exists():
            return False
        if self.writable:
            return self.path.is_dir() and os.access(self.path, os.W_OK | os.X_OK)
        return os.access(self.path, os.R_OK)

    def end_access(self) -> None:
        return None


def local_inputs(paths: list[Path]) -> list[LocalResource]:
    return [LocalResource(p) for p in paths]


def local_output(path: Path) -> LocalResource:
    return LocalResource(path, writable=True)


@contextmanager
def scoped_access(*refs: ResourceRef) -> Iterator[bool]:
    """Begin access on every ref; yield True only if all were granted.

    Refs that were granted are released on exit, whatever happens inside
    the block. Acquisition stops at the first refusal.
    """
    acquired: list[ResourceRef] = []
    try:
        granted = True
        for ref in refs:
            if not ref.begin_access():
                granted = False
                break
            acquired.append(ref)
        yield granted
    finally:
        for ref in reversed(acquired):
            ref.end_access()
