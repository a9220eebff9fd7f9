"""Compensating-action helper for object-store + database mutations.

There are no transactions spanning the object store and the database, so
multi-step writes register an undo for every completed step. If a later step
raises, the undos run newest-first and the original exception propagates.
"""

from __future__ import annotations

from typing import Any, Callable

from flask import current_app


class Saga:
    def __init__(self, name: str):
        self.name = name
        self._compensations: list[tuple[str, Callable[[], Any]]] = []

    def step(self, label: str, action: Callable[[], Any], compensate: Callable[[], Any] | None = None) -> Any:
        result = action()
        if compensate is not None:
            self._compensations.append((label, compensate))
        return result

    def rollback(self) -> None:
        while self._compensations:
            label, compensate = self._compensations.pop()
            try:
                compensate()
            except Exception:
                current_app.logger.exception('%s: compensation for %s failed', self.name, label)

    def complete(self) -> None:
        self._compensations.clear()

    def __enter__(self) -> 'Saga':
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            current_app.logger.warning('%s: rolling back after %s', self.name, exc_type.__name__)
            self.rollback()
        else:
            self.complete()
        return False
