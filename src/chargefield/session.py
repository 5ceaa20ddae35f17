from __future__ import annotations

from typing import Any, Callable

from chargefield.field import FieldBatch
from chargefield.service import FieldConfig, FieldOptions, calculate_field_for

Listener = Callable[[int, FieldBatch], None]

__all__ = ["FieldSession", "Listener"]


class FieldSession:
    """Recompute-on-change wrapper around :func:`calculate_field_for`.

    The session owns the current :class:`FieldConfig`. Every accepted
    parameter change starts a new *generation*; listeners receive
    ``(generation, batch)`` for each generation that completes while it is
    still the newest one. Results of superseded generations are dropped.

    Callers that compute off-thread use :meth:`request` to snapshot the
    configuration and :meth:`deliver` to hand the result back.
    """

    def __init__(self, config: FieldConfig | None = None, *, options: FieldOptions | None = None) -> None:
        self._config = config if config is not None else FieldConfig()
        self._options = options if options is not None else FieldOptions()
        self._generation = 0
        self._latest: FieldBatch | None = None
        self._latest_generation = 0
        self._listeners: list[Listener] = []

    @property
    def config(self) -> FieldConfig:
        return self._config

    @property
    def options(self) -> FieldOptions:
        return self._options

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def latest(self) -> FieldBatch | None:
        return self._latest

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def request(self, **changes: Any) -> tuple[int, FieldConfig]:
        """Apply ``changes`` and open a new generation.

        Invalid values raise :class:`~chargefield.errors.InvalidInput` and
        leave the session untouched.
        """
        config = self._config.replace(**changes) if changes else self._config
        self._config = config
        self._generation += 1
        return self._generation, config

    def deliver(self, generation: int, batch: FieldBatch) -> bool:
        """Publish ``batch`` if ``generation`` is still the newest; else drop it."""
        if not self.is_current(generation):
            if self._options.verbose:
                print(f"[SESSION] Dropping stale result gen={generation} (current={self._generation}).")
            return False
        self._latest = batch
        self._latest_generation = generation
        for listener in list(self._listeners):
            listener(generation, batch)
        return True

    def update(self, **changes: Any) -> FieldBatch:
        """Apply ``changes`` and recompute synchronously.

        An update that leaves the configuration unchanged returns the cached
        batch without recomputing.
        """
        if self._latest is not None and self._latest_generation == self._generation:
            if self._config.replace(**changes) == self._config:
                return self._latest
        generation, config = self.request(**changes)
        batch = calculate_field_for(config, options=self._options)
        self.deliver(generation, batch)
        return batch

    def refresh(self) -> FieldBatch:
        """Recompute the current configuration unconditionally."""
        generation, config = self.request()
        batch = calculate_field_for(config, options=self._options)
        self.deliver(generation, batch)
        return batch
