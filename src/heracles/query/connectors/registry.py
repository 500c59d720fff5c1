"""
Backend connector registry.

Maps each Backend to the connector class speaking its protocol and to the
panel kinds that backend can feed. Dashboard parsing asks the registry which
backends a panel kind accepts, and the orchestrator builds connectors
through it, so both agree on what a plot or log stream may point at.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, Tuple

from heracles.core.errors import ConfigurationError
from heracles.query.connectors.base import QueryConnector
from heracles.query.models import Backend, PanelKind

ConnectorFactory = Callable[..., QueryConnector]


@dataclass(frozen=True)
class ConnectorSpec:
    """A registered backend: how to build its connector and where it may be used."""

    backend: Backend
    factory: ConnectorFactory
    panels: FrozenSet[PanelKind]

    def serves(self, panel: PanelKind) -> bool:
        return panel in self.panels


class ConnectorRegistry:
    """Backend to connector lookup, in registration order."""

    def __init__(self) -> None:
        self._connectors: Dict[Backend, ConnectorSpec] = {}

    def register(
        self,
        backend: Backend,
        factory: ConnectorFactory,
        panels: Iterable[PanelKind],
    ) -> None:
        panels = frozenset(panels)
        if not panels:
            raise ValueError(f"Connector for {backend.value!r} must serve at least one panel kind")
        self._connectors[backend] = ConnectorSpec(backend=backend, factory=factory, panels=panels)

    def backends_for(self, panel: PanelKind) -> Tuple[Backend, ...]:
        return tuple(spec.backend for spec in self._connectors.values() if spec.serves(panel))

    def create(self, backend: Backend, panel: PanelKind, **kwargs: Any) -> QueryConnector:
        """
        Build the connector for a backend.

        Raises:
            ConfigurationError: If the backend is not registered or cannot feed the panel kind
        """
        spec = self._connectors.get(backend)
        if spec is None:
            raise ConfigurationError(
                f"No connector registered for backend {backend.value!r}",
                {"backend": backend.value},
            )
        if not spec.serves(panel):
            raise ConfigurationError(
                f"Backend {backend.value!r} cannot feed {panel.value} panels",
                {"backend": backend.value, "panel_kind": panel.value},
            )
        return spec.factory(**kwargs)


connector_registry = ConnectorRegistry()


def register_connector(
    backend: Backend,
    factory: ConnectorFactory,
    panels: Iterable[PanelKind],
) -> None:
    connector_registry.register(backend, factory, panels)


def backends_for(panel: PanelKind) -> Tuple[Backend, ...]:
    return connector_registry.backends_for(panel)


def create_connector(backend: Backend, panel: PanelKind, **kwargs: Any) -> QueryConnector:
    return connector_registry.create(backend, panel, **kwargs)
