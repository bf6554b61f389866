from __future__ import annotations

from dataclasses import dataclass

from .clients.catalog_client import CatalogClient
from .clients.inventory_client import InventoryClient
from .config import ClientConfig
from .engine import ReconciliationEngine
from .http_client import HttpClient, TraceContext
from .workflows import Workflow, get_workflow


@dataclass
class ApiSession:
    """Builds clients and engines that share one config and trace context."""

    config: ClientConfig
    trace: TraceContext | None = None
    app_id: str | None = None
    device_id: str | None = None

    def __post_init__(self) -> None:
        self.trace = self.trace or TraceContext()

    def _http(self) -> HttpClient:
        return HttpClient(config=self.config, trace=self.trace)

    def inventory_client(self) -> InventoryClient:
        return InventoryClient(http=self._http(), app_id=self.app_id, device_id=self.device_id)

    def catalog_client(self) -> CatalogClient:
        return CatalogClient(http=self._http(), app_id=self.app_id, device_id=self.device_id)

    def engine(self, workflow: Workflow | str | None = None) -> ReconciliationEngine:
        """Engine for ``workflow``, or the configured default, with the configured context."""
        if workflow is None:
            workflow = self.config.default_workflow
        resolved = get_workflow(workflow) if isinstance(workflow, str) else workflow
        inventory = self.inventory_client()
        return ReconciliationEngine(
            inventory,
            resolved,
            committer=inventory,
            catalog=self.catalog_client(),
            default_context=self.config.default_context(),
        )
