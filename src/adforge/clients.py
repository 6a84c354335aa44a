"""
Azure Clients Module

Lazily creates the management-plane clients for one subscription.
"""

import logging
import os
from typing import Any, Optional

from azure.identity import DefaultAzureCredential
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_SUBSCRIPTION_ID = 'AZURE_SUBSCRIPTION_ID'


class AzureClients:
    """Holds the resource, network and compute clients for a subscription."""

    def __init__(self, subscription_id: Optional[str] = None, credential: Any = None):
        """
        Initialize the client holder. No network call happens here.

        Args:
            subscription_id: Azure subscription ID (defaults to AZURE_SUBSCRIPTION_ID)
            credential: azure-identity credential (defaults to DefaultAzureCredential)
        """
        self.subscription_id = subscription_id or os.environ.get(ENV_SUBSCRIPTION_ID)
        self._credential = credential
        self._resource: Optional[ResourceManagementClient] = None
        self._network: Optional[NetworkManagementClient] = None
        self._compute: Optional[ComputeManagementClient] = None

    def _require_subscription(self) -> str:
        if not self.subscription_id:
            raise ConfigurationError(
                f"No Azure subscription configured; pass --subscription-id or set {ENV_SUBSCRIPTION_ID}"
            )
        return self.subscription_id

    @property
    def credential(self) -> Any:
        if self._credential is None:
            logger.debug("Using DefaultAzureCredential")
            self._credential = DefaultAzureCredential()
        return self._credential

    @property
    def resource(self) -> ResourceManagementClient:
        if self._resource is None:
            self._resource = ResourceManagementClient(self.credential, self._require_subscription())
        return self._resource

    @property
    def network(self) -> NetworkManagementClient:
        if self._network is None:
            self._network = NetworkManagementClient(self.credential, self._require_subscription())
        return self._network

    @property
    def compute(self) -> ComputeManagementClient:
        if self._compute is None:
            self._compute = ComputeManagementClient(self.credential, self._require_subscription())
        return self._compute
