"""
Reporter Module

Collects the public IPs of both controllers into the deployment result.
"""

import logging
from typing import Any

from .exceptions import ProvisioningError
from .models import DeploymentConfig, DeploymentCredentials, DeploymentResult, DomainControllerSpec

logger = logging.getLogger(__name__)


class Reporter:
    """Build the DeploymentResult from the created public IP resources."""

    def __init__(self, config: DeploymentConfig, clients: Any):
        self.config = config
        self.clients = clients

    def public_ip_of(self, dc: DomainControllerSpec) -> str:
        """Look up a controller's public IP resource by name."""
        pip = self.clients.network.public_ip_addresses.get(
            self.config.resource_group, dc.public_ip_name
        )
        if not pip.ip_address:
            raise ProvisioningError(f"Public IP {dc.public_ip_name} has no address assigned")
        return pip.ip_address

    def report(self, credentials: DeploymentCredentials, replica_joined: bool = True) -> DeploymentResult:
        result = DeploymentResult(
            resource_group=self.config.resource_group,
            primary_public_ip=self.public_ip_of(self.config.primary),
            replica_public_ip=self.public_ip_of(self.config.replica),
            admin_username=credentials.admin_username,
            replica_joined=replica_joined,
        )
        logger.info(
            "Deployment %s ready: %s=%s, %s=%s",
            result.resource_group,
            self.config.primary.name, result.primary_public_ip,
            self.config.replica.name, result.replica_public_ip,
        )
        return result
