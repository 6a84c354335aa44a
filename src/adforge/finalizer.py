"""
Network Finalizer Module

Points the virtual network's DNS settings at the two domain controllers.
"""

import logging
from typing import Any, List

from azure.mgmt.network.models import DhcpOptions

from .models import DeploymentConfig

logger = logging.getLogger(__name__)


class NetworkFinalizer:
    """Rewrite the VNet DNS server list once both controllers are configured."""

    def __init__(self, config: DeploymentConfig, clients: Any):
        self.config = config
        self.clients = clients

    def finalize_dns(self) -> List[str]:
        """
        Overwrite the VNet DNS servers with the controllers' private IPs.

        Returns:
            The DNS server list that was persisted (primary first)
        """
        vnet_name = self.config.network.vnet_name
        dns_servers = list(self.config.dns_servers)
        networks = self.clients.network.virtual_networks

        vnet = networks.get(self.config.resource_group, vnet_name)
        if vnet.dhcp_options is None:
            vnet.dhcp_options = DhcpOptions(dns_servers=dns_servers)
        else:
            vnet.dhcp_options.dns_servers = dns_servers

        logger.info("Setting DNS servers of %s to %s", vnet_name, ", ".join(dns_servers))
        networks.begin_create_or_update(self.config.resource_group, vnet_name, vnet).result()
        return dns_servers
