"""
Resource Provisioner Module

Issues the create calls for the resource group, network and both domain
controller VMs. Every call waits for its long-running operation and lets any
error propagate; there is no retry and no cleanup.
"""

import logging
from typing import Any, Dict

from .exceptions import ProvisioningError
from .models import DeploymentConfig, DeploymentCredentials, DomainControllerSpec
from .plan_builder import PlanBuilder

logger = logging.getLogger(__name__)


class ResourceProvisioner:
    """Create the Azure resources of the deployment, one call at a time."""

    def __init__(self, config: DeploymentConfig, clients: Any):
        """
        Initialize the ResourceProvisioner.

        Args:
            config: Immutable deployment configuration
            clients: Object exposing ``resource``, ``network`` and ``compute``
                management clients (see AzureClients)
        """
        self.config = config
        self.clients = clients
        self.builder = PlanBuilder(config)

    @property
    def resource_group(self) -> str:
        return self.config.resource_group

    def create_resource_group(self) -> Any:
        logger.info("Creating resource group %s in %s", self.resource_group, self.config.location)
        return self.clients.resource.resource_groups.create_or_update(
            self.resource_group,
            self.builder.resource_group_parameters(),
        )

    def create_virtual_network(self) -> Dict[str, str]:
        """
        Create the virtual network and its subnets.

        Returns:
            Mapping of subnet name to subnet id
        """
        vnet_name = self.config.network.vnet_name
        logger.info(
            "Creating virtual network %s (%s) with subnets %s",
            vnet_name,
            self.config.network.address_space,
            ", ".join(s.name for s in self.config.network.subnets),
        )
        vnet = self.clients.network.virtual_networks.begin_create_or_update(
            self.resource_group,
            vnet_name,
            self.builder.virtual_network_parameters(),
        ).result()

        subnet_ids = {subnet.name: subnet.id for subnet in (vnet.subnets or [])}
        missing = [s.name for s in self.config.network.subnets if s.name not in subnet_ids]
        if missing:
            raise ProvisioningError(
                f"Virtual network {vnet_name} was created without subnets: {', '.join(missing)}"
            )
        return subnet_ids

    def create_network_security_group(self) -> str:
        """
        Create the NSG with the RDP and intra-VNet rules.

        Returns:
            NSG resource id
        """
        nsg_name = self.config.network.nsg_name
        logger.info("Creating network security group %s", nsg_name)
        nsg = self.clients.network.network_security_groups.begin_create_or_update(
            self.resource_group,
            nsg_name,
            self.builder.network_security_group_parameters(),
        ).result()
        return self._require_id(nsg, nsg_name)

    def create_public_ip(self, dc: DomainControllerSpec) -> str:
        """Create the static public IP of a controller and return its id."""
        logger.info("Creating public IP %s", dc.public_ip_name)
        pip = self.clients.network.public_ip_addresses.begin_create_or_update(
            self.resource_group,
            dc.public_ip_name,
            self.builder.public_ip_parameters(dc),
        ).result()
        return self._require_id(pip, dc.public_ip_name)

    def create_nic(self, dc: DomainControllerSpec, subnet_id: str, public_ip_id: str, nsg_id: str) -> str:
        """Create the NIC of a controller bound to its static private IP and return its id."""
        logger.info("Creating network interface %s (%s)", dc.nic_name, dc.private_ip)
        nic = self.clients.network.network_interfaces.begin_create_or_update(
            self.resource_group,
            dc.nic_name,
            self.builder.nic_parameters(dc, subnet_id, public_ip_id, nsg_id),
        ).result()
        return self._require_id(nic, dc.nic_name)

    def create_vm(self, dc: DomainControllerSpec, nic_id: str, credentials: DeploymentCredentials) -> Any:
        logger.info("Creating virtual machine %s (%s)", dc.name, self.config.vm_size)
        return self.clients.compute.virtual_machines.begin_create_or_update(
            self.resource_group,
            dc.name,
            self.builder.vm_parameters(dc, nic_id, credentials),
        ).result()

    def create_domain_controller(
        self,
        dc: DomainControllerSpec,
        subnet_ids: Dict[str, str],
        nsg_id: str,
        credentials: DeploymentCredentials,
    ) -> Any:
        """
        Create the public IP, NIC and VM of one controller, in that order.

        Returns:
            The created virtual machine
        """
        subnet_id = subnet_ids.get(dc.subnet)
        if not subnet_id:
            raise ProvisioningError(f"Subnet {dc.subnet} for {dc.name} does not exist")

        public_ip_id = self.create_public_ip(dc)
        nic_id = self.create_nic(dc, subnet_id, public_ip_id, nsg_id)
        return self.create_vm(dc, nic_id, credentials)

    def delete_resource_group(self):
        logger.info("Deleting resource group %s", self.resource_group)
        self.clients.resource.resource_groups.begin_delete(self.resource_group).result()

    @staticmethod
    def _require_id(resource: Any, name: str) -> str:
        resource_id = getattr(resource, 'id', None)
        if not resource_id:
            raise ProvisioningError(f"Azure returned no id for {name}")
        return resource_id
