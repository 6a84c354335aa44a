"""
Plan Builder Module

Builds the request bodies for every management-plane call of a deployment,
and the ordered plan of those calls for offline inspection.
"""

from typing import Dict, Any, List, Optional

from .models import DeploymentConfig, DeploymentCredentials, DomainControllerSpec
from .scripts import REDACTED

SUBSCRIPTION_PLACEHOLDER = '{subscriptionId}'

NSG_RULE_RDP = 'AllowRDP'
NSG_RULE_VNET = 'AllowVnetInBound'


def resource_id(
    subscription_id: str,
    resource_group: str,
    resource_type: str,
    name: str,
    child_type: Optional[str] = None,
    child_name: Optional[str] = None,
) -> str:
    """
    Format an Azure resource id.

    Args:
        subscription_id: Subscription GUID (or placeholder)
        resource_group: Resource group name
        resource_type: Provider-qualified type, e.g. 'Microsoft.Network/virtualNetworks'
        name: Resource name
        child_type: Optional child type, e.g. 'subnets'
        child_name: Optional child resource name

    Returns:
        Resource id string
    """
    rid = (
        f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
        f"/providers/{resource_type}/{name}"
    )
    if child_type and child_name:
        rid += f"/{child_type}/{child_name}"
    return rid


class PlanBuilder:
    """Build request bodies for the provisioning calls."""

    def __init__(self, config: DeploymentConfig):
        """
        Initialize the PlanBuilder.

        Args:
            config: Immutable deployment configuration
        """
        self.config = config

    def resource_group_parameters(self) -> Dict[str, Any]:
        """Body for resource_groups.create_or_update."""
        return {
            "location": self.config.location,
            "tags": self.config.tags_dict(),
        }

    def virtual_network_parameters(self) -> Dict[str, Any]:
        """Body for virtual_networks.begin_create_or_update (two subnets, no DNS yet)."""
        network = self.config.network
        return {
            "location": self.config.location,
            "tags": self.config.tags_dict(),
            "address_space": {"address_prefixes": [network.address_space]},
            "subnets": [
                {"name": subnet.name, "address_prefix": subnet.address_prefix}
                for subnet in network.subnets
            ],
        }

    def network_security_group_parameters(self) -> Dict[str, Any]:
        """Body for network_security_groups.begin_create_or_update."""
        return {
            "location": self.config.location,
            "tags": self.config.tags_dict(),
            "security_rules": [
                {
                    "name": NSG_RULE_RDP,
                    "priority": 1000,
                    "direction": "Inbound",
                    "access": "Allow",
                    "protocol": "Tcp",
                    "source_address_prefix": "*",
                    "source_port_range": "*",
                    "destination_address_prefix": "*",
                    "destination_port_range": "3389",
                },
                {
                    "name": NSG_RULE_VNET,
                    "priority": 1010,
                    "direction": "Inbound",
                    "access": "Allow",
                    "protocol": "*",
                    "source_address_prefix": "VirtualNetwork",
                    "source_port_range": "*",
                    "destination_address_prefix": "VirtualNetwork",
                    "destination_port_range": "*",
                },
            ],
        }

    def public_ip_parameters(self, dc: DomainControllerSpec) -> Dict[str, Any]:
        """Body for public_ip_addresses.begin_create_or_update."""
        return {
            "location": self.config.location,
            "tags": self.config.tags_dict(),
            "sku": {"name": "Standard"},
            "public_ip_allocation_method": "Static",
            "public_ip_address_version": "IPv4",
        }

    def nic_parameters(
        self,
        dc: DomainControllerSpec,
        subnet_id: str,
        public_ip_id: str,
        nsg_id: str,
    ) -> Dict[str, Any]:
        """Body for network_interfaces.begin_create_or_update."""
        return {
            "location": self.config.location,
            "tags": self.config.tags_dict(),
            "ip_configurations": [
                {
                    "name": "ipconfig1",
                    "private_ip_allocation_method": "Static",
                    "private_ip_address": dc.private_ip,
                    "subnet": {"id": subnet_id},
                    "public_ip_address": {"id": public_ip_id},
                }
            ],
            "network_security_group": {"id": nsg_id},
        }

    def vm_parameters(
        self,
        dc: DomainControllerSpec,
        nic_id: str,
        credentials: DeploymentCredentials,
    ) -> Dict[str, Any]:
        """Body for virtual_machines.begin_create_or_update."""
        return {
            "location": self.config.location,
            "tags": self.config.tags_dict(),
            "hardware_profile": {"vm_size": self.config.vm_size},
            "storage_profile": {
                "image_reference": self.config.image.to_dict(),
                "os_disk": {
                    "name": f"osdisk-{dc.name}",
                    "create_option": "FromImage",
                    "managed_disk": {"storage_account_type": "Premium_LRS"},
                },
            },
            "os_profile": {
                "computer_name": dc.name,
                "admin_username": credentials.admin_username,
                "admin_password": credentials.admin_password,
                "windows_configuration": {
                    "enable_automatic_updates": True,
                    "provision_vm_agent": True,
                },
            },
            "network_profile": {
                "network_interfaces": [{"id": nic_id, "primary": True}],
            },
        }

    def build(
        self,
        admin_username: str = 'labadmin',
        subscription_id: str = SUBSCRIPTION_PLACEHOLDER,
    ) -> List[Dict[str, Any]]:
        """
        Build the ordered list of calls a deployment issues.

        Ids that are only known after creation are filled with the resource
        id Azure will assign; passwords are redacted.

        Args:
            admin_username: Admin user name to show in the VM bodies
            subscription_id: Subscription used to format resource ids

        Returns:
            List of {'step', 'operation', 'name', 'parameters'} dictionaries
        """
        config = self.config
        rg = config.resource_group
        placeholder_creds = DeploymentCredentials.shared(admin_username, REDACTED)

        def rid(resource_type, name, child_type=None, child_name=None):
            return resource_id(subscription_id, rg, resource_type, name, child_type, child_name)

        nsg_id = rid('Microsoft.Network/networkSecurityGroups', config.network.nsg_name)

        plan = [
            self._step('resource_groups.create_or_update', rg, self.resource_group_parameters()),
            self._step(
                'virtual_networks.begin_create_or_update',
                config.network.vnet_name,
                self.virtual_network_parameters(),
            ),
            self._step(
                'network_security_groups.begin_create_or_update',
                config.network.nsg_name,
                self.network_security_group_parameters(),
            ),
        ]

        for dc in config.domain_controllers:
            subnet_id = rid(
                'Microsoft.Network/virtualNetworks', config.network.vnet_name, 'subnets', dc.subnet
            )
            pip_id = rid('Microsoft.Network/publicIPAddresses', dc.public_ip_name)
            nic_id = rid('Microsoft.Network/networkInterfaces', dc.nic_name)
            plan.append(self._step(
                'public_ip_addresses.begin_create_or_update',
                dc.public_ip_name,
                self.public_ip_parameters(dc),
            ))
            plan.append(self._step(
                'network_interfaces.begin_create_or_update',
                dc.nic_name,
                self.nic_parameters(dc, subnet_id, pip_id, nsg_id),
            ))
            plan.append(self._step(
                'virtual_machines.begin_create_or_update',
                dc.name,
                self.vm_parameters(dc, nic_id, placeholder_creds),
            ))

        plan.append(self._step(
            'virtual_machines.begin_run_command',
            config.primary.name,
            {"command_id": "RunPowerShellScript", "purpose": "promote new forest"},
        ))
        plan.append(self._step(
            'virtual_machines.begin_run_command',
            config.replica.name,
            {"command_id": "RunPowerShellScript", "purpose": "join as replica domain controller"},
        ))
        plan.append(self._step(
            'virtual_networks.begin_create_or_update',
            config.network.vnet_name,
            {"dhcp_options": {"dns_servers": list(config.dns_servers)}},
        ))

        for index, entry in enumerate(plan, start=1):
            entry["step"] = index
        return plan

    @staticmethod
    def _step(operation: str, name: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        return {"step": 0, "operation": operation, "name": name, "parameters": parameters}
