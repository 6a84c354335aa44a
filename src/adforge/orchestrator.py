"""
Orchestrator Module

Coordinates the deployment of the two-controller Active Directory lab:
provision resources, promote both controllers, finalize DNS and report.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from .clients import AzureClients
from .configurator import RemoteConfigurator
from .exceptions import (
    ConfigurationError,
    ForestNotReadyError,
    OperationCancelled,
    ReplicaJoinError,
)
from .finalizer import NetworkFinalizer
from .models import DeploymentConfig, DeploymentCredentials, DeploymentResult
from .plan_builder import PlanBuilder
from .provisioner import ResourceProvisioner
from .reporter import Reporter

logger = logging.getLogger(__name__)


def _decline_all(message: str) -> bool:
    return False


class Orchestrator:
    """Orchestrate Azure deployments."""

    def __init__(
        self,
        config: DeploymentConfig,
        credential_source: Optional[Callable[[], DeploymentCredentials]] = None,
        clients: Any = None,
        confirm: Optional[Callable[[str], bool]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the Orchestrator.

        Args:
            config: Immutable deployment configuration
            credential_source: Callable returning the credentials; may prompt
                and raise CredentialPromptCancelled
            clients: Management clients (defaults to AzureClients for the
                environment's subscription)
            confirm: Callable asked before each mutating step when
                ``config.confirm_each_step`` is set; declines when omitted
            sleep: Sleep function used while waiting for the forest
        """
        self.config = config
        self.credential_source = credential_source
        self.clients = clients if clients is not None else AzureClients()
        self.confirm = confirm or _decline_all
        self.sleep = sleep

    def set_subscription(self, subscription_id: str):
        """Set the Azure subscription ID."""
        self.clients.subscription_id = subscription_id

    def _confirm(self, message: str):
        if not self.config.confirm_each_step:
            return
        if not self.confirm(message):
            raise OperationCancelled(f"Declined: {message}")

    def deploy(self) -> Optional[DeploymentResult]:
        """
        Deploy the lab environment to Azure.

        Returns:
            DeploymentResult on success, None on any failure or cancellation
        """
        try:
            return self._deploy()
        except OperationCancelled as e:
            logger.warning("Deployment cancelled: %s", e)
            return None
        except Exception as e:
            logger.exception("Deployment of %s failed: %s", self.config.resource_group, e)
            return None

    def _deploy(self) -> DeploymentResult:
        if self.credential_source is None:
            raise ConfigurationError("No credential source configured for deployment")
        credentials = self.credential_source()

        config = self.config
        provisioner = ResourceProvisioner(config, self.clients)
        configurator = RemoteConfigurator(config, self.clients, credentials, sleep=self.sleep)

        self._confirm(f"Create resource group '{config.resource_group}' in {config.location}?")
        provisioner.create_resource_group()

        self._confirm(f"Create virtual network '{config.network.vnet_name}'?")
        subnet_ids = provisioner.create_virtual_network()

        self._confirm(f"Create network security group '{config.network.nsg_name}'?")
        nsg_id = provisioner.create_network_security_group()

        for dc in config.domain_controllers:
            self._confirm(f"Create public IP, NIC and VM for '{dc.name}' ({dc.private_ip})?")
            provisioner.create_domain_controller(dc, subnet_ids, nsg_id, credentials)

        self._confirm(f"Promote '{config.primary.name}' to new forest '{config.domain_fqdn}'?")
        configurator.promote_forest(config.primary)

        readiness = configurator.wait_for_forest(config.primary, config.replica)
        if not readiness:
            raise ForestNotReadyError(
                f"Forest {config.domain_fqdn} not reachable after {readiness.attempts} attempts: "
                f"{readiness.reason}"
            )

        self._confirm(f"Promote '{config.replica.name}' as replica of '{config.domain_fqdn}'?")
        replica = configurator.join_replica(config.primary, config.replica)
        if not replica.succeeded:
            if config.strict_replica_join:
                raise ReplicaJoinError(f"{replica.vm_name} failed to join {config.domain_fqdn}")
            logger.warning(
                "%s failed to join %s; continuing with DNS finalization",
                replica.vm_name, config.domain_fqdn,
            )

        self._confirm(f"Set DNS servers of '{config.network.vnet_name}' to {', '.join(config.dns_servers)}?")
        NetworkFinalizer(config, self.clients).finalize_dns()

        return Reporter(config, self.clients).report(credentials, replica_joined=replica.succeeded)

    def destroy(self) -> bool:
        """
        Destroy the lab environment.

        Returns:
            True if destruction succeeded, False otherwise
        """
        try:
            ResourceProvisioner(self.config, self.clients).delete_resource_group()
            return True
        except Exception as e:
            logger.error("Destroy of %s failed: %s", self.config.resource_group, e)
            return False

    def plan(self, admin_username: str = 'labadmin') -> List[Dict[str, Any]]:
        """Ordered list of the calls deploy() issues, without contacting Azure."""
        return PlanBuilder(self.config).build(admin_username=admin_username)

    def print_connection_info(self, result: DeploymentResult):
        """Print connection information for deployed resources."""
        print("\n" + "=" * 60)
        print("CONNECTION INFORMATION")
        print("=" * 60)

        print(f"\nResource Group: {result.resource_group}")
        print(f"Location: {self.config.location}")

        print("\nDomain Controllers:")
        public_ips = (result.primary_public_ip, result.replica_public_ip)
        for dc, public_ip in zip(self.config.domain_controllers, public_ips):
            print(f"\n  {dc.name}")
            print(f"    Private IP: {dc.private_ip}")
            print(f"    Public IP: {public_ip}")

        print(f"\nAdmin Username: {result.admin_username}")
        print("Admin Password: <configured>")

        print("\nActive Directory:")
        print(f"  Domain: {self.config.domain_fqdn}")
        print(f"  NetBIOS: {self.config.netbios_name}")
        if not result.replica_joined:
            print(f"  WARNING: {self.config.replica.name} did not report a completed join")

        print("\n" + "=" * 60)
