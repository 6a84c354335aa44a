"""
Models Module

Immutable value types describing the deployment topology, the credentials it
uses and the results it produces.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Optional, Tuple


def derive_netbios(domain_fqdn: str) -> str:
    """
    Derive NetBIOS name from domain FQDN.

    Args:
        domain_fqdn: Domain FQDN (e.g., contoso.local or dev.contoso.local)

    Returns:
        NetBIOS name (e.g., CONTOSO or DEV)
    """
    first_part = domain_fqdn.split('.')[0]
    return first_part.upper()[:15]


@dataclass(frozen=True)
class SubnetSpec:
    name: str
    address_prefix: str


@dataclass(frozen=True)
class ImageReference:
    publisher: str = 'MicrosoftWindowsServer'
    offer: str = 'WindowsServer'
    sku: str = '2022-datacenter'
    version: str = 'latest'

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class DomainControllerSpec:
    """A domain controller VM and the names of the resources attached to it."""

    name: str
    subnet: str
    private_ip: str

    @property
    def public_ip_name(self) -> str:
        return f"pip-{self.name}"

    @property
    def nic_name(self) -> str:
        return f"nic-{self.name}"


@dataclass(frozen=True)
class NetworkSpec:
    vnet_name: str = 'vnet-adforge'
    address_space: str = '10.0.0.0/16'
    subnets: Tuple[SubnetSpec, ...] = (
        SubnetSpec('snet-dc1', '10.0.1.0/24'),
        SubnetSpec('snet-dc2', '10.0.2.0/24'),
    )
    nsg_name: str = 'nsg-adforge'

    def get_subnet(self, name: str) -> Optional[SubnetSpec]:
        return next((s for s in self.subnets if s.name == name), None)


@dataclass(frozen=True)
class ReadinessPolicy:
    """
    Bounded retry-with-backoff used while waiting for the forest to answer.

    The delay before attempt ``n`` (1-based, first attempt has no delay) is
    ``min(base_delay * backoff_factor ** (n - 2), max_delay)``.
    """

    max_attempts: int = 10
    base_delay: float = 30.0
    max_delay: float = 120.0
    backoff_factor: float = 2.0


@dataclass(frozen=True)
class RemotePollingSpec:
    """DNS polling loop executed inside the replica before it joins."""

    attempts: int = 10
    interval_seconds: int = 30


@dataclass(frozen=True)
class DeploymentConfig:
    """Everything the orchestrator needs to know about the target topology."""

    resource_group: str = 'rg-adforge'
    location: str = 'eastus'
    domain_fqdn: str = 'contoso.local'
    domain_netbios: Optional[str] = None
    vm_size: str = 'Standard_D2s_v3'
    image: ImageReference = field(default_factory=ImageReference)
    network: NetworkSpec = field(default_factory=NetworkSpec)
    primary: DomainControllerSpec = DomainControllerSpec('DC01', 'snet-dc1', '10.0.1.4')
    replica: DomainControllerSpec = DomainControllerSpec('DC02', 'snet-dc2', '10.0.2.4')
    readiness: ReadinessPolicy = field(default_factory=ReadinessPolicy)
    replica_polling: RemotePollingSpec = field(default_factory=RemotePollingSpec)
    confirm_each_step: bool = True
    strict_replica_join: bool = False
    tags: Tuple[Tuple[str, str], ...] = ()

    @property
    def netbios_name(self) -> str:
        return self.domain_netbios or derive_netbios(self.domain_fqdn)

    @property
    def domain_controllers(self) -> Tuple[DomainControllerSpec, DomainControllerSpec]:
        return (self.primary, self.replica)

    @property
    def dns_servers(self) -> Tuple[str, str]:
        return (self.primary.private_ip, self.replica.private_ip)

    def tags_dict(self) -> Dict[str, str]:
        return dict(self.tags)


@dataclass(frozen=True)
class DeploymentCredentials:
    """
    Credential slots used by the deployment.

    The VM local administrator becomes the forest's built-in administrator
    once VM1 is promoted, so the domain admin account shares its user name.
    The passwords are kept in separate slots even when they hold the same
    value.
    """

    admin_username: str
    admin_password: str = field(repr=False)
    domain_admin_password: str = field(repr=False)
    safe_mode_password: str = field(repr=False)

    @classmethod
    def shared(cls, username: str, password: str) -> 'DeploymentCredentials':
        """Fill every slot with the same password."""
        return cls(
            admin_username=username,
            admin_password=password,
            domain_admin_password=password,
            safe_mode_password=password,
        )

    def domain_admin_account(self, domain_fqdn: str) -> str:
        return f"{domain_fqdn}\\{self.admin_username}"


@dataclass(frozen=True)
class RemoteCommandResult:
    vm_name: str
    stdout: str
    stderr: str
    succeeded: bool


@dataclass(frozen=True)
class Ready:
    attempts: int

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class NotReady:
    attempts: int
    reason: str

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class DeploymentResult:
    """Summary returned to the caller after a successful deployment."""

    resource_group: str
    primary_public_ip: str
    replica_public_ip: str
    admin_username: str
    replica_joined: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
