"""
Configuration Validator Module

Validates YAML configuration against the schema and performs semantic validation.
"""

import ipaddress
import re
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple
import yaml
from jsonschema import validate, ValidationError

from .config_loader import ConfigLoader
from .models import DeploymentConfig

SCHEMA_PATH = Path(__file__).parent / 'schemas' / 'deployment.schema.yaml'

FQDN_PATTERN = re.compile(r'^(?=.{1,253}$)([a-zA-Z0-9][a-zA-Z0-9-]{0,62}\.)+[a-zA-Z]{2,63}$')

# Azure reserves the first four addresses and the last address of every subnet.
AZURE_RESERVED_HEAD = 4

WINDOWS_NAME_LIMIT = 15


class ConfigValidator:
    """Validate configuration files against schema and deployment rules."""

    def __init__(self, schema_path: Optional[str] = None):
        """
        Initialize the ConfigValidator.

        Args:
            schema_path: Path to the schema file (defaults to the packaged schema)
        """
        self.schema_path = Path(schema_path) if schema_path else SCHEMA_PATH
        self.schema = self._load_schema()
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def _load_schema(self) -> Dict[str, Any]:
        """Load the JSON schema from file."""
        if not self.schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {self.schema_path}")

        with open(self.schema_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    def validate(self, config: Dict[str, Any]) -> Tuple[bool, List[str], List[str]]:
        """
        Validate configuration against schema and deployment rules.

        Args:
            config: Raw configuration dictionary to validate

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        # Schema validation
        try:
            validate(instance=config, schema=self.schema)
        except ValidationError as e:
            location = '.'.join(str(p) for p in e.absolute_path) or '<root>'
            self.errors.append(f"Schema validation error at {location}: {e.message}")
            return False, self.errors, self.warnings

        loader = ConfigLoader()
        loader.config = config
        deployment = loader.build()

        # Semantic validation
        self.validate_deployment(deployment)

        is_valid = len(self.errors) == 0
        return is_valid, self.errors, self.warnings

    def validate_deployment(self, deployment: DeploymentConfig):
        """Run the semantic checks on an already built configuration."""
        self._validate_network(deployment)
        self._validate_domain_controllers(deployment)
        self._validate_domain(deployment)
        self._validate_timings(deployment)

        if not deployment.strict_replica_join:
            self.warnings.append(
                "strict_replica_join is off: a replica that fails to join does not stop "
                "DNS finalization"
            )

    def _validate_network(self, deployment: DeploymentConfig):
        """Validate network configuration."""
        network = deployment.network
        vnet_range = network.address_space

        names = [s.name for s in network.subnets]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            self.errors.append(f"Duplicate subnet names found: {', '.join(duplicates)}")

        for subnet in network.subnets:
            if not self._is_subnet_in_vnet(subnet.address_prefix, vnet_range):
                self.errors.append(
                    f"Subnet {subnet.name} range {subnet.address_prefix} "
                    f"is not within VNet range {vnet_range}"
                )

        for i, subnet1 in enumerate(network.subnets):
            for subnet2 in network.subnets[i + 1:]:
                if self._subnets_overlap(subnet1.address_prefix, subnet2.address_prefix):
                    self.errors.append(
                        f"Subnets '{subnet1.name}' and '{subnet2.name}' have overlapping address ranges"
                    )

    def _validate_domain_controllers(self, deployment: DeploymentConfig):
        """Validate the two domain controller definitions."""
        primary, replica = deployment.domain_controllers

        if primary.name.lower() == replica.name.lower():
            self.errors.append(f"Duplicate VM name: {primary.name}")
        if primary.private_ip == replica.private_ip:
            self.errors.append(f"Duplicate IP address: {primary.private_ip}")

        for dc in deployment.domain_controllers:
            # Azure limit for Windows computer names
            if len(dc.name) > WINDOWS_NAME_LIMIT:
                self.errors.append(
                    f"Windows VM name '{dc.name}' exceeds {WINDOWS_NAME_LIMIT} character limit"
                )

            subnet = deployment.network.get_subnet(dc.subnet)
            if subnet is None:
                self.errors.append(f"VM '{dc.name}' references non-existent subnet '{dc.subnet}'")
                continue

            if not self._is_ip_in_subnet(dc.private_ip, subnet.address_prefix):
                self.errors.append(
                    f"IP {dc.private_ip} for VM '{dc.name}' "
                    f"is not in subnet range {subnet.address_prefix}"
                )
            elif self._is_reserved_ip(dc.private_ip, subnet.address_prefix):
                self.errors.append(
                    f"IP {dc.private_ip} for VM '{dc.name}' is reserved by Azure "
                    f"in subnet {subnet.address_prefix}"
                )

    def _validate_domain(self, deployment: DeploymentConfig):
        """Validate Active Directory naming."""
        if not FQDN_PATTERN.match(deployment.domain_fqdn):
            self.errors.append(f"Invalid domain FQDN format: {deployment.domain_fqdn}")

        if deployment.domain_netbios and len(deployment.domain_netbios) > 15:
            self.errors.append(
                f"NetBIOS name '{deployment.domain_netbios}' exceeds 15 character limit"
            )

    def _validate_timings(self, deployment: DeploymentConfig):
        """Validate readiness and polling settings."""
        readiness = deployment.readiness
        if readiness.max_attempts < 1:
            self.errors.append("readiness.max_attempts must be at least 1")
        if readiness.base_delay < 0 or readiness.max_delay < 0:
            self.errors.append("readiness delays must not be negative")
        if readiness.backoff_factor < 1:
            self.errors.append("readiness.backoff_factor must be at least 1")

        polling = deployment.replica_polling
        if polling.attempts < 1:
            self.errors.append("replica_polling.attempts must be at least 1")
        if polling.interval_seconds < 0:
            self.errors.append("replica_polling.interval_seconds must not be negative")

    def _is_subnet_in_vnet(self, subnet_cidr: str, vnet_cidr: str) -> bool:
        """Check if subnet CIDR is within VNet CIDR."""
        try:
            subnet = ipaddress.ip_network(subnet_cidr, strict=False)
            vnet = ipaddress.ip_network(vnet_cidr, strict=False)
            return subnet.subnet_of(vnet)
        except ValueError:
            return False

    def _is_ip_in_subnet(self, ip: str, subnet_cidr: str) -> bool:
        """Check if IP address is within subnet CIDR."""
        try:
            ip_addr = ipaddress.ip_address(ip)
            subnet = ipaddress.ip_network(subnet_cidr, strict=False)
            return ip_addr in subnet
        except ValueError:
            return False

    def _is_reserved_ip(self, ip: str, subnet_cidr: str) -> bool:
        ip_addr = ipaddress.ip_address(ip)
        subnet = ipaddress.ip_network(subnet_cidr, strict=False)
        offset = int(ip_addr) - int(subnet.network_address)
        return offset < AZURE_RESERVED_HEAD or ip_addr == subnet.broadcast_address

    def _subnets_overlap(self, cidr1: str, cidr2: str) -> bool:
        """Check if two CIDR ranges overlap."""
        try:
            net1 = ipaddress.ip_network(cidr1, strict=False)
            net2 = ipaddress.ip_network(cidr2, strict=False)
            return net1.overlaps(net2)
        except ValueError:
            return False

    def get_errors(self) -> List[str]:
        """Get validation errors."""
        return self.errors

    def get_warnings(self) -> List[str]:
        """Get validation warnings."""
        return self.warnings
