"""
Configuration Loader Module

Handles loading YAML configuration files and turning them into an immutable
DeploymentConfig.
"""

from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from .exceptions import ConfigurationError
from .models import (
    DeploymentConfig,
    DomainControllerSpec,
    ImageReference,
    NetworkSpec,
    ReadinessPolicy,
    RemotePollingSpec,
    SubnetSpec,
)


class ConfigLoader:
    """Load and parse YAML configuration files."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the ConfigLoader.

        Args:
            config_path: Path to the YAML configuration file. When omitted,
                every setting falls back to its default.
        """
        self.config_path = config_path
        self.config: Dict[str, Any] = {}

    def load(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Dictionary containing the parsed configuration (empty when no
            path was given)

        Raises:
            FileNotFoundError: If the configuration file doesn't exist
            ConfigurationError: If the YAML is malformed or not a mapping
        """
        path = config_path or self.config_path

        if not path:
            self.config = {}
            return self.config

        config_file = Path(path)

        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing YAML configuration: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping, got {type(loaded).__name__}"
            )

        self.config = loaded
        return self.config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key.

        Args:
            key: Configuration key (supports dot notation, e.g., 'network.vnet_name')
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def apply_overrides(self, overrides: Dict[str, Any]):
        """
        Apply dotted-key overrides (typically CLI flags) on top of the file.

        Keys whose value is None are skipped so unset flags keep the file value.

        Args:
            overrides: Mapping such as {'domain.fqdn': 'corp.local'}
        """
        for key, value in overrides.items():
            if value is None:
                continue
            section = self.config
            parts = key.split('.')
            for part in parts[:-1]:
                section = section.setdefault(part, {})
            section[parts[-1]] = value

    def get_credentials(self) -> Dict[str, str]:
        """Get credentials configuration section."""
        return self.config.get('credentials', {}) or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Get the full configuration as a dictionary.

        Returns:
            Complete configuration dictionary
        """
        return self.config.copy()

    def build(self) -> DeploymentConfig:
        """
        Build the immutable deployment configuration.

        Returns:
            DeploymentConfig with defaults filled in for missing keys
        """
        defaults = DeploymentConfig()

        return DeploymentConfig(
            resource_group=self.get('resource_group', defaults.resource_group),
            location=self.get('location', defaults.location),
            domain_fqdn=self.get('domain.fqdn', defaults.domain_fqdn),
            domain_netbios=self.get('domain.netbios'),
            vm_size=self.get('vm_size', defaults.vm_size),
            image=self._build_image(defaults.image),
            network=self._build_network(defaults.network),
            primary=self._build_dc('primary', defaults.primary),
            replica=self._build_dc('replica', defaults.replica),
            readiness=ReadinessPolicy(
                max_attempts=self.get('readiness.max_attempts', defaults.readiness.max_attempts),
                base_delay=self.get('readiness.base_delay', defaults.readiness.base_delay),
                max_delay=self.get('readiness.max_delay', defaults.readiness.max_delay),
                backoff_factor=self.get('readiness.backoff_factor', defaults.readiness.backoff_factor),
            ),
            replica_polling=RemotePollingSpec(
                attempts=self.get('replica_polling.attempts', defaults.replica_polling.attempts),
                interval_seconds=self.get(
                    'replica_polling.interval_seconds',
                    defaults.replica_polling.interval_seconds,
                ),
            ),
            confirm_each_step=self.get('confirm_each_step', defaults.confirm_each_step),
            strict_replica_join=self.get('strict_replica_join', defaults.strict_replica_join),
            tags=tuple(sorted((str(k), str(v)) for k, v in (self.get('tags', {}) or {}).items())),
        )

    def _build_image(self, default: ImageReference) -> ImageReference:
        """Build the VM image reference."""
        return ImageReference(
            publisher=self.get('image.publisher', default.publisher),
            offer=self.get('image.offer', default.offer),
            sku=self.get('image.sku', default.sku),
            version=self.get('image.version', default.version),
        )

    def _build_network(self, default: NetworkSpec) -> NetworkSpec:
        """Build the network topology."""
        subnets = self.get('network.subnets')
        if subnets:
            subnet_specs = tuple(
                SubnetSpec(s['name'], s['address_prefix']) for s in subnets
            )
        else:
            subnet_specs = default.subnets

        return NetworkSpec(
            vnet_name=self.get('network.vnet_name', default.vnet_name),
            address_space=self.get('network.address_space', default.address_space),
            subnets=subnet_specs,
            nsg_name=self.get('network.nsg_name', default.nsg_name),
        )

    def _build_dc(self, role: str, default: DomainControllerSpec) -> DomainControllerSpec:
        """Build one domain controller definition ('primary' or 'replica')."""
        prefix = f"domain_controllers.{role}"
        return DomainControllerSpec(
            name=self.get(f"{prefix}.name", default.name),
            subnet=self.get(f"{prefix}.subnet", default.subnet),
            private_ip=self.get(f"{prefix}.private_ip", default.private_ip),
        )
