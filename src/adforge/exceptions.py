"""
Exceptions Module

Error types raised while loading configuration and deploying the lab.
"""


class AdforgeError(Exception):
    """Base class for all adforge errors."""


class ConfigurationError(AdforgeError):
    """Raised when the deployment configuration is missing or invalid."""


class CredentialPromptCancelled(AdforgeError):
    """Raised when the operator aborts the interactive credential prompt."""


class OperationCancelled(AdforgeError):
    """Raised when the operator declines a confirmation prompt."""


class ProvisioningError(AdforgeError):
    """Raised when a management-plane call returns an unusable resource."""


class RemoteCommandError(AdforgeError):
    """Raised when a run-command payload fails on the target VM."""

    def __init__(self, vm_name: str, message: str, stdout: str = '', stderr: str = ''):
        super().__init__(f"{vm_name}: {message}")
        self.vm_name = vm_name
        self.stdout = stdout
        self.stderr = stderr


class ForestNotReadyError(AdforgeError):
    """Raised when the new forest never answered DNS within the readiness policy."""


class ReplicaJoinError(AdforgeError):
    """Raised when the replica reports a failed join and the strict policy is on."""
