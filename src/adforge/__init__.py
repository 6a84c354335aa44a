"""
adforge - Two-node Active Directory lab builder for Azure

Provisions a forest root and a replica domain controller through the Azure
management SDKs and promotes both with run-command scripts.
"""

__version__ = "1.0.0"
__author__ = "adforge contributors"
__license__ = "GPL-3.0"

from .config_loader import ConfigLoader
from .validator import ConfigValidator
from .orchestrator import Orchestrator
from .plan_builder import PlanBuilder
from .models import DeploymentConfig, DeploymentCredentials, DeploymentResult

__all__ = [
    "ConfigLoader",
    "ConfigValidator",
    "Orchestrator",
    "PlanBuilder",
    "DeploymentConfig",
    "DeploymentCredentials",
    "DeploymentResult",
]
