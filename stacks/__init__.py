"""CDK Stacks for SST PoC infrastructure."""

from .bastion_stack import BastionStack
from .database_stack import DatabaseStack
from .network_stack import NetworkStack
from .settings import DeploymentSettings

__all__ = [
    "BastionStack",
    "DatabaseStack",
    "DeploymentSettings",
    "NetworkStack",
]
