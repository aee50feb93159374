"""
Deployment settings resolved from CDK context.

Override any value at synth/deploy time, e.g.
`cdk deploy --context region=us-east-1 --context environment=staging`.
"""

import os
from dataclasses import dataclass

from constructs import Node

from stacks.topology import MAX_ZONES

DEFAULT_REGION = "ap-southeast-2"
MAX_PORT = 65535


def _int_context(node: Node, key: str, default: int, minimum: int, maximum: int) -> int:
    value = node.try_get_context(key)
    if value is None:
        return default

    if isinstance(value, bool):
        number = None
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float):
        number = int(value) if value.is_integer() else None
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            number = None

    if number is None:
        raise ValueError(f"Context value '{key}' must be an integer, got {value!r}")
    if not minimum <= number <= maximum:
        raise ValueError(f"Context value '{key}' must be between {minimum} and {maximum}, got {number}")
    return number


@dataclass(frozen=True)
class DeploymentSettings:
    """Names and literals shared by every stack in the app."""

    account: str | None = None
    region: str = DEFAULT_REGION
    resource_prefix: str = "SstPocCdk"
    stack_prefix: str = "SstPoc"
    environment: str = "dev"
    vpc_cidr: str = "172.16.0.0/16"
    zone_count: int = 3
    database_port: int = 5432

    @classmethod
    def from_context(cls, node: Node) -> "DeploymentSettings":
        return cls(
            account=node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT"),
            region=(
                node.try_get_context("region")
                or os.environ.get("CDK_DEFAULT_REGION")
                or DEFAULT_REGION
            ),
            resource_prefix=node.try_get_context("resource_prefix") or cls.resource_prefix,
            stack_prefix=node.try_get_context("stack_prefix") or cls.stack_prefix,
            environment=node.try_get_context("environment") or cls.environment,
            vpc_cidr=node.try_get_context("vpc_cidr") or cls.vpc_cidr,
            zone_count=_int_context(node, "zone_count", cls.zone_count, 1, MAX_ZONES),
            database_port=_int_context(node, "database_port", cls.database_port, 1, MAX_PORT),
        )

    def resource_name(self, suffix: str) -> str:
        return f"{self.resource_prefix}-{suffix}"

    def stack_id(self, suffix: str) -> str:
        return f"{self.stack_prefix}-{suffix}"

    @property
    def tags(self) -> dict[str, str]:
        return {
            "Project": self.resource_prefix,
            "Environment": self.environment,
            "ManagedBy": "CDK",
        }
