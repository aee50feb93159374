"""
CDK validation aspects for pre-deployment checks.

These aspects run during `cdk synth` and add errors/warnings/info
to the synthesized resources, catching issues before deployment.

Usage:
    from stacks.validation import add_validation_aspects
    add_validation_aspects(app, database_port=5432)
"""

import aws_cdk as cdk
import jsii
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_rds as rds
from constructs import IConstruct

ANY_IPV4 = "0.0.0.0/0"


@jsii.implements(cdk.IAspect)
class ProductionReadinessAspect:
    """
    Flags settings that are acceptable for the proof of concept only.

    Checks:
    - Database instances deleted without a snapshot on teardown
    - Database instances running in a single availability zone
    """

    def __init__(self, enforce_snapshots: bool = True, enforce_multi_az: bool = False):
        self._enforce_snapshots = enforce_snapshots
        self._enforce_multi_az = enforce_multi_az

    def visit(self, node: IConstruct) -> None:
        if not isinstance(node, rds.CfnDBInstance):
            return

        if self._enforce_snapshots and node.cfn_options.deletion_policy == cdk.CfnDeletionPolicy.DELETE:
            cdk.Annotations.of(node).add_info(
                "Database is deleted without a final snapshot; use SNAPSHOT or RETAIN for production"
            )

        if self._enforce_multi_az and not node.multi_az:
            cdk.Annotations.of(node).add_info("Enable multi_az for production databases")


@jsii.implements(cdk.IAspect)
class SecurityAspect:
    """
    Validates that the database stays private.

    Checks:
    - Database instances are not publicly accessible
    - No ingress rule, inline on a security group or standalone,
      opens the database port to the internet
    """

    def __init__(self, database_port: int = 5432):
        self._database_port = database_port

    def visit(self, node: IConstruct) -> None:
        if isinstance(node, rds.CfnDBInstance) and node.publicly_accessible is True:
            cdk.Annotations.of(node).add_error("Database instance must not be publicly accessible")

        if isinstance(node, ec2.CfnSecurityGroupIngress):
            rules = [{
                "cidrIp": node.cidr_ip,
                "ipProtocol": node.ip_protocol,
                "fromPort": node.from_port,
                "toPort": node.to_port,
            }]
        elif isinstance(node, ec2.CfnSecurityGroup):
            # Rules added through SecurityGroup.add_ingress_rule are rendered lazily
            rules = cdk.Stack.of(node).resolve(node.security_group_ingress) or []
        else:
            return

        if any(self._opens_database_port(rule) for rule in rules):
            cdk.Annotations.of(node).add_error(
                f"Port {self._database_port} must not be reachable from {ANY_IPV4}"
            )

    def _opens_database_port(self, rule) -> bool:
        if _rule_field(rule, "cidrIp") != ANY_IPV4:
            return False
        if str(_rule_field(rule, "ipProtocol")) == "-1":
            return True
        from_port, to_port = _rule_field(rule, "fromPort"), _rule_field(rule, "toPort")
        if not isinstance(from_port, (int, float)) or not isinstance(to_port, (int, float)):
            return False
        return from_port <= self._database_port <= to_port


def _rule_field(rule, name: str):
    """Read an ingress field from a resolved rule in either property casing."""
    if isinstance(rule, dict):
        if name in rule:
            return rule[name]
        return rule.get(name[0].upper() + name[1:])
    snake = "".join(f"_{c.lower()}" if c.isupper() else c for c in name)
    return getattr(rule, snake, None)


def add_validation_aspects(
    scope: cdk.App,
    database_port: int = 5432,
    enforce_snapshots: bool = True,
    enforce_multi_az: bool = False,
    enable_security_checks: bool = True,
) -> None:
    """
    Add validation aspects to all stacks in the CDK app.

    Args:
        scope: The CDK App to add aspects to
        database_port: Port the database listens on
        enforce_snapshots: Whether to flag databases deleted without a snapshot
        enforce_multi_az: Whether to flag single-AZ databases
        enable_security_checks: Whether to run security-related validations
    """
    cdk.Aspects.of(scope).add(
        ProductionReadinessAspect(
            enforce_snapshots=enforce_snapshots,
            enforce_multi_az=enforce_multi_az,
        )
    )

    if enable_security_checks:
        cdk.Aspects.of(scope).add(SecurityAspect(database_port=database_port))
