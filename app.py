#!/usr/bin/env python3
"""
SST PoC Infrastructure - AWS CDK Application
VPC, PostgreSQL RDS instance and a bastion host for tunneling into it
"""

import logging

import aws_cdk as cdk
from stacks.settings import DeploymentSettings
from stacks.network_stack import NetworkStack
from stacks.database_stack import DatabaseStack
from stacks.bastion_stack import BastionStack
from stacks.validation import add_validation_aspects

app = cdk.App()

logging.basicConfig(
    level=str(app.node.try_get_context("log_level") or "WARNING").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

# Context-driven configuration (account, region, naming, CIDR)
settings = DeploymentSettings.from_context(app.node)

env = cdk.Environment(account=settings.account, region=settings.region)

# ============================================================================
# STACK 1: NETWORK - VPC, subnets, routing, security groups
# ============================================================================
network_stack = NetworkStack(
    app, settings.stack_id("Vpc"),
    settings=settings,
    env=env,
    tags=settings.tags
)

# ============================================================================
# STACK 2: DATABASE - PostgreSQL RDS with Secrets Manager
# ============================================================================
database_stack = DatabaseStack(
    app, settings.stack_id("Rds"),
    vpc=network_stack.vpc,
    private_subnets=network_stack.private_subnets,
    security_group=network_stack.rds_security_group,
    settings=settings,
    env=env,
    tags=settings.tags
)
database_stack.add_dependency(network_stack)

# ============================================================================
# STACK 3: BASTION - tiny EC2 instance for tunneling to the RDS instance
# ============================================================================
bastion_stack = BastionStack(
    app, settings.stack_id("Ec2"),
    vpc=network_stack.vpc,
    public_subnets=network_stack.public_subnets,
    security_group=network_stack.bastion_security_group,
    settings=settings,
    env=env,
    tags=settings.tags
)
bastion_stack.add_dependency(network_stack)

add_validation_aspects(app, database_port=settings.database_port)

# ============================================================================
# SYNTHESIZE
# ============================================================================
app.synth()
