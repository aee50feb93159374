"""
Shared pytest fixtures for the CDK stack tests.

The three stacks are built once per session in a single App, the same way
app.py wires them, and synthesized lazily by the template fixtures.
"""

from types import SimpleNamespace

import aws_cdk as cdk
import pytest
from aws_cdk.assertions import Template

from stacks.bastion_stack import BastionStack
from stacks.database_stack import DatabaseStack
from stacks.network_stack import NetworkStack
from stacks.settings import DeploymentSettings
from stacks.validation import add_validation_aspects


@pytest.fixture(scope="session")
def settings() -> DeploymentSettings:
    return DeploymentSettings()


@pytest.fixture(scope="session")
def stacks(settings):
    app = cdk.App()
    env = cdk.Environment(region=settings.region)

    network = NetworkStack(app, settings.stack_id("Vpc"), settings=settings, env=env, tags=settings.tags)
    database = DatabaseStack(
        app, settings.stack_id("Rds"),
        vpc=network.vpc,
        private_subnets=network.private_subnets,
        security_group=network.rds_security_group,
        settings=settings,
        env=env,
        tags=settings.tags,
    )
    database.add_dependency(network)
    bastion = BastionStack(
        app, settings.stack_id("Ec2"),
        vpc=network.vpc,
        public_subnets=network.public_subnets,
        security_group=network.bastion_security_group,
        settings=settings,
        env=env,
        tags=settings.tags,
    )
    bastion.add_dependency(network)
    add_validation_aspects(app, database_port=settings.database_port)

    return SimpleNamespace(app=app, network=network, database=database, bastion=bastion)


@pytest.fixture(scope="session")
def network_template(stacks) -> Template:
    return Template.from_stack(stacks.network)


@pytest.fixture(scope="session")
def database_template(stacks) -> Template:
    return Template.from_stack(stacks.database)


@pytest.fixture(scope="session")
def bastion_template(stacks) -> Template:
    return Template.from_stack(stacks.bastion)


def only_resource(template: Template, resource_type: str, props: dict | None = None) -> tuple[str, dict]:
    """Logical id and body of the single resource of `resource_type` matching `props`."""
    matcher = {"Properties": props} if props else None
    found = template.find_resources(resource_type, matcher)
    assert len(found) == 1, f"expected one {resource_type}, found {sorted(found)}"
    return next(iter(found.items()))
