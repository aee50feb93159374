import aws_cdk as cdk
import pytest

from stacks.settings import DEFAULT_REGION, DeploymentSettings


@pytest.fixture(autouse=True)
def clear_cdk_env(monkeypatch):
    monkeypatch.delenv("CDK_DEFAULT_ACCOUNT", raising=False)
    monkeypatch.delenv("CDK_DEFAULT_REGION", raising=False)


def test_defaults_without_context():
    settings = DeploymentSettings.from_context(cdk.App().node)

    assert settings == DeploymentSettings()
    assert settings.region == DEFAULT_REGION
    assert settings.account is None


def test_context_overrides():
    app = cdk.App(context={
        "account": "123456789012",
        "region": "us-west-2",
        "resource_prefix": "Demo",
        "environment": "staging",
        "zone_count": "2",
        "database_port": 6543,
    })

    settings = DeploymentSettings.from_context(app.node)

    assert settings.account == "123456789012"
    assert settings.region == "us-west-2"
    assert settings.resource_name("Vpc") == "Demo-Vpc"
    assert settings.zone_count == 2
    assert settings.database_port == 6543
    assert settings.tags["Environment"] == "staging"


def test_region_falls_back_to_cdk_env(monkeypatch):
    monkeypatch.setenv("CDK_DEFAULT_REGION", "eu-west-1")

    assert DeploymentSettings.from_context(cdk.App().node).region == "eu-west-1"


def test_non_integer_zone_count():
    app = cdk.App(context={"zone_count": "three"})

    with pytest.raises(ValueError, match="zone_count"):
        DeploymentSettings.from_context(app.node)


def test_names():
    settings = DeploymentSettings()

    assert settings.resource_name("RdsPort") == "SstPocCdk-RdsPort"
    assert settings.stack_id("Vpc") == "SstPoc-Vpc"
    assert settings.tags == {"Project": "SstPocCdk", "Environment": "dev", "ManagedBy": "CDK"}


@pytest.mark.parametrize("zone_count", ["0", -2, 27])
def test_zone_count_out_of_range(zone_count):
    app = cdk.App(context={"zone_count": zone_count})

    with pytest.raises(ValueError, match="'zone_count' must be between 1 and 26"):
        DeploymentSettings.from_context(app.node)


@pytest.mark.parametrize("port", [0, "-1", 65536])
def test_database_port_out_of_range(port):
    app = cdk.App(context={"database_port": port})

    with pytest.raises(ValueError, match="'database_port' must be between 1 and 65535"):
        DeploymentSettings.from_context(app.node)


@pytest.mark.parametrize("zone_count", [3.7, True, "2.5"])
def test_zone_count_must_be_integral(zone_count):
    app = cdk.App(context={"zone_count": zone_count})

    with pytest.raises(ValueError, match="must be an integer"):
        DeploymentSettings.from_context(app.node)


def test_integral_float_is_accepted():
    app = cdk.App(context={"zone_count": 2.0})

    assert DeploymentSettings.from_context(app.node).zone_count == 2
