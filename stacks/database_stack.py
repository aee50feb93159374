import json
import logging

from aws_cdk import (
    Stack,
    RemovalPolicy,
    aws_rds as rds,
    aws_ec2 as ec2,
    aws_secretsmanager as secretsmanager,
    aws_ssm as ssm,
    CfnOutput
)
from constructs import Construct

from secure_templates.rds import SecureDatabaseInstance
from stacks.settings import DeploymentSettings

logger = logging.getLogger(__name__)

DATABASE_USERNAME = "sstpoc"
PASSWORD_LENGTH = 32
# Characters that break shell quoting or connection URLs
PASSWORD_EXCLUDED_CHARACTERS = ' %+~`@{}[]()|/_"'


class DatabaseStack(Stack):
    """
    PostgreSQL instance in the private subnets with Secrets Manager credentials
    Connection details are published to SSM Parameter Store for the tunnel and applications
    """

    def __init__(self, scope: Construct, construct_id: str,
                 vpc: ec2.Vpc, private_subnets: list[ec2.PrivateSubnet],
                 security_group: ec2.SecurityGroup,
                 settings: DeploymentSettings, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        logger.debug(f"Initializing DatabaseStack {construct_id} over {len(private_subnets)} private subnets")

        # ====================================================================
        # RDS Credentials Secret (Auto-generated, consumed by the instance)
        # ====================================================================
        self.database_secret = secretsmanager.Secret(
            self, "DatabaseSecret",
            secret_name=settings.resource_name("DatabaseSecret"),
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=json.dumps({"username": DATABASE_USERNAME}),
                generate_string_key="password",
                password_length=PASSWORD_LENGTH,
                exclude_characters=PASSWORD_EXCLUDED_CHARACTERS
            )
        )

        # ====================================================================
        # DB Subnet Group - private subnets only
        # ====================================================================
        self.subnet_group = rds.SubnetGroup(
            self, "RdsSubnetGroup",
            description=settings.resource_name("RdsSubnetGroup"),
            subnet_group_name=settings.resource_name("RdsSubnetGroup"),
            vpc=vpc,
            vpc_subnets=ec2.SubnetSelection(subnets=private_subnets)
        )

        # ====================================================================
        # SECURE RDS INSTANCE - single AZ, no monitoring, no autoscaling
        # ====================================================================
        self.rds_instance = SecureDatabaseInstance(
            self, "RdsInstance",
            engine=rds.DatabaseInstanceEngine.postgres(
                version=rds.PostgresEngineVersion.VER_14_7
            ),
            credentials=rds.Credentials.from_secret(self.database_secret),
            instance_identifier=settings.resource_name("Database"),
            instance_type=ec2.InstanceType.of(
                ec2.InstanceClass.T3,
                ec2.InstanceSize.MICRO  # Free tier instance type
            ),
            vpc=vpc,
            security_groups=[security_group],
            subnet_group=self.subnet_group,
            port=settings.database_port,
            storage_type=rds.StorageType.GP3,
            allocated_storage=20,
            multi_az=False,
            # TODO: switch to SNAPSHOT or RETAIN before this database holds anything worth keeping
            removal_policy=RemovalPolicy.DESTROY
        )

        # ====================================================================
        # SSM PARAMETERS - connection metadata for external consumers
        # ====================================================================
        ssm.StringParameter(
            self, "RdsIdentifierParameter",
            parameter_name=settings.resource_name("RdsIdentifier"),
            string_value=self.rds_instance.instance_identifier
        )
        ssm.StringParameter(
            self, "RdsEndpointParameter",
            parameter_name=settings.resource_name("RdsEndpoint"),
            string_value=self.rds_instance.db_instance_endpoint_address
        )
        ssm.StringParameter(
            self, "RdsPortParameter",
            parameter_name=settings.resource_name("RdsPort"),
            string_value=self.rds_instance.db_instance_endpoint_port
        )

        # ====================================================================
        # OUTPUTS
        # ====================================================================
        CfnOutput(self, "RdsInstanceEndpoint", value=self.rds_instance.db_instance_endpoint_address)
        CfnOutput(self, "DatabaseSecretArn", value=self.database_secret.secret_arn)
