import logging

from aws_cdk import (
    Stack,
    aws_ec2 as ec2,
    aws_iam as iam,
    aws_ssm as ssm,
    CfnOutput
)
from constructs import Construct

from stacks.settings import DeploymentSettings

logger = logging.getLogger(__name__)

# Runs once on first boot
BOOTSTRAP_COMMANDS = (
    "set -e",
    "set -x",
    "yum install -y ec2-instance-connect",
    "systemctl enable amazon-ssm-agent",
    "systemctl start amazon-ssm-agent",
)


class BastionStack(Stack):
    """
    Bastion host for tunneling into the database
    - Session Manager access through the instance role, no SSH keys baked into the image
    - EC2 Instance Connect installed at first boot for short-lived SSH keys
    """

    def __init__(self, scope: Construct, construct_id: str,
                 vpc: ec2.Vpc, public_subnets: list[ec2.PublicSubnet],
                 security_group: ec2.SecurityGroup,
                 settings: DeploymentSettings, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        logger.debug(f"Initializing BastionStack {construct_id} over {len(public_subnets)} public subnets")

        # ====================================================================
        # IAM Role for the bastion instance
        # ====================================================================
        self.instance_role = iam.Role(
            self, "InstanceRole",
            assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"),
            role_name=settings.resource_name("BastionRole")
        )
        self.instance_role.add_managed_policy(
            iam.ManagedPolicy.from_aws_managed_policy_name(
                "AmazonSSMManagedInstanceCore"
            )
        )

        # ====================================================================
        # BASTION INSTANCE - public subnets, free tier
        # ====================================================================
        user_data = ec2.UserData.for_linux()
        user_data.add_commands(*BOOTSTRAP_COMMANDS)

        self.bastion_instance = ec2.Instance(
            self, "BastionInstance",
            instance_name=settings.resource_name("Bastion"),
            instance_type=ec2.InstanceType.of(
                ec2.InstanceClass.T2,
                ec2.InstanceSize.MICRO  # Free-tier eligible instance type
            ),
            machine_image=ec2.MachineImage.latest_amazon_linux2(),
            role=self.instance_role,
            security_group=security_group,
            user_data=user_data,
            vpc=vpc,
            vpc_subnets=ec2.SubnetSelection(subnets=public_subnets)
        )

        # ====================================================================
        # SSM PARAMETERS - instance discovery for tunnel tooling
        # ====================================================================
        ssm.StringParameter(
            self, "BastionInstanceId",
            parameter_name=settings.resource_name("BastionInstanceId"),
            string_value=self.bastion_instance.instance_id
        )

        # ====================================================================
        # OUTPUTS
        # ====================================================================
        CfnOutput(self, "BastionInstanceIdOutput", value=self.bastion_instance.instance_id)
