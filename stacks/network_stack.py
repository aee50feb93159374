import logging

from aws_cdk import (
    Stack,
    aws_ec2 as ec2,
    Tags,
    CfnOutput
)
from constructs import Construct

from stacks.settings import DeploymentSettings
from stacks.topology import plan_subnets

logger = logging.getLogger(__name__)

EPHEMERAL_PORTS = ec2.Port.tcp_range(1024, 65535)


class NetworkStack(Stack):
    """
    Network infrastructure: VPC, Internet Gateway, paired public/private subnets, Security Groups
    Subnets are added explicitly (no NAT, no auto-created subnets) so CIDRs and routing stay fixed
    """

    def __init__(self, scope: Construct, construct_id: str,
                 settings: DeploymentSettings, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.settings = settings
        logger.debug(f"Initializing NetworkStack {construct_id} with CIDR {settings.vpc_cidr}")

        # ====================================================================
        # VPC - subnets are created below, one pair per availability zone
        # ====================================================================
        self.vpc = ec2.Vpc(
            self, "VPC",
            ip_addresses=ec2.IpAddresses.cidr(settings.vpc_cidr),
            max_azs=0,
            nat_gateways=0,
            subnet_configuration=[],
            vpc_name=settings.resource_name("Vpc")
        )

        # ====================================================================
        # INTERNET GATEWAY
        # ====================================================================
        self.internet_gateway = ec2.CfnInternetGateway(
            self, "InternetGateway",
            tags=[{"key": "Name", "value": settings.resource_name("InternetGateway")}]
        )
        self.gateway_attachment = ec2.CfnVPCGatewayAttachment(
            self, "VPCGatewayAttachment",
            internet_gateway_id=self.internet_gateway.ref,
            vpc_id=self.vpc.vpc_id
        )

        # ====================================================================
        # SECURITY GROUPS - all outbound traffic denied unless declared
        # ====================================================================
        self.bastion_security_group = ec2.SecurityGroup(
            self, "BastionSecurityGroup",
            vpc=self.vpc,
            security_group_name=settings.resource_name("BastionSecurityGroup"),
            description="Security group for bastion host",
            allow_all_outbound=False
        )
        self.bastion_security_group.add_ingress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=ec2.Port.tcp(22),
            description="Allow SSH access from the internet"
        )
        self.bastion_security_group.add_egress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=ec2.Port.tcp(443),
            description="Allow outbound traffic on HTTPS ports for SSM connections"
        )
        self.bastion_security_group.add_egress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=EPHEMERAL_PORTS,
            description="Allow outbound traffic on ephemeral ports for SSH connections"
        )

        self.rds_security_group = ec2.SecurityGroup(
            self, "RdsSecurityGroup",
            vpc=self.vpc,
            security_group_name=settings.resource_name("RdsSecurityGroup"),
            description="Security group for RDS instance",
            allow_all_outbound=False
        )
        self.rds_security_group.add_ingress_rule(
            peer=ec2.Peer.security_group_id(self.bastion_security_group.security_group_id),
            connection=ec2.Port.tcp(settings.database_port),
            description="Allow input traffic from bastion host on SQL port"
        )
        self.rds_security_group.add_egress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=EPHEMERAL_PORTS,
            description="Allow outbound traffic on ephemeral ports"
        )

        # ====================================================================
        # SUBNETS - public/private pair and route per availability zone
        # ====================================================================
        self.public_subnets: list[ec2.PublicSubnet] = []
        self.private_subnets: list[ec2.PrivateSubnet] = []

        for layout in plan_subnets(settings.vpc_cidr, settings.region, settings.zone_count):
            logger.debug(
                f"Zone {layout.availability_zone}: public {layout.public_cidr}, "
                f"private {layout.private_cidr}"
            )

            public_subnet = ec2.PublicSubnet(
                self, f"PublicSubnet{layout.letter}",
                availability_zone=layout.availability_zone,
                cidr_block=layout.public_cidr,
                map_public_ip_on_launch=True,
                vpc_id=self.vpc.vpc_id
            )
            Tags.of(public_subnet).add("Name", settings.resource_name(f"PublicSubnet{layout.letter}"))
            self.public_subnets.append(public_subnet)

            route = ec2.CfnRoute(
                self, f"PublicSubnetRoute{layout.letter}",
                destination_cidr_block="0.0.0.0/0",
                gateway_id=self.internet_gateway.ref,
                route_table_id=public_subnet.route_table.route_table_id
            )
            # The route is rejected until the gateway is attached to the VPC
            route.node.add_dependency(self.gateway_attachment)

            private_subnet = ec2.PrivateSubnet(
                self, f"PrivateSubnet{layout.letter}",
                availability_zone=layout.availability_zone,
                cidr_block=layout.private_cidr,
                map_public_ip_on_launch=False,
                vpc_id=self.vpc.vpc_id
            )
            Tags.of(private_subnet).add("Name", settings.resource_name(f"PrivateSubnet{layout.letter}"))
            self.private_subnets.append(private_subnet)

        # ====================================================================
        # OUTPUTS
        # ====================================================================
        CfnOutput(self, "VpcId", value=self.vpc.vpc_id)
        CfnOutput(self, "BastionSecurityGroupId", value=self.bastion_security_group.security_group_id)
        CfnOutput(self, "RdsSecurityGroupId", value=self.rds_security_group.security_group_id)
