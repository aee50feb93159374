"""
Secure RDS template - keeps the database out of public address space
and makes destructive teardown visible at synth time
"""

import logging

from aws_cdk import Annotations, RemovalPolicy, aws_rds as rds
from constructs import Construct

logger = logging.getLogger(__name__)

DESTRUCTIVE_TEARDOWN_WARNING = (
    "Removal policy is DESTROY: the instance is deleted without a final snapshot "
    "on teardown. Temporary choice, not suitable for production."
)


class SecureDatabaseInstance(rds.DatabaseInstance):
    """
    RDS instance that can never be publicly accessible.

    Reachability is decided by the security groups handed in; this class
    only refuses the public endpoint. Instances created with
    RemovalPolicy.DESTROY carry a warning annotation so `cdk synth`
    reports the non-production teardown choice.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        publicly_accessible: bool = False,
        removal_policy: RemovalPolicy | None = None,
        **kwargs
    ):
        # ENFORCE: Block public access
        if publicly_accessible:
            raise ValueError(
                f"SECURITY VIOLATION: Database {construct_id} cannot be publicly accessible. "
                "Reach it through the bastion host instead."
            )

        super().__init__(
            scope, construct_id,
            publicly_accessible=False,
            removal_policy=removal_policy,
            **kwargs
        )

        if removal_policy == RemovalPolicy.DESTROY:
            logger.debug(f"Database {construct_id} uses a destructive removal policy")
            Annotations.of(self).add_warning_v2("sstpoc:destructive-teardown", DESTRUCTIVE_TEARDOWN_WARNING)
