"""
Settings resolver for the Keycloak stack.

Declares the template parameters for a deployment mode, registers them into
their console groups, and resolves the KeycloakSettings passed to the KeyCloak
construct.

Declaration order is fixed:
1. CertificateArn                          -> Application Load Balancer Settings
2. DatabaseInstanceType (provisioned only) -> Database Instance Settings
3. VpcId + subnet lists (existing VPC only) -> VPC Settings
4. Min/Max containers, CPU target          -> AutoScaling Settings
5. JavaOpts                                -> Environment variable
6. KeycloakVersion                         -> Keycloak Version

No parameter value is validated here. Values are deferred until CloudFormation
instantiates the template, and it enforces the declared constraints.
"""

from typing import List, Optional, Sequence

from aws_cdk import (
    aws_ec2 as ec2,
    Aws,
    Duration,
    Fn,
    Token,
)

from .instance_types import DEFAULT_INSTANCE_TYPE, INSTANCE_TYPES
from .settings import (
    AutoScaleTask,
    DatabaseMode,
    DeploymentMode,
    KeycloakSettings,
    NetworkMode,
    NetworkSettings,
    ParameterSpec,
    ParameterType,
)
from .solution_stack import SolutionStack
from .versions import DEFAULT_VERSION, SUPPORTED_VERSIONS, KeycloakVersion


# Existing VPCs are imported with exactly two availability zones
AVAILABILITY_ZONES = ['a', 'b']

STICKINESS_COOKIE_DURATION_DAYS = 7

GROUP_LOAD_BALANCER = 'Application Load Balancer Settings'
GROUP_DATABASE = 'Database Instance Settings'
GROUP_VPC = 'VPC Settings'
GROUP_AUTOSCALING = 'AutoScaling Settings'
GROUP_ENVIRONMENT = 'Environment variable'
GROUP_VERSION = 'Keycloak Version'


CERTIFICATE_ARN = ParameterSpec(
    'CertificateArn',
    ParameterType.STRING,
    description='Certificate Arn for Application Load Balancer',
    min_length=5,
)

DATABASE_INSTANCE_TYPE = ParameterSpec(
    'DatabaseInstanceType',
    ParameterType.STRING,
    description='Instance type to be used for the core instances',
    allowed_values=tuple(INSTANCE_TYPES),
    default=DEFAULT_INSTANCE_TYPE,
)

VPC_ID = ParameterSpec('VpcId', ParameterType.VPC_ID, description='Your VPC Id')
PUBLIC_SUBNETS = ParameterSpec(
    'PubSubnets', ParameterType.SUBNET_ID_LIST, description='Public subnets (Choose two)')
PRIVATE_SUBNETS = ParameterSpec(
    'PrivSubnets', ParameterType.SUBNET_ID_LIST, description='Private subnets (Choose two)')
DATABASE_SUBNETS = ParameterSpec(
    'DBSubnets', ParameterType.SUBNET_ID_LIST, description='Database subnets (Choose two)')

MIN_CONTAINERS = ParameterSpec(
    'MinContainers',
    ParameterType.NUMBER,
    description='minimum containers count',
    default=2,
    min_value=2,
)
MAX_CONTAINERS = ParameterSpec(
    'MaxContainers',
    ParameterType.NUMBER,
    description='maximum containers count',
    default=10,
    min_value=2,
)
TARGET_CPU_UTILIZATION = ParameterSpec(
    'AutoScalingTargetCpuUtilization',
    ParameterType.NUMBER,
    description='Auto scaling target cpu utilization',
    default=75,
    min_value=0,
)

JAVA_OPTS = ParameterSpec('JavaOpts', ParameterType.STRING, description='JAVA_OPTS environment variable')

KEYCLOAK_VERSION = ParameterSpec(
    'KeycloakVersion',
    ParameterType.STRING,
    description=f'List of Versions {", ".join(SUPPORTED_VERSIONS)}',
    allowed_values=tuple(SUPPORTED_VERSIONS),
    default=DEFAULT_VERSION,
)


def select_availability_zone_subnets(
    subnet_ids: Sequence[str],
    count: int = len(AVAILABILITY_ZONES),
) -> List[str]:
    """
    Pick one subnet per availability zone from a subnet id list.

    Takes list positions 0..count-1. A token list (a List<AWS::EC2::Subnet::Id>
    parameter) yields one ``Fn::Select`` per position; a literal list yields its
    first ``count`` entries.

    Example:
        >>> select_availability_zone_subnets(['subnet-a', 'subnet-b', 'subnet-c'])
        ['subnet-a', 'subnet-b']
    """
    if not Token.is_unresolved(subnet_ids):
        return list(subnet_ids[:count])
    return [Fn.select(index, subnet_ids) for index in range(count)]


class SettingsResolver:
    """
    Declares the parameter surface of a SolutionStack and resolves KeycloakSettings.

    A resolver runs once per stack. Each mode flag is consulted in exactly
    one method: ``_declare_database`` for the database and
    ``_declare_network`` for the VPC.

    Usage:
        resolver = SettingsResolver(stack, DeploymentMode.from_flags(aurora_serverless=True))
        settings = resolver.resolve()
    """

    def __init__(self, stack: SolutionStack, mode: DeploymentMode) -> None:
        self.stack = stack
        self.mode = mode

    def resolve(self) -> KeycloakSettings:
        """
        Run the declaration sequence and build the settings.

        Returns:
            KeycloakSettings whose values are deferred references to the parameters
        """
        certificate_arn = self.stack.make_param(CERTIFICATE_ARN)
        self.stack.add_group_param({GROUP_LOAD_BALANCER: [certificate_arn]})

        database_instance_type = self._declare_database()
        network = self._declare_network()

        min_containers = self.stack.make_param(MIN_CONTAINERS)
        max_containers = self.stack.make_param(MAX_CONTAINERS)
        target_cpu_utilization = self.stack.make_param(TARGET_CPU_UTILIZATION)
        self.stack.add_group_param({
            GROUP_AUTOSCALING: [min_containers, max_containers, target_cpu_utilization],
        })

        java_opts = self.stack.make_param(JAVA_OPTS)
        self.stack.add_group_param({GROUP_ENVIRONMENT: [java_opts]})

        keycloak_version = self.stack.make_param(KEYCLOAK_VERSION)
        self.stack.add_group_param({GROUP_VERSION: [keycloak_version]})

        settings = KeycloakSettings(
            certificate_arn=certificate_arn.value_as_string,
            network=network,
            database_instance_type=database_instance_type,
            stickiness_cookie_duration=Duration.days(STICKINESS_COOKIE_DURATION_DAYS),
            node_count=min_containers.value_as_number,
            auto_scale_task=AutoScaleTask(
                min=min_containers.value_as_number,
                max=max_containers.value_as_number,
                target_cpu_utilization=target_cpu_utilization.value_as_number,
            ),
            env={
                'JAVA_OPTS': java_opts.value_as_string,
            },
            keycloak_version=KeycloakVersion.of(keycloak_version.value_as_string),
        )

        self.stack.logger.log_settings_resolved(
            database=self.mode.database.value,
            network=self.mode.network.value,
            hasInstanceType=settings.database_instance_type is not None,
            hasNetwork=settings.network is not None,
        )
        return settings

    def _declare_database(self) -> Optional[ec2.InstanceType]:
        if self.mode.database is DatabaseMode.AURORA_SERVERLESS:
            return None

        instance_type = self.stack.make_param(DATABASE_INSTANCE_TYPE)
        self.stack.add_group_param({GROUP_DATABASE: [instance_type]})
        return ec2.InstanceType(instance_type.value_as_string)

    def _declare_network(self) -> Optional[NetworkSettings]:
        if self.mode.network is NetworkMode.NEW_VPC:
            return None

        vpc_id = self.stack.make_param(VPC_ID)
        public_subnets = self.stack.make_param(PUBLIC_SUBNETS)
        private_subnets = self.stack.make_param(PRIVATE_SUBNETS)
        database_subnets = self.stack.make_param(DATABASE_SUBNETS)
        self.stack.add_group_param({
            GROUP_VPC: [vpc_id, public_subnets, private_subnets, database_subnets],
        })

        vpc = ec2.Vpc.from_vpc_attributes(
            self.stack,
            'VpcAttr',
            vpc_id=vpc_id.value_as_string,
            vpc_cidr_block=Aws.NO_VALUE,
            availability_zones=AVAILABILITY_ZONES,
            public_subnet_ids=select_availability_zone_subnets(public_subnets.value_as_list),
            private_subnet_ids=select_availability_zone_subnets(private_subnets.value_as_list),
            isolated_subnet_ids=select_availability_zone_subnets(database_subnets.value_as_list),
        )

        return NetworkSettings(
            vpc=vpc,
            public_subnets=ec2.SubnetSelection(subnets=vpc.public_subnets),
            private_subnets=ec2.SubnetSelection(subnets=vpc.private_subnets),
            database_subnets=ec2.SubnetSelection(subnets=vpc.isolated_subnets),
        )
