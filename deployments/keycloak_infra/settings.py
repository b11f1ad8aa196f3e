"""
Settings data model for the Keycloak deployment.

This module defines the value types that flow from parameter declaration to
resource composition:

- DeploymentMode: the two deployment-mode flags as orthogonal enums
- ParameterSpec: immutable declaration of one CloudFormation parameter
- NetworkSettings: an imported VPC with its three subnet selections
- AutoScaleTask: ECS service autoscaling bounds
- KeycloakSettings: the fully resolved settings handed to the KeyCloak construct

Parameter values are CDK tokens (deferred references) until CloudFormation
instantiates the template. ``Token.is_unresolved`` tells them apart from literals.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from aws_cdk import (
    aws_ec2 as ec2,
    Duration,
)

from .versions import KeycloakVersion


class DatabaseMode(Enum):
    """Database flavour. Values are the phrases used in the stack description."""
    PROVISIONED = 'rds mysql'
    AURORA_SERVERLESS = 'using aurora serverless'


class NetworkMode(Enum):
    """Network origin. Values are the phrases used in the stack description."""
    NEW_VPC = 'new vpc'
    EXISTING_VPC = 'existing vpc'


@dataclass(frozen=True)
class DeploymentMode:
    """
    Deployment mode of one stack, fixed for its lifetime.

    Combines the database and network choices. Build it from the raw flags
    with ``from_flags``; read the flags back with the properties.
    """
    database: DatabaseMode = DatabaseMode.PROVISIONED
    network: NetworkMode = NetworkMode.NEW_VPC

    @classmethod
    def from_flags(
        cls,
        aurora_serverless: bool = False,
        from_existing_vpc: bool = False,
    ) -> 'DeploymentMode':
        return cls(
            database=DatabaseMode.AURORA_SERVERLESS if aurora_serverless else DatabaseMode.PROVISIONED,
            network=NetworkMode.EXISTING_VPC if from_existing_vpc else NetworkMode.NEW_VPC,
        )

    @classmethod
    def all_modes(cls) -> Tuple['DeploymentMode', ...]:
        return tuple(
            cls(database=database, network=network)
            for database in DatabaseMode
            for network in NetworkMode
        )

    @property
    def aurora_serverless(self) -> bool:
        return self.database is DatabaseMode.AURORA_SERVERLESS

    @property
    def from_existing_vpc(self) -> bool:
        return self.network is NetworkMode.EXISTING_VPC

    def describe(self) -> str:
        return f'{self.database.value} with {self.network.value}'


class ParameterType(str, Enum):
    """CloudFormation parameter types used by the templates."""
    STRING = 'String'
    NUMBER = 'Number'
    SUBNET_ID_LIST = 'List<AWS::EC2::Subnet::Id>'
    VPC_ID = 'AWS::EC2::VPC::Id'


@dataclass(frozen=True)
class ParameterSpec:
    """
    Declaration of one template parameter.

    An enumerated string is a STRING parameter with ``allowed_values``.
    Constraints are declared here and enforced by CloudFormation when the
    template is instantiated, never at synthesis time.
    """
    logical_id: str
    type: ParameterType
    description: Optional[str] = None
    default: Any = None
    min_length: Optional[int] = None
    min_value: Optional[float] = None
    allowed_values: Optional[Tuple[str, ...]] = None

    @property
    def is_enumerated(self) -> bool:
        return self.allowed_values is not None

    def to_props(self) -> Dict[str, Any]:
        """Keyword arguments for ``CfnParameter``, omitting unset fields."""
        props = {
            'type': self.type.value,
            'description': self.description,
            'default': self.default,
            'min_length': self.min_length,
            'min_value': self.min_value,
            'allowed_values': list(self.allowed_values) if self.allowed_values else None,
        }
        return {key: value for key, value in props.items() if value is not None}


@dataclass(frozen=True)
class NetworkSettings:
    """
    An existing VPC and the subnets Keycloak is placed in.

    All four fields are set together; a deployment into a new VPC has no
    NetworkSettings at all.
    """
    vpc: ec2.IVpc
    public_subnets: ec2.SubnetSelection
    private_subnets: ec2.SubnetSelection
    database_subnets: ec2.SubnetSelection


@dataclass(frozen=True)
class AutoScaleTask:
    """ECS task count bounds and CPU target for the Keycloak service."""
    min: Any
    max: Any
    target_cpu_utilization: Any


@dataclass(frozen=True)
class KeycloakSettings:
    """
    Resolved settings for one Keycloak deployment.

    Attributes:
        certificate_arn: ACM certificate for the HTTPS listener
        auto_scale_task: Autoscaling bounds
        keycloak_version: Keycloak release to run
        node_count: Initial task count (the minimum container count)
        env: Extra container environment variables
        stickiness_cookie_duration: Load balancer stickiness cookie lifetime
        network: Existing VPC settings, None when a new VPC is created
        database_instance_type: Aurora instance class, None for Aurora Serverless
    """
    certificate_arn: str
    auto_scale_task: AutoScaleTask
    keycloak_version: KeycloakVersion
    node_count: Any
    env: Dict[str, str] = field(default_factory=dict)
    stickiness_cookie_duration: Duration = field(default_factory=lambda: Duration.days(7))
    network: Optional[NetworkSettings] = None
    database_instance_type: Optional[ec2.InstanceType] = None

    @property
    def vpc(self) -> Optional[ec2.IVpc]:
        return self.network.vpc if self.network else None

    @property
    def public_subnets(self) -> Optional[ec2.SubnetSelection]:
        return self.network.public_subnets if self.network else None

    @property
    def private_subnets(self) -> Optional[ec2.SubnetSelection]:
        return self.network.private_subnets if self.network else None

    @property
    def database_subnets(self) -> Optional[ec2.SubnetSelection]:
        return self.network.database_subnets if self.network else None
