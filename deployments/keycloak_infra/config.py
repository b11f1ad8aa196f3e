"""
Deployment configuration for the CDK app.

Sources, in order of precedence:
1. CDK context (``cdk synth -c aurora_serverless=true``)
2. Environment variables (AURORA_SERVERLESS, FROM_EXISTING_VPC, VERSION,
   CDK_DEFAULT_ACCOUNT, CDK_DEFAULT_REGION)

When neither mode flag is given, stacks for all four deployment modes are
synthesized. Giving one or both flags restricts synthesis to the matching modes.
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from aws_cdk import App, Environment

from .errors import ConfigurationError
from .settings import DeploymentMode


DEFAULT_VERSION = 'development'

TRUE_VALUES = {'true', 'yes', '1'}
FALSE_VALUES = {'false', 'no', '0'}


def is_true(value: Any, name: str = 'flag') -> bool:
    """
    Interpret a boolean flag from CDK context or the environment.

    Accepts bools and true/false, yes/no, 1/0 in any case.

    Raises:
        ConfigurationError: If the value is not a recognizable boolean
    """
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ConfigurationError(
        f'{name} must be a boolean (true/false), got {value!r}',
        {'setting': name, 'value': value},
    )


def stack_name_for(mode: DeploymentMode) -> str:
    """
    Stack name for a deployment mode.

    Examples:
        keycloak-from-new-vpc
        keycloak-aurora-serverless-from-existing-vpc
    """
    prefix = 'keycloak-aurora-serverless' if mode.aurora_serverless else 'keycloak'
    network = 'existing-vpc' if mode.from_existing_vpc else 'new-vpc'
    return f'{prefix}-from-{network}'


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Attributes:
        version: Template version tag for stack descriptions
        modes: Deployment modes to synthesize
        account: Target AWS account, if configured
        region: Target AWS region, if configured
    """
    version: str
    modes: Tuple[DeploymentMode, ...]
    account: Optional[str] = None
    region: Optional[str] = None

    @property
    def env(self) -> Optional[Environment]:
        # Stacks stay environment-agnostic unless both are set
        if self.account and self.region:
            return Environment(account=self.account, region=self.region)
        return None


def _lookup(app: Optional[App], environ: Mapping[str, str], context_key: str, env_key: str) -> Any:
    if app is not None:
        value = app.node.try_get_context(context_key)
        if value is not None:
            return value
    return environ.get(env_key)


def load_config(app: Optional[App] = None, environ: Mapping[str, str] = None) -> DeploymentConfig:
    """
    Load the deployment configuration.

    Args:
        app: CDK app to read context from (optional)
        environ: Environment mapping, defaults to os.environ

    Raises:
        ConfigurationError: If a mode flag is not a recognizable boolean
    """
    environ = os.environ if environ is None else environ

    aurora_serverless = _lookup(app, environ, 'aurora_serverless', 'AURORA_SERVERLESS')
    from_existing_vpc = _lookup(app, environ, 'from_existing_vpc', 'FROM_EXISTING_VPC')

    modes = DeploymentMode.all_modes()
    if aurora_serverless is not None:
        wanted = is_true(aurora_serverless, 'aurora_serverless')
        modes = tuple(m for m in modes if m.aurora_serverless == wanted)
    if from_existing_vpc is not None:
        wanted = is_true(from_existing_vpc, 'from_existing_vpc')
        modes = tuple(m for m in modes if m.from_existing_vpc == wanted)

    return DeploymentConfig(
        version=environ.get('VERSION') or DEFAULT_VERSION,
        modes=modes,
        account=environ.get('CDK_DEFAULT_ACCOUNT'),
        region=environ.get('CDK_DEFAULT_REGION'),
    )
