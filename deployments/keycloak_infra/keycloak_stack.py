"""
Keycloak CDK Stack.

One stack per deployment mode. The mode is fixed at construction time by two flags:
- aurora_serverless: Aurora Serverless v2 instead of a provisioned Aurora MySQL writer
- from_existing_vpc: deploy into an operator-selected VPC instead of creating one

Stack naming convention: keycloak[-aurora-serverless]-from-<new|existing>-vpc

Usage Example:
    from aws_cdk import App
    from keycloak_infra.keycloak_stack import KeycloakStack

    app = App()

    KeycloakStack(
        app,
        'keycloak-aurora-serverless-from-existing-vpc',
        aurora_serverless=True,
        from_existing_vpc=True,
        version='v1.0.0',
    )

    app.synth()
"""

from aws_cdk import Tags
from constructs import Construct

from .keycloak_construct import KeyCloak
from .settings import DeploymentMode
from .settings_resolver import SettingsResolver
from .solution_stack import SolutionStack


SOLUTION_ID = 'SO8021'


def build_description(mode: DeploymentMode, version: str) -> str:
    """Stack description shown in the CloudFormation console."""
    return f'({SOLUTION_ID}) - Deploy keycloak {mode.describe()}. template version: {version}'


class KeycloakStack(SolutionStack):
    """
    Parameterized template deploying Keycloak.

    Attributes:
        mode: Deployment mode of this stack
        settings: Resolved settings handed to the KeyCloak construct
        keycloak: The KeyCloak construct
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        aurora_serverless: bool = False,
        from_existing_vpc: bool = False,
        version: str = 'development',
        **kwargs
    ) -> None:
        """
        Initialize Keycloak stack.

        Args:
            scope: CDK app scope
            construct_id: Stack identifier
            aurora_serverless: Deployment-mode flag for the database
            from_existing_vpc: Deployment-mode flag for the network
            version: Template version tag, shown in the description only
            **kwargs: Additional stack properties (env, logger, etc.)
        """
        super().__init__(scope, construct_id, **kwargs)

        self.mode = DeploymentMode.from_flags(
            aurora_serverless=aurora_serverless,
            from_existing_vpc=from_existing_vpc,
        )

        description = build_description(self.mode, version)
        self.set_description(description)
        self.logger.log_stack_start(
            description=description,
            auroraServerless=self.mode.aurora_serverless,
            fromExistingVpc=self.mode.from_existing_vpc,
        )

        Tags.of(self).add('Service', 'keycloak')
        Tags.of(self).add('ManagedBy', 'CDK')

        self.settings = SettingsResolver(self, self.mode).resolve()

        self.keycloak = KeyCloak(
            self,
            'KeyCloak',
            settings=self.settings,
            aurora_serverless=self.mode.aurora_serverless,
            from_existing_vpc=self.mode.from_existing_vpc,
        )
