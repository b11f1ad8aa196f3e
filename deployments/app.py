#!/usr/bin/env python3
"""
CDK Application Entry Point.

Creates one Keycloak stack per deployment mode and synthesizes the
CloudFormation templates.

Usage:
    # Synthesize all four templates
    cdk synth

    # Synthesize only the Aurora Serverless templates
    cdk synth -c aurora_serverless=true

    # Deploy a single stack
    cdk deploy keycloak-from-existing-vpc

Environment Configuration:
    - VERSION: Template version tag shown in stack descriptions
    - CDK_DEFAULT_ACCOUNT / CDK_DEFAULT_REGION: Target account and region
    - AURORA_SERVERLESS / FROM_EXISTING_VPC: Restrict synthesis to matching modes
      (CDK context keys aurora_serverless / from_existing_vpc take precedence)

Stack naming convention: keycloak[-aurora-serverless]-from-<new|existing>-vpc
"""

from aws_cdk import App

from keycloak_infra.config import load_config, stack_name_for
from keycloak_infra.errors import ConfigurationError
from keycloak_infra.keycloak_stack import KeycloakStack
from keycloak_infra.logger import SynthLogger


app = App()
app_logger = SynthLogger(stack_id='app')

try:
    config = load_config(app)
except ConfigurationError as e:
    app_logger.log_configuration_error(e.code, e.message, **e.details)
    raise

for mode in config.modes:
    KeycloakStack(
        app,
        stack_name_for(mode),
        aurora_serverless=mode.aurora_serverless,
        from_existing_vpc=mode.from_existing_vpc,
        version=config.version,
        env=config.env,
    )

app_logger.log_info('synthesizing', stacks=[stack_name_for(m) for m in config.modes])

# Synthesize CloudFormation templates
app.synth()
