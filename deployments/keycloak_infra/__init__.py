"""Keycloak on AWS CDK constructs and stacks."""

from .keycloak_stack import KeycloakStack
from .keycloak_construct import KeyCloak
from .parameter_groups import ParameterGroupRegistry
from .settings_resolver import SettingsResolver
from .versions import KeycloakVersion

__all__ = [
    "KeycloakStack",
    "KeyCloak",
    "ParameterGroupRegistry",
    "SettingsResolver",
    "KeycloakVersion",
]
