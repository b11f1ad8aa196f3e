"""
Error classes for the Keycloak deployment templates.

Template synthesis has very few failure points: parameter values are only known when
CloudFormation instantiates the template, so value constraints are enforced there.
The errors below cover the inputs that ARE known at synthesis time.
"""

from typing import Dict, Any


class KeycloakDeploymentError(Exception):
    """
    Base class for all deployment errors.

    Carries a stable error code plus details for structured logging.
    """

    def __init__(self, code: str, message: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


class ConfigurationError(KeycloakDeploymentError):
    """
    Raised when a deployment flag from CDK context or the environment
    cannot be interpreted.

    Details should name the offending setting and its raw value.
    """

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__('CONFIGURATION_ERROR', message, details or {})


class UnsupportedVersionError(KeycloakDeploymentError):
    """Raised when a literal Keycloak version outside the supported set is requested."""

    def __init__(self, version: str, supported: list):
        super().__init__(
            'UNSUPPORTED_VERSION',
            f'Unsupported Keycloak version: {version}',
            {'version': version, 'supported': list(supported)},
        )
