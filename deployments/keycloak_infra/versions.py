"""
Keycloak versions supported by the templates.

The version is chosen by the operator through the KeycloakVersion parameter, so at
synthesis time it is usually an unresolved token. Literal versions are checked
against the supported set; token versions are passed through and CloudFormation
enforces the parameter's allowed values.
"""

from aws_cdk import Token

from .errors import UnsupportedVersionError


KEYCLOAK_IMAGE_REPOSITORY = 'jboss/keycloak'


class KeycloakVersion:
    """
    Keycloak release deployed by the ECS service.

    Attributes:
        version: Version string, e.g. '15.0.2' (may be an unresolved token)
    """

    V12_0_4: 'KeycloakVersion'
    V15_0_0: 'KeycloakVersion'
    V15_0_1: 'KeycloakVersion'
    V15_0_2: 'KeycloakVersion'
    CB_V15_0_2: 'KeycloakVersion'

    def __init__(self, version: str) -> None:
        self.version = version

    @classmethod
    def of(cls, version: str) -> 'KeycloakVersion':
        """
        Build a KeycloakVersion from a version string.

        Raises:
            UnsupportedVersionError: If a literal version is not supported
        """
        if not Token.is_unresolved(version) and version not in SUPPORTED_VERSIONS:
            raise UnsupportedVersionError(version, SUPPORTED_VERSIONS)
        return cls(version)

    @property
    def image(self) -> str:
        """Container image reference for this version."""
        return f'{KEYCLOAK_IMAGE_REPOSITORY}:{self.version}'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeycloakVersion):
            return NotImplemented
        return self.version == other.version

    def __hash__(self) -> int:
        return hash(self.version)

    def __repr__(self) -> str:
        return f'KeycloakVersion({self.version!r})'


KeycloakVersion.V12_0_4 = KeycloakVersion('12.0.4')
KeycloakVersion.V15_0_0 = KeycloakVersion('15.0.0')
KeycloakVersion.V15_0_1 = KeycloakVersion('15.0.1')
KeycloakVersion.V15_0_2 = KeycloakVersion('15.0.2')
KeycloakVersion.CB_V15_0_2 = KeycloakVersion('cb.15.0.2')

SUPPORTED_VERSIONS = [
    KeycloakVersion.V12_0_4.version,
    KeycloakVersion.V15_0_0.version,
    KeycloakVersion.V15_0_1.version,
    KeycloakVersion.V15_0_2.version,
    KeycloakVersion.CB_V15_0_2.version,
]

DEFAULT_VERSION = KeycloakVersion.CB_V15_0_2.version
