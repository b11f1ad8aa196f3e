"""
Parameter group registry for CloudFormation console presentation.

CloudFormation renders template parameters in the console in the order given by the
``AWS::CloudFormation::Interface`` metadata block. This module keeps the mapping from
a group label to the parameters shown under it.

Ordering rules:
- Labels are exported in first-registration order
- Registering parameters under an existing label places the new parameters
  BEFORE the ones already registered for that label
- Parameters without a logical id (None or empty) are dropped at export time

Each stack owns its own registry instance. Never share one between stacks:
group membership of one template would leak into the other.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple


INTERFACE_METADATA_KEY = 'AWS::CloudFormation::Interface'


def _identifier_of(parameter: Any) -> Optional[str]:
    """Return the logical id of a parameter, or None if it has none."""
    if parameter is None:
        return None
    return getattr(parameter, 'logical_id', None)


class ParameterGroupRegistry:
    """
    Ordered mapping of group label to registered parameters.

    Parameters are stored by reference (usually ``CfnParameter`` instances) and
    only reduced to logical ids on export, so a parameter's id is read at the
    time the metadata is written.

    Usage:
        registry = ParameterGroupRegistry()
        registry.register('VPC Settings', [vpc_id_param, subnets_param])
        registry.export_groups()
        # [('VPC Settings', ['VpcId', 'PubSubnets'])]
    """

    def __init__(self) -> None:
        self._groups: Dict[str, List[Any]] = {}

    def register(self, label: str, parameters: Iterable[Any]) -> None:
        """
        Register parameters under a group label.

        New parameters are placed before any parameters already registered
        under the same label. Never raises; parameters without an id are kept
        here and filtered out by ``export_groups``.

        Args:
            label: Group heading shown in the CloudFormation console
            parameters: Ordered parameters to add to the group
        """
        self._groups[label] = list(parameters) + self._groups.get(label, [])

    def export_groups(self) -> List[Tuple[str, List[str]]]:
        """
        Export all groups as (label, logical ids) pairs.

        Computed from the current registrations on every call.
        """
        exported = []
        for label, parameters in self._groups.items():
            identifiers = [_identifier_of(p) for p in parameters]
            exported.append((label, [i for i in identifiers if i]))
        return exported

    def to_interface_metadata(self) -> Dict[str, Any]:
        """
        Build the body of the ``AWS::CloudFormation::Interface`` metadata.

        Returns:
            Dict with a ``ParameterGroups`` list of ``{Label, Parameters}`` entries
        """
        return {
            'ParameterGroups': [
                {
                    'Label': {'default': label},
                    'Parameters': identifiers,
                }
                for label, identifiers in self.export_groups()
            ],
        }

    def labels(self) -> List[str]:
        return list(self._groups)

    def __contains__(self, label: object) -> bool:
        return label in self._groups

    def __len__(self) -> int:
        return len(self._groups)
