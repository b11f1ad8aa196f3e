"""
Base CDK stack for parameterized solution templates.

SolutionStack adds the template-level plumbing every solution template needs:
- Stack description
- Parameter declaration from ParameterSpec
- Parameter groups in the ``AWS::CloudFormation::Interface`` metadata

Each stack instance owns its own ParameterGroupRegistry.
"""

from typing import Dict, Iterable, Optional

from aws_cdk import (
    CfnParameter,
    Stack,
)
from constructs import Construct

from .logger import SynthLogger
from .parameter_groups import INTERFACE_METADATA_KEY, ParameterGroupRegistry
from .settings import ParameterSpec


class SolutionStack(Stack):
    """
    Stack with declared parameters grouped for the CloudFormation console.

    Attributes:
        parameter_groups: Registry of the parameter groups of this template
        logger: Structured synthesis logger scoped to this stack
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        logger: Optional[SynthLogger] = None,
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.parameter_groups = ParameterGroupRegistry()
        self.logger = logger or SynthLogger(stack_id=construct_id)

    def set_description(self, description: str) -> None:
        self.template_options.description = description

    def make_param(self, spec: ParameterSpec) -> CfnParameter:
        """
        Declare a template parameter.

        Args:
            spec: Parameter declaration

        Returns:
            The CfnParameter, whose ``value_as_*`` accessors yield deferred values
        """
        param = CfnParameter(self, spec.logical_id, **spec.to_props())
        self.logger.log_parameter_declared(spec.logical_id, spec.type.value)
        return param

    def add_group_param(self, groups: Dict[str, Iterable[CfnParameter]]) -> None:
        """
        Register parameters under group labels and rewrite the template metadata.

        Args:
            groups: Mapping of group label to the parameters shown under it
        """
        for label, params in groups.items():
            params = list(params)
            self.parameter_groups.register(label, params)
            self.logger.log_group_registered(
                label,
                [self.resolve(p.logical_id) for p in params if p is not None],
            )
        self._set_param_groups()

    def _set_param_groups(self) -> None:
        # template_options.metadata is copied on assignment; always write the whole dict
        metadata = dict(self.template_options.metadata or {})
        metadata[INTERFACE_METADATA_KEY] = self.parameter_groups.to_interface_metadata()
        self.template_options.metadata = metadata
