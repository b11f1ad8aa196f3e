"""
Tests for parameter declaration and settings resolution.
Synthesizes KeycloakStack for each deployment mode and checks the template
parameters, parameter groups and the resolved KeycloakSettings.
"""

import io
import json
import sys

import pytest
from aws_cdk import App, Stack, Token
from aws_cdk.assertions import Template

# Add deployments path
sys.path.insert(0, 'deployments')

from keycloak_infra.instance_types import INSTANCE_TYPES
from keycloak_infra.keycloak_stack import KeycloakStack, build_description
from keycloak_infra.logger import SynthLogger
from keycloak_infra.settings import DatabaseMode, DeploymentMode, NetworkMode
from keycloak_infra.settings_resolver import select_availability_zone_subnets
from keycloak_infra.versions import SUPPORTED_VERSIONS


VPC_PARAMETERS = ['VpcId', 'PubSubnets', 'PrivSubnets', 'DBSubnets']


def synth(aurora_serverless=False, from_existing_vpc=False, version='test'):
    """Build a stack in a fresh app; returns (stack, template json)."""
    app = App()
    stack = KeycloakStack(
        app,
        'keycloak-test',
        aurora_serverless=aurora_serverless,
        from_existing_vpc=from_existing_vpc,
        version=version,
        logger=SynthLogger('keycloak-test', stream=io.StringIO()),
    )
    return stack, Template.from_stack(stack).to_json()


def parameter_groups(template):
    return template['Metadata']['AWS::CloudFormation::Interface']['ParameterGroups']


def resources_of_type(template, resource_type):
    return [
        resource['Properties']
        for resource in template['Resources'].values()
        if resource['Type'] == resource_type
    ]


def select(index, parameter):
    return {'Fn::Select': [index, {'Ref': parameter}]}


class TestParameterDeclaration:
    """Test the declared parameters and their constraints."""

    def test_certificate_arn(self):
        """Test the certificate parameter is always declared with a minimum length."""
        for flags in [(False, False), (True, True)]:
            _, template = synth(*flags)
            certificate = template['Parameters']['CertificateArn']
            assert certificate['Type'] == 'String'
            assert certificate['MinLength'] == 5

    def test_database_instance_type_when_provisioned(self):
        """Test the instance type is an enumerated parameter defaulting to r5.large."""
        _, template = synth(aurora_serverless=False)
        instance_type = template['Parameters']['DatabaseInstanceType']

        assert instance_type['Type'] == 'String'
        assert instance_type['Default'] == 'r5.large'
        assert instance_type['AllowedValues'] == INSTANCE_TYPES

    def test_no_database_instance_type_when_serverless(self):
        """Test serverless mode never declares the instance type."""
        _, template = synth(aurora_serverless=True)
        assert 'DatabaseInstanceType' not in template['Parameters']

    def test_vpc_parameters_when_existing_vpc(self):
        """Test the four network parameters and their types."""
        _, template = synth(from_existing_vpc=True)
        params = template['Parameters']

        assert params['VpcId']['Type'] == 'AWS::EC2::VPC::Id'
        for name in ['PubSubnets', 'PrivSubnets', 'DBSubnets']:
            assert params[name]['Type'] == 'List<AWS::EC2::Subnet::Id>'

    def test_no_vpc_parameters_when_new_vpc(self):
        """Test no network parameter is declared for a new VPC."""
        _, template = synth(from_existing_vpc=False)
        for name in VPC_PARAMETERS:
            assert name not in template['Parameters']

    def test_autoscaling_parameters(self):
        """Test autoscaling defaults and minimum values."""
        _, template = synth()
        params = template['Parameters']

        assert params['MinContainers'] == {
            'Type': 'Number',
            'Default': 2,
            'Description': 'minimum containers count',
            'MinValue': 2,
        }
        assert params['MaxContainers']['Default'] == 10
        assert params['MaxContainers']['MinValue'] == 2
        assert params['AutoScalingTargetCpuUtilization']['Default'] == 75
        assert params['AutoScalingTargetCpuUtilization']['MinValue'] == 0

    def test_java_opts_has_no_constraints(self):
        """Test the environment variable parameter is a free-form string."""
        _, template = synth()
        java_opts = template['Parameters']['JavaOpts']

        assert java_opts['Type'] == 'String'
        for constraint in ['MinLength', 'MinValue', 'AllowedValues', 'Default']:
            assert constraint not in java_opts

    def test_keycloak_version_is_enumerated(self):
        """Test the version parameter is restricted to the supported versions."""
        _, template = synth()
        version = template['Parameters']['KeycloakVersion']

        assert version['Type'] == 'String'
        assert version['AllowedValues'] == SUPPORTED_VERSIONS
        assert version['Default'] == 'cb.15.0.2'


class TestParameterGroups:
    """Test the AWS::CloudFormation::Interface metadata per mode."""

    def test_groups_provisioned_new_vpc(self):
        """Test group order and membership without network parameters."""
        _, template = synth(aurora_serverless=False, from_existing_vpc=False)

        assert parameter_groups(template) == [
            {'Label': {'default': 'Application Load Balancer Settings'}, 'Parameters': ['CertificateArn']},
            {'Label': {'default': 'Database Instance Settings'}, 'Parameters': ['DatabaseInstanceType']},
            {
                'Label': {'default': 'AutoScaling Settings'},
                'Parameters': ['MinContainers', 'MaxContainers', 'AutoScalingTargetCpuUtilization'],
            },
            {'Label': {'default': 'Environment variable'}, 'Parameters': ['JavaOpts']},
            {'Label': {'default': 'Keycloak Version'}, 'Parameters': ['KeycloakVersion']},
        ]

    def test_groups_serverless_existing_vpc(self):
        """Test the VPC group replaces the database group."""
        _, template = synth(aurora_serverless=True, from_existing_vpc=True)
        groups = parameter_groups(template)

        assert [g['Label']['default'] for g in groups] == [
            'Application Load Balancer Settings',
            'VPC Settings',
            'AutoScaling Settings',
            'Environment variable',
            'Keycloak Version',
        ]
        assert groups[1]['Parameters'] == VPC_PARAMETERS

    def test_every_grouped_parameter_is_declared(self):
        """Test groups only reference declared parameters."""
        for mode in DeploymentMode.all_modes():
            _, template = synth(mode.aurora_serverless, mode.from_existing_vpc)
            for group in parameter_groups(template):
                for name in group['Parameters']:
                    assert name in template['Parameters']

    def test_stacks_do_not_share_groups(self):
        """Test two stacks in one app keep separate registries."""
        app = App()
        logger = SynthLogger('shared', stream=io.StringIO())
        existing = KeycloakStack(app, 'existing', from_existing_vpc=True, logger=logger)
        new = KeycloakStack(app, 'new', from_existing_vpc=False, logger=logger)

        assert 'VPC Settings' in existing.parameter_groups
        assert 'VPC Settings' not in new.parameter_groups
        new_labels = [g['Label']['default'] for g in parameter_groups(Template.from_stack(new).to_json())]
        assert 'VPC Settings' not in new_labels


class TestDescription:
    """Test the stack description."""

    @pytest.mark.parametrize('aurora_serverless, from_existing_vpc, expected', [
        (False, False, 'rds mysql with new vpc'),
        (False, True, 'rds mysql with existing vpc'),
        (True, False, 'using aurora serverless with new vpc'),
        (True, True, 'using aurora serverless with existing vpc'),
    ])
    def test_description(self, aurora_serverless, from_existing_vpc, expected):
        _, template = synth(aurora_serverless, from_existing_vpc, version='v2.0.1')
        assert template['Description'] == (
            f'(SO8021) - Deploy keycloak {expected}. template version: v2.0.1'
        )

    def test_build_description(self):
        mode = DeploymentMode(DatabaseMode.AURORA_SERVERLESS, NetworkMode.NEW_VPC)
        assert build_description(mode, 'x') == (
            '(SO8021) - Deploy keycloak using aurora serverless with new vpc. template version: x'
        )


class TestResolvedSettings:
    """Test the KeycloakSettings produced for each mode."""

    def test_serverless_has_no_instance_type(self):
        """Test serverless mode leaves the instance type unset regardless of network."""
        for from_existing_vpc in [False, True]:
            stack, _ = synth(aurora_serverless=True, from_existing_vpc=from_existing_vpc)
            assert stack.settings.database_instance_type is None

    def test_provisioned_instance_type_follows_parameter(self):
        """Test the instance type is a deferred reference to the parameter."""
        stack, template = synth(aurora_serverless=False)

        instance_type = stack.settings.database_instance_type
        assert instance_type is not None
        assert stack.resolve(instance_type.to_string()) == {'Ref': 'DatabaseInstanceType'}

        db_instances = resources_of_type(template, 'AWS::RDS::DBInstance')
        assert len(db_instances) == 1
        assert '"Ref": "DatabaseInstanceType"' in json.dumps(db_instances[0]['DBInstanceClass'])

    def test_existing_vpc_selects_first_two_subnets(self):
        """Test each subnet selection holds list positions 0 and 1."""
        stack, _ = synth(from_existing_vpc=True)
        network = stack.settings.network

        assert network is not None
        for selection, parameter in [
            (network.public_subnets, 'PubSubnets'),
            (network.private_subnets, 'PrivSubnets'),
            (network.database_subnets, 'DBSubnets'),
        ]:
            assert len(selection.subnets) == 2
            assert [stack.resolve(s.subnet_id) for s in selection.subnets] == [
                select(0, parameter),
                select(1, parameter),
            ]
        assert stack.resolve(network.vpc.vpc_id) == {'Ref': 'VpcId'}

    def test_new_vpc_leaves_network_unset(self):
        """Test all four network fields are unset without an existing VPC."""
        stack, _ = synth(from_existing_vpc=False)
        settings = stack.settings

        assert settings.network is None
        assert settings.vpc is None
        assert settings.public_subnets is None
        assert settings.private_subnets is None
        assert settings.database_subnets is None

    def test_deferred_values(self):
        """Test settings carry unresolved parameter references, not literals."""
        stack, _ = synth()
        settings = stack.settings

        assert Token.is_unresolved(settings.certificate_arn)
        assert stack.resolve(settings.certificate_arn) == {'Ref': 'CertificateArn'}
        assert stack.resolve(settings.env['JAVA_OPTS']) == {'Ref': 'JavaOpts'}
        assert stack.resolve(settings.keycloak_version.version) == {'Ref': 'KeycloakVersion'}
        assert stack.resolve(settings.node_count) == {'Ref': 'MinContainers'}

    def test_stickiness_is_seven_days(self):
        stack, _ = synth()
        assert stack.settings.stickiness_cookie_duration.to_days() == 7

    def test_resolution_is_logged(self):
        """Test the resolver logs the resolved modes."""
        stream = io.StringIO()
        KeycloakStack(App(), 'logged', aurora_serverless=True, logger=SynthLogger('logged', stream=stream))

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        resolved = [e for e in entries if e['event'] == 'settings_resolved']
        assert len(resolved) == 1
        assert resolved[0]['database'] == 'using aurora serverless'
        assert resolved[0]['hasInstanceType'] is False
        assert resolved[0]['hasNetwork'] is False


class TestScenarios:
    """End-to-end scenarios."""

    def test_scenario_provisioned_new_vpc_defaults(self):
        """Scenario A: provisioned database, new VPC, default autoscaling."""
        stack, template = synth(aurora_serverless=False, from_existing_vpc=False)
        params = template['Parameters']

        assert params['DatabaseInstanceType']['Default'] == 'r5.large'
        assert stack.settings.network is None
        assert (
            params['MinContainers']['Default'],
            params['MaxContainers']['Default'],
            params['AutoScalingTargetCpuUtilization']['Default'],
        ) == (2, 10, 75)

        auto_scale = stack.settings.auto_scale_task
        assert stack.resolve(auto_scale.min) == {'Ref': 'MinContainers'}
        assert stack.resolve(auto_scale.max) == {'Ref': 'MaxContainers'}
        assert stack.resolve(auto_scale.target_cpu_utilization) == {'Ref': 'AutoScalingTargetCpuUtilization'}

    def test_scenario_serverless_existing_vpc(self):
        """Scenario B: serverless database, existing VPC, first two public subnets."""
        stack, template = synth(aurora_serverless=True, from_existing_vpc=True)

        assert stack.settings.database_instance_type is None
        load_balancers = resources_of_type(template, 'AWS::ElasticLoadBalancingV2::LoadBalancer')
        assert load_balancers[0]['Subnets'] == [select(0, 'PubSubnets'), select(1, 'PubSubnets')]

        assert select_availability_zone_subnets(['subnet-a', 'subnet-b', 'subnet-c']) == [
            'subnet-a',
            'subnet-b',
        ]


class TestSubnetSelection:
    """Test the availability zone subnet helper."""

    def test_literal_list(self):
        assert select_availability_zone_subnets(['subnet-1', 'subnet-2']) == ['subnet-1', 'subnet-2']

    def test_literal_list_with_count(self):
        assert select_availability_zone_subnets(['s1', 's2', 's3'], count=3) == ['s1', 's2', 's3']

    def test_token_list(self):
        """Test a list parameter yields one Fn::Select per position."""
        from aws_cdk import CfnParameter

        stack = Stack(App(), 'subnets')
        subnets = CfnParameter(stack, 'Subnets', type='List<AWS::EC2::Subnet::Id>')

        selected = select_availability_zone_subnets(subnets.value_as_list)
        assert [stack.resolve(s) for s in selected] == [select(0, 'Subnets'), select(1, 'Subnets')]


class TestIdempotence:
    """Test repeated synthesis is deterministic."""

    @pytest.mark.parametrize('mode', DeploymentMode.all_modes())
    def test_same_flags_same_template(self, mode):
        _, first = synth(mode.aurora_serverless, mode.from_existing_vpc)
        _, second = synth(mode.aurora_serverless, mode.from_existing_vpc)
        assert first == second
