"""
KeyCloak construct: the resource graph for one Keycloak deployment.

Builds every resource from a resolved KeycloakSettings:
- VPC (created here unless an existing VPC is supplied)
- Aurora MySQL cluster, provisioned or Aurora Serverless v2
- ECS Fargate service running the Keycloak container
- Internet-facing Application Load Balancer with an HTTPS listener
- Task count autoscaling on CPU utilization

Architecture:
    ALB (public subnets, HTTPS 443)
      -> Fargate tasks (private subnets, HTTPS 8443)
        -> Aurora MySQL (database subnets, 3306)

Usage Example:
    from aws_cdk import Stack
    from .keycloak_construct import KeyCloak

    KeyCloak(
        stack,
        'KeyCloak',
        settings=settings,
        aurora_serverless=False,
        from_existing_vpc=False,
    )
"""

from typing import Optional

from aws_cdk import (
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_elasticloadbalancingv2 as elbv2,
    aws_logs as logs,
    aws_rds as rds,
    aws_secretsmanager as secretsmanager,
    CfnOutput,
    Duration,
    RemovalPolicy,
)
from constructs import Construct

from .settings import KeycloakSettings


DATABASE_NAME = 'keycloak'
DATABASE_USER = 'admin'
KEYCLOAK_ADMIN_USER = 'keycloak'
CONTAINER_PORT = 8443
TASK_CPU = 4096
TASK_MEMORY_MIB = 8192


class KeyCloak(Construct):
    """
    Construct that deploys Keycloak on ECS Fargate behind an Application Load Balancer.

    Attributes:
        vpc: VPC hosting all resources
        database: Aurora MySQL cluster
        keycloak_secret: Generated Keycloak admin credentials
        service: ECS Fargate service running Keycloak
        load_balancer: Internet-facing Application Load Balancer
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        settings: KeycloakSettings,
        aurora_serverless: bool = False,
        from_existing_vpc: bool = False,
        **kwargs
    ) -> None:
        """
        Initialize KeyCloak construct.

        Args:
            scope: CDK construct scope
            construct_id: Unique construct identifier
            settings: Resolved deployment settings
            aurora_serverless: Use Aurora Serverless v2 instead of a provisioned writer
            from_existing_vpc: Deploy into settings.vpc instead of creating a VPC
        """
        super().__init__(scope, construct_id, **kwargs)

        self.settings = settings

        # 1. Network
        self.vpc = settings.vpc if from_existing_vpc else self._create_vpc()
        public_subnets = settings.public_subnets or ec2.SubnetSelection(
            subnet_type=ec2.SubnetType.PUBLIC)
        private_subnets = settings.private_subnets or ec2.SubnetSelection(
            subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS)
        database_subnets = settings.database_subnets or ec2.SubnetSelection(
            subnet_type=ec2.SubnetType.PRIVATE_ISOLATED)

        # 2. Database
        self.database = self._create_database(
            database_subnets,
            aurora_serverless,
            settings.database_instance_type,
        )

        # 3. Keycloak admin credentials
        self.keycloak_secret = secretsmanager.Secret(
            self,
            'KCSecret',
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=f'{{"username": "{KEYCLOAK_ADMIN_USER}"}}',
                generate_string_key='password',
                exclude_punctuation=True,
                password_length=12,
            ),
        )

        # 4. Compute
        self.service = self._create_service(private_subnets)
        self.database.connections.allow_default_port_from(self.service, 'Keycloak tasks')

        # 5. Load balancer
        self.load_balancer = self._create_load_balancer(public_subnets)

        # 6. Autoscaling
        scaling = self.service.auto_scale_task_count(
            min_capacity=settings.auto_scale_task.min,
            max_capacity=settings.auto_scale_task.max,
        )
        scaling.scale_on_cpu_utilization(
            'CpuScaling',
            target_utilization_percent=settings.auto_scale_task.target_cpu_utilization,
        )

        CfnOutput(
            self,
            'EndpointURL',
            value=f'https://{self.load_balancer.load_balancer_dns_name}',
            description='Keycloak endpoint URL',
        )
        CfnOutput(
            self,
            'KeycloakSecretArn',
            value=self.keycloak_secret.secret_arn,
            description='Secret holding the Keycloak admin credentials',
        )

    def _create_vpc(self) -> ec2.Vpc:
        return ec2.Vpc(
            self,
            'Vpc',
            max_azs=2,
            nat_gateways=1,
            subnet_configuration=[
                ec2.SubnetConfiguration(name='Public', subnet_type=ec2.SubnetType.PUBLIC),
                ec2.SubnetConfiguration(name='Private', subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS),
                ec2.SubnetConfiguration(name='Database', subnet_type=ec2.SubnetType.PRIVATE_ISOLATED),
            ],
        )

    def _create_database(
        self,
        database_subnets: ec2.SubnetSelection,
        aurora_serverless: bool,
        instance_type: Optional[ec2.InstanceType],
    ) -> rds.DatabaseCluster:
        """
        Create the Aurora MySQL cluster.

        Aurora Serverless uses a Serverless v2 writer; otherwise the writer is a
        provisioned instance of ``instance_type``.
        """
        if aurora_serverless:
            writer = rds.ClusterInstance.serverless_v2('Writer')
        else:
            writer = rds.ClusterInstance.provisioned('Writer', instance_type=instance_type)

        return rds.DatabaseCluster(
            self,
            'Database',
            engine=rds.DatabaseClusterEngine.aurora_mysql(
                version=rds.AuroraMysqlEngineVersion.VER_3_04_0,
            ),
            credentials=rds.Credentials.from_generated_secret(DATABASE_USER),
            default_database_name=DATABASE_NAME,
            writer=writer,
            serverless_v2_min_capacity=0.5 if aurora_serverless else None,
            serverless_v2_max_capacity=16 if aurora_serverless else None,
            vpc=self.vpc,
            vpc_subnets=database_subnets,
            backup=rds.BackupProps(retention=Duration.days(7)),
            storage_encrypted=True,
            removal_policy=RemovalPolicy.RETAIN,
        )

    def _create_service(self, private_subnets: ec2.SubnetSelection) -> ecs.FargateService:
        cluster = ecs.Cluster(self, 'Cluster', vpc=self.vpc)

        task_definition = ecs.FargateTaskDefinition(
            self,
            'TaskDef',
            cpu=TASK_CPU,
            memory_limit_mib=TASK_MEMORY_MIB,
        )

        log_group = logs.LogGroup(
            self,
            'LogGroup',
            retention=logs.RetentionDays.ONE_MONTH,
            removal_policy=RemovalPolicy.RETAIN,
        )

        container = task_definition.add_container(
            'keycloak',
            image=ecs.ContainerImage.from_registry(self.settings.keycloak_version.image),
            environment={
                'DB_ADDR': self.database.cluster_endpoint.hostname,
                'DB_DATABASE': DATABASE_NAME,
                'DB_PORT': '3306',
                'DB_USER': DATABASE_USER,
                'DB_VENDOR': 'mysql',
                'JDBC_PARAMS': 'useSSL=false',
                'PROXY_ADDRESS_FORWARDING': 'true',
                **self.settings.env,
            },
            secrets={
                'DB_PASSWORD': ecs.Secret.from_secrets_manager(self.database.secret, 'password'),
                'KEYCLOAK_USER': ecs.Secret.from_secrets_manager(self.keycloak_secret, 'username'),
                'KEYCLOAK_PASSWORD': ecs.Secret.from_secrets_manager(self.keycloak_secret, 'password'),
            },
            logging=ecs.LogDrivers.aws_logs(stream_prefix='keycloak', log_group=log_group),
        )
        container.add_port_mappings(ecs.PortMapping(container_port=CONTAINER_PORT))

        return ecs.FargateService(
            self,
            'Service',
            cluster=cluster,
            task_definition=task_definition,
            desired_count=self.settings.node_count,
            vpc_subnets=private_subnets,
            circuit_breaker=ecs.DeploymentCircuitBreaker(rollback=True),
            health_check_grace_period=Duration.seconds(120),
        )

    def _create_load_balancer(
        self,
        public_subnets: ec2.SubnetSelection,
    ) -> elbv2.ApplicationLoadBalancer:
        load_balancer = elbv2.ApplicationLoadBalancer(
            self,
            'ALB',
            vpc=self.vpc,
            internet_facing=True,
            vpc_subnets=public_subnets,
        )

        listener = load_balancer.add_listener(
            'HttpsListener',
            protocol=elbv2.ApplicationProtocol.HTTPS,
            port=443,
            certificates=[elbv2.ListenerCertificate.from_arn(self.settings.certificate_arn)],
        )
        listener.add_targets(
            'ECSTarget',
            targets=[self.service],
            port=CONTAINER_PORT,
            protocol=elbv2.ApplicationProtocol.HTTPS,
            health_check=elbv2.HealthCheck(
                healthy_threshold_count=3,
                path='/auth/',
                healthy_http_codes='200-399',
            ),
            slow_start=Duration.seconds(60),
            stickiness_cookie_duration=self.settings.stickiness_cookie_duration,
        )

        # Plain HTTP is redirected to the HTTPS listener
        load_balancer.add_redirect()

        return load_balancer
