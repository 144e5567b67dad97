# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Main module composing all the resources to run Hasura GraphQL engine on AWS ECS
with an RDS PostgreSQL database, into one ResourceGraph.
"""

from __future__ import annotations

from troposphere import GetAtt, Output, Ref

from hasura_composex.common.logging import LOG
from hasura_composex.common.tagging import define_tags
from hasura_composex.ecs.ecs_cluster import define_cluster
from hasura_composex.ecs.ecs_iam import add_exec_role, add_task_role
from hasura_composex.ecs.ecs_service import (
    add_service,
    add_service_sg,
    allow_load_balancer_ingress,
)
from hasura_composex.ecs.ecs_task import (
    add_log_group,
    add_task_definition,
    define_environment,
    define_secrets,
)
from hasura_composex.elbv2.elbv2_params import HEALTH_CHECK_PATH
from hasura_composex.elbv2.elbv2_template import (
    add_redirect_listener,
    configure_health_check,
    define_load_balancing,
)
from hasura_composex.graph import ALLOWS_FROM, ResourceGraph
from hasura_composex.rds.rds_params import DB_ENDPOINT_ADDRESS, DB_ENDPOINT_PORT
from hasura_composex.rds.rds_template import (
    add_db_instance,
    add_db_sg,
    allow_from,
    create_db_subnet_group,
    define_master_password,
)
from hasura_composex.secrets import add_connection_secret, add_generated_secret
from hasura_composex.secrets.secrets_params import ADMIN_SECRET_T, CONNECTION_SECRET_T
from hasura_composex.settings import HasuraSettings
from hasura_composex.vpc import NetworkContext


class Hasura:
    """
    Composes the Hasura resources. All the resources are declared when the object is created,
    in this order

    #. the database password, generated if not set
    #. the RDS PostgreSQL instance
    #. the connection string secret
    #. the ECS Cluster, unless using an existing one
    #. the load balanced ECS Service, with its environment and secrets
    #. the load balancer target group health check
    #. the ingress rule allowing the service to connect to the database

    :ivar HasuraSettings settings: the resolved settings
    :ivar ResourceGraph graph: the declared resources
    :ivar troposphere.secretsmanager.Secret password_secret: the generated DB password secret, if any
    :ivar troposphere.secretsmanager.Secret admin_secret: the generated admin secret, if any
    :ivar troposphere.secretsmanager.Secret connection_secret:
    :ivar troposphere.rds.DBInstance postgres:
    :ivar troposphere.ecs.Cluster cluster: the new ECS Cluster, if any
    :ivar troposphere.ecs.Service service:
    :ivar troposphere.elasticloadbalancingv2.Listener listener: the listener forwarding to Hasura
    :ivar troposphere.elasticloadbalancingv2.Listener redirect_listener: HTTP to HTTPS redirect, if any
    :ivar troposphere.ec2.SecurityGroupIngress ingress_rule: service to database ingress
    """

    def __init__(self, settings: HasuraSettings, graph: ResourceGraph = None):
        self.settings = settings
        self.logical_name = settings.logical_name
        self.graph = (
            graph
            if graph is not None
            else ResourceGraph(
                f"Hasura GraphQL engine {settings.name} on AWS ECS with RDS PostgreSQL"
            )
        )
        self.tags = define_tags(self.logical_name, settings.tags)
        self.password_secret = None
        self.admin_secret = None
        self.password = None
        self.db_sg = None
        self.db_subnet_group = None
        self.postgres = None
        self.connection_secret = None
        self.cluster = None
        self.cluster_identifier = None
        self.environment = None
        self.secrets = None
        self.exec_role = None
        self.task_role = None
        self.log_group = None
        self.task_definition = None
        self.lb_sg = None
        self.load_balancer = None
        self.target_group = None
        self.listener = None
        self.redirect_listener = None
        self.service_sg = None
        self.service = None
        self.ingress_rule = None
        self.compose()

    def __repr__(self):
        return f"Hasura({self.logical_name})"

    def compose(self) -> None:
        LOG.info(f"{self.logical_name} - Composing Hasura resources")
        self.define_database()
        self.define_connection_secret()
        self.define_cluster()
        self.define_service()
        configure_health_check(self.target_group, HEALTH_CHECK_PATH)
        self.define_database_ingress()
        self.define_outputs()
        LOG.info(f"{self.logical_name} - {self.graph}")

    def define_database(self) -> None:
        rds = self.settings.rds
        self.password, self.password_secret = define_master_password(
            self.graph, rds, self.logical_name, self.tags
        )
        self.db_sg = add_db_sg(
            self.graph, self.settings.network, self.logical_name, self.tags
        )
        self.db_subnet_group = create_db_subnet_group(
            self.graph,
            self.settings.network,
            rds.subnets_placement,
            self.logical_name,
            self.tags,
        )
        self.postgres = add_db_instance(
            self.graph,
            rds,
            self.logical_name,
            self.password,
            self.db_sg,
            self.db_subnet_group,
            password_secret=self.password_secret,
            tags=self.tags,
        )

    def define_connection_secret(self) -> None:
        rds = self.settings.rds
        self.connection_secret = add_connection_secret(
            self.graph,
            f"{self.logical_name}{CONNECTION_SECRET_T}",
            rds.master_username,
            self.password,
            self.postgres,
            rds.database_name,
            password_secret=self.password_secret,
            tags=self.tags,
        )

    def define_cluster(self) -> None:
        self.cluster_identifier, self.cluster = define_cluster(
            self.graph, self.settings.service.cluster, self.logical_name, self.tags
        )

    def define_service(self) -> None:
        """
        Declares the admin secret if needed, the task definition and the load balanced ECS Service
        """
        options = self.settings.options
        service = self.settings.service
        network = self.settings.network
        if not options.admin_secret:
            self.admin_secret = add_generated_secret(
                self.graph,
                f"{self.logical_name}{ADMIN_SECRET_T}",
                f"{self.logical_name} Hasura admin secret",
                tags=self.tags,
            )
        self.environment = define_environment(options)
        self.secrets = define_secrets(
            options, self.connection_secret, self.admin_secret
        )
        self.exec_role = add_exec_role(
            self.graph, self.logical_name, self.secrets, self.tags
        )
        self.task_role = add_task_role(self.graph, self.logical_name, self.tags)
        self.log_group = add_log_group(self.graph, self.logical_name, self.tags)
        self.task_definition = add_task_definition(
            self.graph,
            service,
            options,
            self.logical_name,
            self.environment,
            self.secrets,
            self.exec_role,
            self.task_role,
            self.log_group,
            self.tags,
        )
        (
            self.lb_sg,
            self.load_balancer,
            self.target_group,
            self.listener,
        ) = define_load_balancing(
            self.graph, network, service, self.logical_name, self.tags
        )
        if service.redirect_http:
            self.redirect_listener = add_redirect_listener(
                self.graph, service, self.logical_name, self.load_balancer
            )
        self.service_sg = add_service_sg(
            self.graph, network, self.logical_name, self.tags
        )
        allow_load_balancer_ingress(
            self.graph, self.service_sg, self.lb_sg, self.logical_name
        )
        self.service = add_service(
            self.graph,
            network,
            service,
            self.logical_name,
            self.cluster_identifier,
            self.task_definition,
            self.service_sg,
            self.target_group,
            self.listener,
            cluster_resource=self.cluster,
            tags=self.tags,
        )

    def define_database_ingress(self) -> None:
        self.ingress_rule = allow_from(
            self.graph, self.postgres, self.db_sg, self.service_sg, self.logical_name
        )
        self.graph.add_edge(self.ingress_rule, self.service, ALLOWS_FROM)

    def define_outputs(self) -> None:
        outputs = [
            Output(
                f"{self.connection_secret.title}Arn",
                Value=Ref(self.connection_secret),
            ),
            Output(
                f"{self.postgres.title}EndpointAddress",
                Value=GetAtt(self.postgres, DB_ENDPOINT_ADDRESS),
            ),
            Output(
                f"{self.postgres.title}EndpointPort",
                Value=GetAtt(self.postgres, DB_ENDPOINT_PORT),
            ),
            Output(f"{self.service.title}Name", Value=GetAtt(self.service, "Name")),
            Output(
                f"{self.load_balancer.title}DNSName",
                Value=GetAtt(self.load_balancer, "DNSName"),
            ),
            Output(
                f"{self.logical_name}ClusterName",
                Value=self.cluster_identifier,
            ),
        ]
        for secret in (self.password_secret, self.admin_secret):
            if secret is not None:
                outputs.append(Output(f"{secret.title}Arn", Value=Ref(secret)))
        self.graph.add_outputs(outputs)


def compose_hasura(
    definition: dict, name: str = None, network: NetworkContext = None
) -> Hasura:
    """
    Resolves the settings from the definition and composes the Hasura resources.

    :param dict definition: the Hasura definition, i.e. loaded from a YAML file
    :param str name: the name of the deployment, used to name the resources
    :param NetworkContext network: overrides the Vpc of the definition
    :rtype: Hasura
    """
    settings = HasuraSettings(definition, name=name, network=network)
    return Hasura(settings)
