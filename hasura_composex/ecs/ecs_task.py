# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Hasura ECS Task Definition, with its container environment, secrets and logging.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hasura_composex.graph import ResourceGraph
    from hasura_composex.settings import HasuraOptions, ServiceSettings

from troposphere import GetAtt, Ref, Region, Tags
from troposphere.ecs import (
    ContainerDefinition,
    Environment,
    LogConfiguration,
    PortMapping,
)
from troposphere.ecs import Secret as EcsSecret
from troposphere.ecs import TaskDefinition
from troposphere.iam import Role
from troposphere.logs import LogGroup
from troposphere.secretsmanager import Secret

from hasura_composex.common.logging import LOG
from hasura_composex.ecs.ecs_params import (
    ADMIN_SECRET_SECRET,
    CONTAINER_NAME,
    CONTAINER_PORT,
    DATABASE_URL_SECRET,
    DEFAULT_LOG_RETENTION_DAYS,
    ENABLE_CONSOLE_ENV,
    ENABLE_TELEMETRY_ENV,
    JWT_SECRET_SECRET,
    LOG_GROUP_T,
    TASK_T,
)
from hasura_composex.graph import ASSUMES, LOGS_TO, USES_SECRET
from hasura_composex.secrets import define_value_from


def bool_to_env(value: bool) -> str:
    return "true" if value else "false"


def define_environment(options: HasuraOptions) -> OrderedDict:
    """
    Returns the container environment variables. The telemetry and console flags are set first,
    the user Env is merged on top.

    :param HasuraOptions options:
    :rtype: collections.OrderedDict
    """
    environment = OrderedDict(
        {
            ENABLE_TELEMETRY_ENV: bool_to_env(options.enable_telemetry),
            ENABLE_CONSOLE_ENV: bool_to_env(options.enable_console),
        }
    )
    environment.update(options.env)
    return environment


def define_secrets(
    options: HasuraOptions, connection_secret: Secret, admin_secret=None
) -> OrderedDict:
    """
    Returns the container secrets, env var name to Secret resource or ARN, merged in order

    * the database connection string
    * the admin secret, user defined or generated
    * the JWT secret, only when user defined
    * the user defined Secrets, which override all the above.

    :param HasuraOptions options:
    :param troposphere.secretsmanager.Secret connection_secret:
    :param admin_secret: the generated admin Secret. Ignored when AdminSecret is set.
    :rtype: collections.OrderedDict
    """
    secrets = OrderedDict({DATABASE_URL_SECRET: connection_secret})
    if options.admin_secret:
        secrets[ADMIN_SECRET_SECRET] = options.admin_secret
    elif admin_secret is not None:
        secrets[ADMIN_SECRET_SECRET] = admin_secret
    if options.jwt_secret:
        secrets[JWT_SECRET_SECRET] = options.jwt_secret
    for name in options.secrets:
        if name in secrets:
            LOG.warning(
                f"HasuraOptions.Secrets.{name} overrides the value defined by hasura-compose-x"
            )
    secrets.update(options.secrets)
    return secrets


def define_container_secrets(secrets: dict) -> list:
    return [
        EcsSecret(Name=name, ValueFrom=define_value_from(secret))
        for name, secret in secrets.items()
    ]


def add_log_group(graph: ResourceGraph, logical_name: str, tags: Tags = None) -> LogGroup:
    props = {"RetentionInDays": DEFAULT_LOG_RETENTION_DAYS}
    if tags:
        props["Tags"] = tags
    return graph.add_resource(LogGroup(f"{logical_name}{LOG_GROUP_T}", **props))


def define_container(
    options: HasuraOptions, environment: dict, secrets: dict, log_group: LogGroup
) -> ContainerDefinition:
    """
    Defines the Hasura GraphQL engine container, listening on the fixed port
    """
    return ContainerDefinition(
        Name=CONTAINER_NAME,
        Image=options.image,
        Essential=True,
        PortMappings=[
            PortMapping(ContainerPort=CONTAINER_PORT, HostPort=CONTAINER_PORT, Protocol="tcp")
        ],
        Environment=[
            Environment(Name=name, Value=value) for name, value in environment.items()
        ],
        Secrets=define_container_secrets(secrets),
        LogConfiguration=LogConfiguration(
            LogDriver="awslogs",
            Options={
                "awslogs-group": Ref(log_group),
                "awslogs-region": Region,
                "awslogs-stream-prefix": CONTAINER_NAME,
            },
        ),
    )


def add_task_definition(
    graph: ResourceGraph,
    service: ServiceSettings,
    options: HasuraOptions,
    logical_name: str,
    environment: dict,
    secrets: dict,
    exec_role: Role,
    task_role: Role,
    log_group: LogGroup,
    tags: Tags = None,
) -> TaskDefinition:
    """
    Adds the Fargate Task Definition running the Hasura container

    :param ResourceGraph graph:
    :param ServiceSettings service:
    :param HasuraOptions options:
    :param str logical_name:
    :param dict environment: the merged container environment variables
    :param dict secrets: the merged container secrets
    :param exec_role:
    :param task_role:
    :param log_group:
    :param troposphere.Tags tags:
    :rtype: troposphere.ecs.TaskDefinition
    """
    props = {
        "Family": logical_name,
        "Cpu": str(service.cpu),
        "Memory": str(service.memory),
        "NetworkMode": "awsvpc",
        "RequiresCompatibilities": ["FARGATE"],
        "ExecutionRoleArn": GetAtt(exec_role, "Arn"),
        "TaskRoleArn": GetAtt(task_role, "Arn"),
        "ContainerDefinitions": [
            define_container(options, environment, secrets, log_group)
        ],
    }
    if tags:
        props["Tags"] = tags
    references = [
        (exec_role, ASSUMES),
        (task_role, ASSUMES),
        (log_group, LOGS_TO),
    ]
    references += [(secret, USES_SECRET) for secret in secrets.values()]
    task_definition = graph.add_resource(
        TaskDefinition(f"{logical_name}{TASK_T}", **props), references=references
    )
    LOG.info(
        f"{logical_name} - Task definition {task_definition.title} declared with image {options.image}"
    )
    return task_definition
