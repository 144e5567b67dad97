# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Titles and defaults bound to hasura_composex.ecs

You can change the titles *values* so you like so long as you keep it [a-zA-Z0-9]
"""

RES_KEY = "HasuraService"
OPTIONS_KEY = "HasuraOptions"

CLUSTER_T = "Cluster"
SERVICE_T = "Service"
TASK_T = "TaskDefinition"
SERVICE_SG_T = "ServiceSg"
SERVICE_SG_INGRESS_T = "ServiceSgIngressFromLoadBalancer"
LOG_GROUP_T = "LogGroup"
EXEC_ROLE_T = "ExecutionRole"
TASK_ROLE_T = "TaskRole"

CONTAINER_NAME = "hasura"
CONTAINER_PORT = 8080

DEFAULT_IMAGE_NAME = "hasura/graphql-engine"
DEFAULT_IMAGE_VERSION = "latest"
DEFAULT_DESIRED_COUNT = 1
DEFAULT_CPU = 256
DEFAULT_MEMORY = 512
DEFAULT_LOG_RETENTION_DAYS = 30

ENABLE_TELEMETRY_ENV = "HASURA_GRAPHQL_ENABLE_TELEMETRY"
ENABLE_CONSOLE_ENV = "HASURA_GRAPHQL_ENABLE_CONSOLE"
DATABASE_URL_SECRET = "HASURA_GRAPHQL_DATABASE_URL"
ADMIN_SECRET_SECRET = "HASURA_GRAPHQL_ADMIN_SECRET"
JWT_SECRET_SECRET = "HASURA_GRAPHQL_JWT_SECRET"

# Properties set by the composer, which cannot be set via Properties.
MANAGED_SERVICE_PROPERTIES = (
    "Cluster",
    "TaskDefinition",
    "LaunchType",
    "LoadBalancers",
    "NetworkConfiguration",
    "DesiredCount",
    "Tags",
)
