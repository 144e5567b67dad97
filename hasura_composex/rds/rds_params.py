# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
hasura_composex.rds titles and defaults.

You can change the titles *values* so you like so long as you keep it Alphanumerical [a-zA-Z0-9]
"""

from hasura_composex.vpc.vpc_params import PUBLIC_PLACEMENT

RES_KEY = "Rds"

DB_INSTANCE_T = "Postgres"
DB_SG_T = "PostgresSg"
DB_SUBNET_GROUP_T = "PostgresSubnetGroup"
DB_INGRESS_T = "PostgresIngressFromService"

DB_ENDPOINT_ADDRESS = "Endpoint.Address"
DB_ENDPOINT_PORT = "Endpoint.Port"

DB_ENGINE = "postgres"
DEFAULT_DB_NAME = "postgres"
DEFAULT_DB_USERNAME = "hasura"
DEFAULT_INSTANCE_CLASS = "db.t3.small"
DEFAULT_ALLOCATED_STORAGE = 100
DEFAULT_DB_PORT = 5432

# Publicly routable subnets, kept for compatibility. Prefer App or Storage.
DEFAULT_DB_SUBNETS_PLACEMENT = PUBLIC_PLACEMENT

# Properties set from the dedicated options, which cannot be set via Properties.
MANAGED_DB_PROPERTIES = (
    "Engine",
    "EngineVersion",
    "AllocatedStorage",
    "DBName",
    "MasterUsername",
    "MasterUserPassword",
    "DBInstanceClass",
    "DBSubnetGroupName",
    "VPCSecurityGroups",
    "Port",
    "Tags",
)
