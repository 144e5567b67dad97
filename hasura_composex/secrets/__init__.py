#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille <john@compose-x.io>

"""
Package to handle the Secrets Manager secrets used by Hasura: generated passwords,
the connection string secret and references to existing secrets.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hasura_composex.graph import ResourceGraph

from troposphere import GetAtt, Join, Ref, Sub, Tags
from troposphere.rds import DBInstance
from troposphere.secretsmanager import GenerateSecretString, Secret

from hasura_composex.common.logging import LOG
from hasura_composex.graph import RESOLVES, USES_SECRET
from hasura_composex.rds.rds_params import DB_ENDPOINT_ADDRESS, DB_ENDPOINT_PORT
from hasura_composex.secrets.secrets_params import (
    CONNECTION_SECRET_DESCRIPTION,
    DEFAULT_PASSWORD_LENGTH,
    SECRETSMANAGER_ARN_RE,
)

SECRET_ARN = re.compile(SECRETSMANAGER_ARN_RE)


def add_generated_secret(
    graph: ResourceGraph, title: str, description: str, tags: Tags = None
) -> Secret:
    """
    Adds a secret with a generated value. Hasura doesn't like some punctuation in the DB password
    or the admin secret, so punctuation is excluded.

    :param ResourceGraph graph:
    :param str title: logical name of the secret
    :param str description:
    :param troposphere.Tags tags:
    """
    props = {
        "Description": description,
        "GenerateSecretString": GenerateSecretString(
            ExcludePunctuation=True,
            IncludeSpace=False,
            PasswordLength=DEFAULT_PASSWORD_LENGTH,
        ),
    }
    if tags:
        props["Tags"] = tags
    secret = graph.add_resource(Secret(title, **props))
    LOG.info(f"{title} - Generated secret added")
    return secret


def secret_dynamic_reference(secret, json_key: str = None):
    """
    Returns the CFN dynamic reference to the SecretString of the secret.

    :param secret: the Secret resource or the ARN of an existing secret
    :param str json_key: the key in the SecretString JSON document, if any
    :return: the dynamic reference
    """
    key_suffix = f":SecretString:{json_key}::" if json_key else ""
    if isinstance(secret, Secret):
        return Sub("{{resolve:secretsmanager:${" + secret.title + "}" + key_suffix + "}}")
    elif isinstance(secret, str):
        if not SECRET_ARN.match(secret):
            raise ValueError(
                f"{secret} is not a valid secret ARN. Must match", SECRET_ARN.pattern
            )
        return "{{resolve:secretsmanager:" + secret + key_suffix + "}}"
    raise TypeError("secret must be", Secret, str, "got", type(secret))


def define_connection_string(
    username: str, password, db_instance: DBInstance, database_name: str
) -> Join:
    """
    Returns the Postgres connection string
    postgres://{username}:{password}@{address}:{port}/{databaseName}
    where address and port are the endpoint attributes of the DB instance.
    """
    return Join(
        "",
        [
            "postgres://",
            username,
            ":",
            password,
            "@",
            GetAtt(db_instance, DB_ENDPOINT_ADDRESS),
            ":",
            GetAtt(db_instance, DB_ENDPOINT_PORT),
            "/",
            database_name,
        ],
    )


def add_connection_secret(
    graph: ResourceGraph,
    title: str,
    username: str,
    password,
    db_instance: DBInstance,
    database_name: str,
    password_secret: Secret = None,
    tags: Tags = None,
) -> Secret:
    """
    Saves the connection string to the DB instance as a secret.
    Must be called once the DB instance is declared.
    """
    if db_instance.title not in graph.resources:
        raise KeyError(
            f"{title} - DB instance {db_instance.title} must be declared before the connection secret"
        )
    props = {
        "Description": CONNECTION_SECRET_DESCRIPTION,
        "SecretString": define_connection_string(
            username, password, db_instance, database_name
        ),
    }
    if tags:
        props["Tags"] = tags
    references = [(db_instance, RESOLVES)]
    if password_secret is not None:
        references.append((password_secret, USES_SECRET))
    secret = graph.add_resource(Secret(title, **props), references=references)
    LOG.info(f"{title} - Connection string secret added for {db_instance.title}")
    return secret


def define_value_from(secret):
    """
    Returns the value to use for a container secret ValueFrom.

    :param secret: a Secret resource, an ARN or any CFN function returning the ARN.
    """
    if isinstance(secret, Secret):
        return Ref(secret)
    return secret
