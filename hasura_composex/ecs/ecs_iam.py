# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
IAM Roles of the Hasura ECS Task
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hasura_composex.graph import ResourceGraph

from troposphere import Sub, Tags
from troposphere.iam import Policy, Role

from hasura_composex.common.logging import LOG
from hasura_composex.ecs.ecs_params import EXEC_ROLE_T, TASK_ROLE_T
from hasura_composex.graph import USES_SECRET
from hasura_composex.iam import (
    ECS_TASK_EXECUTION_POLICY,
    define_secrets_access_policy,
    service_role_trust_policy,
)
from hasura_composex.secrets import define_value_from


def add_exec_role(
    graph: ResourceGraph, logical_name: str, secrets: dict, tags: Tags = None
) -> Role:
    """
    Adds the ECS Execution role, used by ECS to pull the image, ship the logs and retrieve the secrets
    the container needs.

    :param ResourceGraph graph:
    :param str logical_name:
    :param dict secrets: the container secrets, env var name to Secret resource or ARN
    :param troposphere.Tags tags:
    :rtype: troposphere.iam.Role
    """
    props = {
        "AssumeRolePolicyDocument": service_role_trust_policy("ecs-tasks"),
        "Description": Sub(f"Execution role for {logical_name} in ${{AWS::StackName}}"),
        "ManagedPolicyArns": [Sub(ECS_TASK_EXECUTION_POLICY)],
        "Policies": [],
    }
    if secrets:
        props["Policies"].append(
            Policy(
                PolicyName="SecretsAccess",
                PolicyDocument=define_secrets_access_policy(
                    [define_value_from(secret) for secret in secrets.values()]
                ),
            )
        )
    if tags:
        props["Tags"] = tags
    references = [(secret, USES_SECRET) for secret in secrets.values()]
    exec_role = graph.add_resource(
        Role(f"{logical_name}{EXEC_ROLE_T}", **props), references=references
    )
    LOG.debug(
        f"{logical_name} - {exec_role.title} granted access to {len(secrets)} secrets"
    )
    return exec_role


def add_task_role(graph: ResourceGraph, logical_name: str, tags: Tags = None) -> Role:
    """
    Adds the Task role, assumed by the Hasura container. It has no permissions by default.
    """
    props = {
        "AssumeRolePolicyDocument": service_role_trust_policy("ecs-tasks"),
        "Description": Sub(f"TaskRole - {logical_name} in ${{AWS::StackName}}"),
        "ManagedPolicyArns": [],
        "Policies": [],
    }
    if tags:
        props["Tags"] = tags
    return graph.add_resource(Role(f"{logical_name}{TASK_ROLE_T}", **props))
