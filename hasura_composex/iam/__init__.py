# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
IAM helpers for the ECS task roles
"""

import re

from troposphere import AWSHelperFn, Sub

from hasura_composex.secrets.secrets_params import (
    SECRETSMANAGER_ARN_RE,
    SSM_PARAMETER_ARN_RE,
)

SECRET_ARN = re.compile(SECRETSMANAGER_ARN_RE)
SSM_PARAMETER_ARN = re.compile(SSM_PARAMETER_ARN_RE)

ECS_TASK_EXECUTION_POLICY = (
    "arn:${AWS::Partition}:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"
)


def service_role_trust_policy(service_name: str) -> dict:
    """
    Simple function to format the trust relationship for a Role and an AWS Service
    used from lambda-my-aws/ozone

    :param str service_name: name of the ecs_service
    :return: policy document
    :rtype: dict
    """
    statement = {
        "Effect": "Allow",
        "Principal": {"Service": [Sub(f"{service_name}.${{AWS::URLSuffix}}")]},
        "Action": ["sts:AssumeRole"],
        "Condition": {"Bool": {"aws:SecureTransport": "true"}},
    }
    policy_doc = {"Version": "2012-10-17", "Statement": [statement]}
    return policy_doc


def sort_secrets_arns(values_from: list) -> tuple:
    """
    Splits the container secrets ValueFrom into the Secrets Manager and SSM Parameter ARNs the
    execution role must have access to. The JSON key, version stage and version ID suffix of a
    secret ARN is removed.

    :param list values_from: the ValueFrom of the container secrets
    :return: secrets ARNs and SSM parameters ARNs
    :rtype: tuple[list, list]
    """
    secrets_arns = []
    parameters_arns = []
    for value_from in values_from:
        if isinstance(value_from, AWSHelperFn):
            if value_from not in secrets_arns:
                secrets_arns.append(value_from)
            continue
        secret_parts = SECRET_ARN.match(value_from)
        if secret_parts:
            arn = secret_parts.group("arn")
            if arn not in secrets_arns:
                secrets_arns.append(arn)
        elif SSM_PARAMETER_ARN.match(value_from):
            if value_from not in parameters_arns:
                parameters_arns.append(value_from)
        else:
            raise ValueError(
                f"Secret {value_from} is neither a Secrets Manager secret nor a SSM Parameter ARN. Must match one of",
                [SECRET_ARN.pattern, SSM_PARAMETER_ARN.pattern],
            )
    return secrets_arns, parameters_arns


def define_secrets_access_policy(values_from: list) -> dict:
    """
    Returns the policy document allowing the ECS Execution role to retrieve the container secrets

    :param list values_from: the ValueFrom of the container secrets
    :rtype: dict
    """
    secrets_arns, parameters_arns = sort_secrets_arns(values_from)
    statement = []
    if secrets_arns:
        statement.append(
            {
                "Sid": "SecretsManagerAccess",
                "Effect": "Allow",
                "Action": ["secretsmanager:GetSecretValue"],
                "Resource": secrets_arns,
            }
        )
    if parameters_arns:
        statement.append(
            {
                "Sid": "SsmParametersAccess",
                "Effect": "Allow",
                "Action": ["ssm:GetParameters"],
                "Resource": parameters_arns,
            }
        )
    return {"Version": "2012-10-17", "Statement": statement}
