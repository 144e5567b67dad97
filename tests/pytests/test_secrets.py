# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille<john@compose-x.io>

from pytest import raises
from troposphere import Ref
from troposphere.rds import DBInstance
from troposphere.secretsmanager import Secret

from hasura_composex.graph import ResourceGraph
from hasura_composex.iam import define_secrets_access_policy, sort_secrets_arns
from hasura_composex.secrets import (
    add_connection_secret,
    secret_dynamic_reference,
)

SECRET_ARN = "arn:aws:secretsmanager:eu-west-1:123456789012:secret:hasura/db-AbCdEf"
PARAMETER_ARN = "arn:aws:ssm:eu-west-1:123456789012:parameter/hasura/role"


def test_dynamic_reference_to_new_secret():
    assert secret_dynamic_reference(Secret("Password")).to_dict() == {
        "Fn::Sub": "{{resolve:secretsmanager:${Password}}}"
    }
    assert secret_dynamic_reference(Secret("Password"), "password").to_dict() == {
        "Fn::Sub": "{{resolve:secretsmanager:${Password}:SecretString:password::}}"
    }


def test_dynamic_reference_to_existing_secret():
    assert (
        secret_dynamic_reference(SECRET_ARN)
        == f"{{{{resolve:secretsmanager:{SECRET_ARN}}}}}"
    )
    assert (
        secret_dynamic_reference(SECRET_ARN, "password")
        == f"{{{{resolve:secretsmanager:{SECRET_ARN}:SecretString:password::}}}}"
    )
    with raises(ValueError):
        secret_dynamic_reference("arn:aws:s3:::not-a-secret")
    with raises(TypeError):
        secret_dynamic_reference(42)


def test_connection_secret_requires_db_instance():
    graph = ResourceGraph()
    db = DBInstance("Db", Engine="postgres")
    with raises(KeyError):
        add_connection_secret(graph, "Connection", "hasura", "password", db, "postgres")


def test_sort_secrets_arns():
    secrets_arns, parameters_arns = sort_secrets_arns(
        [
            Ref("Connection"),
            f"{SECRET_ARN}:password::",
            SECRET_ARN,
            PARAMETER_ARN,
        ]
    )
    assert secrets_arns == [Ref("Connection"), SECRET_ARN]
    assert parameters_arns == [PARAMETER_ARN]
    with raises(ValueError):
        sort_secrets_arns(["not-an-arn"])


def test_secrets_access_policy():
    policy = define_secrets_access_policy([PARAMETER_ARN])
    assert policy["Statement"] == [
        {
            "Sid": "SsmParametersAccess",
            "Effect": "Allow",
            "Action": ["ssm:GetParameters"],
            "Resource": [PARAMETER_ARN],
        }
    ]
