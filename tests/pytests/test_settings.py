# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille<john@compose-x.io>

"""
Module to test the resolution of the Hasura definition into HasuraSettings.
"""

from copy import deepcopy
from os import path

import jsonschema
from pytest import fixture, raises

from hasura_composex.exceptions import IncompatibleOptions
from hasura_composex.settings import (
    HasuraOptions,
    HasuraSettings,
    RdsSettings,
    ServiceSettings,
    load_definition,
)
from hasura_composex.vpc import NetworkContext

HERE = path.abspath(path.dirname(__file__))
USE_CASES = path.abspath(f"{HERE}/../../use-cases/hasura")
CERTIFICATE_ARN = (
    "arn:aws:acm:eu-west-1:123456789012:certificate/0a1b2c3d-4e5f-6a7b-8c9d-0e1f2a3b4c5d"
)


@fixture
def minimal_content():
    return load_definition(f"{USE_CASES}/minimal.yml")


@fixture
def full_content(monkeypatch):
    monkeypatch.delenv("HASURA_ENVIRONMENT", raising=False)
    return load_definition(f"{USE_CASES}/full.yml")


def test_rds_defaults():
    rds = RdsSettings()
    assert rds.database_name == "postgres"
    assert rds.master_username == "hasura"
    assert rds.generate_password
    assert rds.password is None
    assert rds.subnets_placement == "Public"
    assert rds.instance_class == "db.t3.small"
    assert rds.allocated_storage == 100
    assert rds.port == 5432
    assert rds.properties == {}


def test_rds_credentials():
    rds = RdsSettings({"Credentials": {"Password": "{{resolve:ssm-secure:/db:1}}"}})
    assert rds.password == "{{resolve:ssm-secure:/db:1}}"
    assert not rds.generate_password
    with raises(IncompatibleOptions):
        RdsSettings(
            {
                "Credentials": {
                    "Password": "abcd",
                    "SecretArn": "arn:aws:secretsmanager:eu-west-1:123456789012:secret:db-AbCdEf",
                }
            }
        )
    with raises(IncompatibleOptions):
        RdsSettings({"Credentials": {"JsonKey": "password"}})


def test_rds_managed_properties():
    with raises(IncompatibleOptions):
        RdsSettings({"Properties": {"MasterUserPassword": "toto"}})
    rds = RdsSettings({"Properties": {"MultiAZ": True}})
    assert rds.properties == {"MultiAZ": True}


def test_service_defaults():
    service = ServiceSettings()
    assert service.cluster is None
    assert service.assign_public_ip is True
    assert service.desired_count == 1
    assert service.cpu == 256
    assert service.memory == 512
    assert service.public_load_balancer is True
    assert service.listener_port == 80
    assert service.protocol == "HTTP"
    assert service.certificates == []
    assert service.redirect_http is False
    assert service.subnets_placement == "Public"
    assert service.load_balancer_placement == "Public"


def test_service_assign_public_ip_false():
    service = ServiceSettings({"AssignPublicIp": False})
    assert service.assign_public_ip is False
    assert service.subnets_placement == "App"
    service = ServiceSettings({"AssignPublicIp": True})
    assert service.assign_public_ip is True


def test_service_desired_count_zero():
    assert ServiceSettings({"DesiredCount": 0}).desired_count == 0


def test_service_https_listener():
    service = ServiceSettings({"Certificates": [CERTIFICATE_ARN]})
    assert service.protocol == "HTTPS"
    assert service.listener_port == 443
    assert service.redirect_http is False
    service = ServiceSettings(
        {
            "Certificates": [CERTIFICATE_ARN],
            "Protocol": "HTTPS",
            "ListenerPort": 8443,
            "RedirectHttp": True,
        }
    )
    assert service.listener_port == 8443
    assert service.redirect_http is True
    assert service.to_dict()["Certificates"] == [CERTIFICATE_ARN]


def test_service_https_incompatible_options():
    with raises(IncompatibleOptions):
        ServiceSettings({"Protocol": "HTTPS"})
    with raises(IncompatibleOptions):
        ServiceSettings({"Protocol": "HTTP", "Certificates": [CERTIFICATE_ARN]})
    with raises(IncompatibleOptions):
        ServiceSettings({"RedirectHttp": True})
    with raises(IncompatibleOptions):
        ServiceSettings({"SslPolicy": "ELBSecurityPolicy-2016-08"})
    with raises(IncompatibleOptions):
        ServiceSettings(
            {"Certificates": [CERTIFICATE_ARN], "ListenerPort": 80, "RedirectHttp": True}
        )


def test_service_managed_properties():
    with raises(IncompatibleOptions):
        ServiceSettings({"Properties": {"NetworkConfiguration": {}}})


def test_hasura_options_defaults():
    options = HasuraOptions()
    assert options.image == "hasura/graphql-engine:latest"
    assert options.enable_telemetry is False
    assert options.enable_console is False
    assert options.admin_secret is None
    assert options.jwt_secret is None
    assert options.env == {}
    assert options.secrets == {}


def test_hasura_options_image():
    options = HasuraOptions({"ImageName": "public.ecr.aws/hasura/graphql-engine"})
    assert options.image == "public.ecr.aws/hasura/graphql-engine:latest"
    options = HasuraOptions({"Version": "v2.36.0"})
    assert options.image == "hasura/graphql-engine:v2.36.0"


def test_minimal_settings(minimal_content):
    settings = HasuraSettings(minimal_content)
    assert settings.name == "Hasura"
    assert settings.logical_name == "Hasura"
    assert settings.network.vpc_id == "vpc-0123456789abcdef0"
    assert settings.tags == {}


def test_full_settings(full_content):
    original = deepcopy(full_content)
    settings = HasuraSettings(full_content, name="my-hasura")
    assert full_content == original
    assert settings.logical_name == "myhasura"
    assert settings.rds.database_name == "graphql"
    assert settings.rds.master_username == "graphqladmin"
    assert settings.rds.password_json_key == "password"
    assert settings.rds.subnets_placement == "Storage"
    assert settings.service.assign_public_ip is False
    assert settings.service.cluster.endswith("cluster/shared")
    assert settings.options.enable_console is True
    assert settings.tags == {"costcentre": "graphql", "environment": "dev"}


def test_network_override(minimal_content):
    network = NetworkContext("vpc-abcdef", app_subnets=["subnet-abcd"])
    settings = HasuraSettings(minimal_content, network=network)
    assert settings.network is network
    del minimal_content["Vpc"]
    settings = HasuraSettings(minimal_content, network=network)
    assert settings.network.vpc_id == "vpc-abcdef"
    with raises(KeyError):
        HasuraSettings(minimal_content)


def test_invalid_definitions(minimal_content):
    with raises(jsonschema.exceptions.ValidationError):
        HasuraSettings({**minimal_content, "Unknown": {}})
    with raises(jsonschema.exceptions.ValidationError):
        HasuraSettings({**minimal_content, "Rds": {"SubnetsPlacement": "Private"}})
    with raises(jsonschema.exceptions.ValidationError):
        HasuraSettings({**minimal_content, "HasuraService": {"AssignPublicIp": "no"}})


def test_secrets_must_be_arns(minimal_content):
    for options in (
        {"AdminSecret": "hasura/admin"},
        {"JwtSecret": "my-jwt-secret"},
        {"Secrets": {"HASURA_GRAPHQL_UNAUTHORIZED_ROLE": "/hasura/role"}},
    ):
        with raises(jsonschema.exceptions.ValidationError):
            HasuraSettings({**minimal_content, "HasuraOptions": options})
    settings = HasuraSettings(
        {
            **minimal_content,
            "HasuraOptions": {
                "AdminSecret": "arn:aws:secretsmanager:eu-west-1:123456789012:secret:hasura/admin-AbCdEf",
                "Secrets": {
                    "HASURA_GRAPHQL_UNAUTHORIZED_ROLE": "arn:aws-cn:ssm:cn-north-1:123456789012:parameter/hasura/role"
                },
            },
        }
    )
    assert settings.options.admin_secret.endswith("hasura/admin-AbCdEf")


def test_to_dict_roundtrip(full_content):
    settings = HasuraSettings(full_content)
    resolved = settings.to_dict()
    assert resolved["HasuraService"]["AssignPublicIp"] is False
    assert resolved["Rds"]["InstanceClass"] == "db.t3.medium"
    assert HasuraSettings(resolved).to_dict() == resolved


def test_load_definition_not_a_mapping(tmp_path):
    not_a_mapping = tmp_path / "list.yml"
    not_a_mapping.write_text("- a\n- b\n")
    with raises(TypeError):
        load_definition(str(not_a_mapping))


def test_to_dict_masks_password():
    rds = RdsSettings({"Credentials": {"Password": "s3cr3t"}})
    assert rds.to_dict()["Credentials"]["Password"] == "s3cr3t"
    assert rds.to_dict(mask_password=True)["Credentials"]["Password"] == "****"
    assert "Credentials" not in RdsSettings().to_dict(mask_password=True)


def test_certificates_must_be_acm_arns(minimal_content):
    with raises(jsonschema.exceptions.ValidationError):
        HasuraSettings(
            {**minimal_content, "HasuraService": {"Certificates": ["my-certificate"]}}
        )
    with raises(jsonschema.exceptions.ValidationError):
        HasuraSettings({**minimal_content, "HasuraService": {"Protocol": "TCP"}})
