# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille<john@compose-x.io>

from pytest import raises
from troposphere import Sub
from troposphere.ecs import DeploymentConfiguration, Service
from troposphere.rds import DBInstance

from hasura_composex.resources_import import import_record_properties


def test_import_flat_properties():
    props = import_record_properties(
        {
            "MultiAZ": True,
            "BackupRetentionPeriod": 7,
            "StorageType": "gp3",
            "PreferredBackupWindow": Sub("01:00-02:00"),
        },
        DBInstance,
    )
    assert props["MultiAZ"] is True
    assert props["BackupRetentionPeriod"] == 7
    assert props["StorageType"] == "gp3"
    assert isinstance(props["PreferredBackupWindow"], Sub)


def test_import_nested_properties():
    props = import_record_properties(
        {
            "DeploymentConfiguration": {
                "MinimumHealthyPercent": 100,
                "MaximumPercent": 200,
            },
            "EnableExecuteCommand": True,
        },
        Service,
    )
    assert isinstance(props["DeploymentConfiguration"], DeploymentConfiguration)
    assert props["DeploymentConfiguration"].MaximumPercent == 200


def test_import_unknown_properties():
    with raises(KeyError):
        import_record_properties({"NotAProperty": True}, DBInstance)
