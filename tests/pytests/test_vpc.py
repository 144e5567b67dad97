# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille<john@compose-x.io>

from pytest import raises

from hasura_composex.graph import ResourceGraph
from hasura_composex.vpc import NetworkContext


def test_network_context_from_definition():
    network = NetworkContext.from_definition(
        {"VpcId": "vpc-abcd", "StorageSubnets": ["subnet-a", "subnet-b"]}
    )
    assert network.subnets["StorageSubnets"] == ["subnet-a", "subnet-b"]
    assert network.subnets["PublicSubnets"] == []
    assert network.to_dict() == {
        "VpcId": "vpc-abcd",
        "StorageSubnets": ["subnet-a", "subnet-b"],
    }
    with raises(KeyError):
        NetworkContext.from_definition({"PublicSubnets": ["subnet-a"]})
    with raises(ValueError):
        NetworkContext(None)


def test_network_parameters():
    graph = ResourceGraph()
    network = NetworkContext("vpc-abcd", storage_subnets=["subnet-a", "subnet-b"])
    assert network.vpc_ref(graph).to_dict() == {"Ref": "VpcId"}
    assert network.subnets_ref(graph, "Storage").to_dict() == {"Ref": "StorageSubnets"}
    network.subnets_parameter(graph, "Storage")
    parameters = graph.to_dict()["Parameters"]
    assert list(parameters) == ["VpcId", "StorageSubnets"]
    assert parameters["VpcId"] == {"Type": "AWS::EC2::VPC::Id", "Default": "vpc-abcd"}
    assert parameters["StorageSubnets"]["Default"] == "subnet-a,subnet-b"
    with raises(ValueError):
        network.subnets_parameter(graph, "Private")
