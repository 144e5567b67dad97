# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille<john@compose-x.io>

from pytest import fixture, raises
from troposphere import Output, Ref
from troposphere.ec2 import SecurityGroup
from troposphere.secretsmanager import Secret

from hasura_composex.common.cfn_params import Parameter
from hasura_composex.graph import (
    ALLOWS_FROM,
    USES_SECRET,
    ResourceEdge,
    ResourceGraph,
    node_name,
)


@fixture
def graph():
    return ResourceGraph("Test graph")


def test_add_resource_and_edges(graph):
    secret = graph.add_resource(Secret("Secret"))
    sg = graph.add_resource(
        SecurityGroup("Sg", GroupDescription="test"),
        references=[(secret, USES_SECRET), ("arn:aws:iam::aws:policy/test", ALLOWS_FROM)],
    )
    assert list(graph.resources) == ["Secret", "Sg"]
    assert graph.dependencies(sg) == ["Secret", "arn:aws:iam::aws:policy/test"]
    assert graph.dependencies(sg, USES_SECRET) == ["Secret"]
    assert graph.dependents(secret) == ["Sg"]
    assert graph.external_references() == ["arn:aws:iam::aws:policy/test"]


def test_duplicate_edges_are_ignored(graph):
    secret = graph.add_resource(Secret("Secret"))
    sg = graph.add_resource(SecurityGroup("Sg", GroupDescription="test"))
    graph.add_edge(sg, secret, USES_SECRET)
    graph.add_edge(sg, secret, USES_SECRET)
    assert graph.edges == [ResourceEdge("Sg", "Secret", USES_SECRET)]


def test_undeclared_nodes(graph):
    secret = Secret("Secret")
    sg = graph.add_resource(SecurityGroup("Sg", GroupDescription="test"))
    with raises(KeyError):
        graph.add_edge(sg, secret, USES_SECRET)
    with raises(KeyError):
        graph.add_edge(secret, sg, USES_SECRET)
    with raises(TypeError):
        node_name(Ref("Sg"))


def test_duplicate_resource(graph):
    graph.add_resource(Secret("Secret"))
    with raises(ValueError):
        graph.add_resource(Secret("Secret"))


def test_parameters_and_outputs(graph):
    parameter = Parameter("VpcId", group_label="VPC Settings", Type="AWS::EC2::VPC::Id")
    graph.add_parameters([parameter, parameter])
    assert list(graph.parameters) == ["VpcId"]
    secret = graph.add_resource(Secret("Secret"))
    graph.add_outputs([Output("SecretArn", Value=Ref(secret))])
    graph.add_outputs([Output("SecretArn", Value=Ref(secret))])
    template = graph.to_dict()
    assert template["Outputs"] == {"SecretArn": {"Value": {"Ref": "Secret"}}}
    groups = template["Metadata"]["AWS::CloudFormation::Interface"]["ParameterGroups"]
    assert groups == [{"Label": {"default": "VPC Settings"}, "Parameters": ["VpcId"]}]
    assert template["Description"] == "Test graph"
