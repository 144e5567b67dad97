#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
The resource graph built by the composer.

It wraps a troposphere Template, which holds the declared resources, and keeps track of the reference
edges between them (i.e. the ECS Service uses the connection secret). Nothing gets deployed from here,
the rendered template is handed over to AWS CloudFormation.
"""

from __future__ import annotations

from troposphere import AWSObject, Output, Template

from hasura_composex.common.logging import LOG
from hasura_composex.common.troposphere_tools import (
    add_outputs,
    add_parameters,
    add_resource,
    build_template,
)

USES_SECRET = "uses-secret"
RUNS_IN = "runs-in"
RUNS_TASK = "runs-task"
SERVES = "serves"
ROUTES_TO = "routes-to"
ALLOWS_FROM = "allows-from"
ALLOWS_TO = "allows-to"
RESOLVES = "resolves"
ASSUMES = "assumes"
LOGS_TO = "logs-to"
PROTECTED_BY = "protected-by"
PLACED_IN = "placed-in"


def node_name(node) -> str:
    """
    Returns the identifier of a node of the graph: the title for declared resources,
    the value itself for external references (i.e. an existing secret ARN).
    """
    if isinstance(node, AWSObject):
        return node.title
    elif isinstance(node, str):
        return node
    raise TypeError("Graph nodes must be", AWSObject, str, "got", type(node))


class ResourceEdge:
    """
    A reference from one declared resource to another resource, declared or external.
    """

    def __init__(self, source: str, target: str, relation: str):
        self.source = source
        self.target = target
        self.relation = relation

    def __repr__(self):
        return f"{self.source} --[{self.relation}]--> {self.target}"

    def __eq__(self, other):
        if not isinstance(other, ResourceEdge):
            return NotImplemented
        return (self.source, self.target, self.relation) == (
            other.source,
            other.target,
            other.relation,
        )

    def __hash__(self):
        return hash((self.source, self.target, self.relation))


class ResourceGraph:
    """
    Accumulates the declared resources and the edges between them.

    :ivar troposphere.Template template: the template holding parameters, resources and outputs
    :ivar list[ResourceEdge] edges: the references between resources, in declaration order
    """

    def __init__(self, description: str = None, parameters: list = None):
        self.template = build_template(description, parameters)
        self.edges = []

    def __repr__(self):
        return f"ResourceGraph({len(self.resources)} resources, {len(self.edges)} edges)"

    @property
    def resources(self) -> dict:
        return self.template.resources

    @property
    def parameters(self) -> dict:
        return self.template.parameters

    @property
    def outputs(self) -> dict:
        return self.template.outputs

    def add_parameters(self, parameters: list) -> None:
        add_parameters(self.template, parameters)

    def add_resource(self, resource: AWSObject, references: list = None) -> AWSObject:
        """
        Declares the resource and the edges to what it references.

        :param resource: the resource to declare
        :param list[tuple] references: list of (target, relation)
        :return: the resource
        """
        add_resource(self.template, resource)
        LOG.debug(f"Declared {resource.resource_type} {resource.title}")
        if references:
            for target, relation in references:
                self.add_edge(resource, target, relation)
        return resource

    def add_edge(self, source, target, relation: str) -> ResourceEdge:
        source_name = node_name(source)
        if source_name not in self.resources:
            raise KeyError(
                f"Source {source_name} of the {relation} edge is not declared in the graph"
            )
        if isinstance(target, AWSObject) and target.title not in self.resources:
            raise KeyError(
                f"Target {target.title} of the {relation} edge is not declared in the graph"
            )
        edge = ResourceEdge(source_name, node_name(target), relation)
        if edge not in self.edges:
            self.edges.append(edge)
        return edge

    def add_outputs(self, outputs: list[Output]) -> None:
        add_outputs(self.template, outputs)

    def dependencies(self, node, relation: str = None) -> list:
        """
        Returns the names of the nodes the given node references.
        """
        name = node_name(node)
        return [
            edge.target
            for edge in self.edges
            if edge.source == name and (relation is None or edge.relation == relation)
        ]

    def dependents(self, node, relation: str = None) -> list:
        """
        Returns the names of the resources referencing the given node.
        """
        name = node_name(node)
        return [
            edge.source
            for edge in self.edges
            if edge.target == name and (relation is None or edge.relation == relation)
        ]

    def external_references(self) -> list:
        """
        Returns the targets of edges that are not declared in the graph, i.e. existing secrets.
        """
        return sorted(
            {edge.target for edge in self.edges if edge.target not in self.resources}
        )

    def to_dict(self) -> dict:
        return self.template.to_dict()

    def to_json(self) -> str:
        return self.template.to_json()

    def to_yaml(self) -> str:
        return self.template.to_yaml()
