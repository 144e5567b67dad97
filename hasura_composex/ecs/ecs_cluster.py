# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resolves the ECS Cluster the Hasura service runs into: an existing one, or a new one.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hasura_composex.graph import ResourceGraph

from troposphere import Ref, Tags
from troposphere.ecs import Cluster, ClusterSetting

from hasura_composex.common.logging import LOG
from hasura_composex.ecs.ecs_params import CLUSTER_T

CLUSTER_ARN_RE = re.compile(
    r"^arn:aws(?:-[a-z]+)*:ecs:[\w-]+:\d{12}:cluster/(?P<name>[a-zA-Z0-9_-]+)$"
)


def get_cluster_name(cluster_identifier: str) -> str:
    """
    Returns the cluster name from its name or ARN

    :param str cluster_identifier:
    :rtype: str
    """
    parts = CLUSTER_ARN_RE.match(cluster_identifier)
    if parts:
        return parts.group("name")
    return cluster_identifier


def define_cluster(
    graph: ResourceGraph, cluster_identifier: str, logical_name: str, tags: Tags = None
) -> tuple:
    """
    When the cluster identifier is set, uses the existing cluster. Otherwise, declares a new ECS Cluster.

    :param ResourceGraph graph:
    :param str cluster_identifier: name or ARN of an existing cluster, or None
    :param str logical_name:
    :param troposphere.Tags tags:
    :return: the value to use for the ECS Service Cluster property, and the new Cluster if created
    :rtype: tuple
    """
    if cluster_identifier:
        LOG.info(
            f"{logical_name} - Using existing ECS Cluster {get_cluster_name(cluster_identifier)}"
        )
        return cluster_identifier, None
    props = {
        "ClusterSettings": [ClusterSetting(Name="containerInsights", Value="enabled")]
    }
    if tags:
        props["Tags"] = tags
    cluster = graph.add_resource(Cluster(f"{logical_name}{CLUSTER_T}", **props))
    LOG.info(f"{logical_name} - New ECS Cluster {cluster.title} declared")
    return Ref(cluster), cluster
