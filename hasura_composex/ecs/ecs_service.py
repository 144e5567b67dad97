# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
The Hasura ECS Fargate Service and its security group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hasura_composex.graph import ResourceGraph
    from hasura_composex.settings import ServiceSettings
    from hasura_composex.vpc import NetworkContext

from troposphere import GetAtt, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup, SecurityGroupIngress
from troposphere.ecs import AwsvpcConfiguration, Cluster
from troposphere.ecs import LoadBalancer as EcsLoadBalancer
from troposphere.ecs import NetworkConfiguration, Service, TaskDefinition
from troposphere.elasticloadbalancingv2 import Listener, TargetGroup

from hasura_composex.common.logging import LOG
from hasura_composex.ecs.ecs_params import (
    CONTAINER_NAME,
    CONTAINER_PORT,
    SERVICE_SG_INGRESS_T,
    SERVICE_SG_T,
    SERVICE_T,
)
from hasura_composex.graph import (
    ALLOWS_FROM,
    ALLOWS_TO,
    PROTECTED_BY,
    ROUTES_TO,
    RUNS_IN,
    RUNS_TASK,
)
from hasura_composex.resources_import import import_record_properties


def add_service_sg(
    graph: ResourceGraph, network: NetworkContext, logical_name: str, tags: Tags = None
) -> SecurityGroup:
    props = {
        "GroupDescription": Sub(f"${{AWS::StackName}} {logical_name} service"),
        "VpcId": network.vpc_ref(graph),
    }
    if tags:
        props["Tags"] = tags
    return graph.add_resource(SecurityGroup(f"{logical_name}{SERVICE_SG_T}", **props))


def allow_load_balancer_ingress(
    graph: ResourceGraph,
    service_sg: SecurityGroup,
    lb_sg: SecurityGroup,
    logical_name: str,
) -> SecurityGroupIngress:
    """
    Allows the load balancer to reach the Hasura containers on the container port
    """
    return graph.add_resource(
        SecurityGroupIngress(
            f"{logical_name}{SERVICE_SG_INGRESS_T}",
            GroupId=GetAtt(service_sg, "GroupId"),
            SourceSecurityGroupId=GetAtt(lb_sg, "GroupId"),
            IpProtocol="tcp",
            FromPort=CONTAINER_PORT,
            ToPort=CONTAINER_PORT,
            Description=Sub(
                f"From {lb_sg.title} to {service_sg.title} in ${{AWS::StackName}}"
            ),
        ),
        references=[(lb_sg, ALLOWS_FROM), (service_sg, ALLOWS_TO)],
    )


def define_network_configuration(
    graph: ResourceGraph,
    network: NetworkContext,
    service: ServiceSettings,
    service_sg: SecurityGroup,
) -> NetworkConfiguration:
    """
    Defines the awsvpc network configuration of the service.
    AssignPublicIp is ENABLED when the setting is True (default), DISABLED when explicitly set to False.
    """
    return NetworkConfiguration(
        AwsvpcConfiguration=AwsvpcConfiguration(
            AssignPublicIp="ENABLED" if service.assign_public_ip else "DISABLED",
            SecurityGroups=[GetAtt(service_sg, "GroupId")],
            Subnets=network.subnets_ref(graph, service.subnets_placement),
        )
    )


def add_service(
    graph: ResourceGraph,
    network: NetworkContext,
    service: ServiceSettings,
    logical_name: str,
    cluster,
    task_definition: TaskDefinition,
    service_sg: SecurityGroup,
    target_group: TargetGroup,
    listener: Listener,
    cluster_resource: Cluster = None,
    tags: Tags = None,
) -> Service:
    """
    Adds the ECS Service, registered into the load balancer target group.
    The user Properties are set first, then the settings managed here.

    :param ResourceGraph graph:
    :param NetworkContext network:
    :param ServiceSettings service:
    :param str logical_name:
    :param cluster: Ref() to the new cluster, or the existing cluster name/ARN
    :param task_definition:
    :param service_sg:
    :param target_group:
    :param listener: the service must be created after the listener, which associates the target group
    :param cluster_resource: the new ECS Cluster, None when using an existing one
    :param troposphere.Tags tags:
    :rtype: troposphere.ecs.Service
    """
    props = {
        "PropagateTags": "SERVICE",
        "EnableECSManagedTags": True,
        "HealthCheckGracePeriodSeconds": 60,
    }
    props.update(import_record_properties(service.properties, Service))
    props.update(
        {
            "Cluster": cluster,
            "TaskDefinition": Ref(task_definition),
            "LaunchType": "FARGATE",
            "DesiredCount": service.desired_count,
            "NetworkConfiguration": define_network_configuration(
                graph, network, service, service_sg
            ),
            "LoadBalancers": [
                EcsLoadBalancer(
                    ContainerName=CONTAINER_NAME,
                    ContainerPort=CONTAINER_PORT,
                    TargetGroupArn=Ref(target_group),
                )
            ],
        }
    )
    if tags:
        props["Tags"] = tags
    references = [
        (task_definition, RUNS_TASK),
        (service_sg, PROTECTED_BY),
        (target_group, ROUTES_TO),
    ]
    references.append(
        (cluster_resource if cluster_resource is not None else cluster, RUNS_IN)
    )
    ecs_service = graph.add_resource(
        Service(f"{logical_name}{SERVICE_T}", DependsOn=[listener.title], **props),
        references=references,
    )
    LOG.info(
        f"{logical_name} - ECS Service {ecs_service.title} declared."
        f" AssignPublicIp: {service.assign_public_ip}, DesiredCount: {service.desired_count}"
    )
    return ecs_service
