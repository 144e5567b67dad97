# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Application Load Balancer in front of the Hasura service: security group, load balancer,
target group and listeners.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hasura_composex.graph import ResourceGraph
    from hasura_composex.settings import ServiceSettings
    from hasura_composex.vpc import NetworkContext

from troposphere import GetAtt, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup, SecurityGroupRule
from troposphere.elasticloadbalancingv2 import (
    Action,
    Certificate,
    Listener,
    LoadBalancer,
    Matcher,
    RedirectConfig,
    TargetGroup,
)

from hasura_composex.common.logging import LOG
from hasura_composex.ecs.ecs_params import CONTAINER_PORT
from hasura_composex.elbv2.elbv2_params import (
    HTTP_PROTOCOL,
    HTTPS_PROTOCOL,
    LB_SG_T,
    LB_T,
    LISTENER_T,
    REDIRECT_LISTENER_PORT,
    REDIRECT_LISTENER_T,
    TARGET_GROUP_T,
)
from hasura_composex.graph import PROTECTED_BY, ROUTES_TO, SERVES


def add_lb_sg(
    graph: ResourceGraph,
    network: NetworkContext,
    service: ServiceSettings,
    logical_name: str,
    tags: Tags = None,
) -> SecurityGroup:
    """
    Security group of the load balancer, open to all on the listener port, and on the HTTP port
    when redirecting to HTTPS
    """
    ports = [service.listener_port]
    if service.redirect_http:
        ports.append(REDIRECT_LISTENER_PORT)
    props = {
        "GroupDescription": Sub(
            f"${{AWS::StackName}} {logical_name} load balancer"
        ),
        "VpcId": network.vpc_ref(graph),
        "SecurityGroupIngress": [
            SecurityGroupRule(
                IpProtocol="tcp",
                FromPort=port,
                ToPort=port,
                CidrIp="0.0.0.0/0",
                Description=f"Allow all to {port}",
            )
            for port in ports
        ],
    }
    if tags:
        props["Tags"] = tags
    return graph.add_resource(SecurityGroup(f"{logical_name}{LB_SG_T}", **props))


def add_load_balancer(
    graph: ResourceGraph,
    network: NetworkContext,
    service: ServiceSettings,
    logical_name: str,
    lb_sg: SecurityGroup,
    tags: Tags = None,
) -> LoadBalancer:
    """
    Adds the Application Load Balancer. Internet facing in the public subnets when the load balancer
    is public, internal in the application subnets otherwise.
    """
    placement = service.load_balancer_placement
    props = {
        "Type": "application",
        "Scheme": "internet-facing" if service.public_load_balancer else "internal",
        "Subnets": network.subnets_ref(graph, placement),
        "SecurityGroups": [GetAtt(lb_sg, "GroupId")],
    }
    if tags:
        props["Tags"] = tags
    load_balancer = graph.add_resource(
        LoadBalancer(f"{logical_name}{LB_T}", **props),
        references=[(lb_sg, PROTECTED_BY)],
    )
    LOG.info(
        f"{logical_name} - {props['Scheme']} load balancer {load_balancer.title} in {placement} subnets"
    )
    return load_balancer


def add_target_group(
    graph: ResourceGraph, network: NetworkContext, logical_name: str, tags: Tags = None
) -> TargetGroup:
    """
    Adds the Target Group the ECS Service registers the Hasura tasks IP addresses into
    """
    props = {
        "TargetType": "ip",
        "Protocol": "HTTP",
        "Port": CONTAINER_PORT,
        "VpcId": network.vpc_ref(graph),
        "HealthCheckEnabled": True,
        "HealthCheckProtocol": "HTTP",
        "Matcher": Matcher(HttpCode="200"),
    }
    if tags:
        props["Tags"] = tags
    return graph.add_resource(TargetGroup(f"{logical_name}{TARGET_GROUP_T}", **props))


def add_listener(
    graph: ResourceGraph,
    service: ServiceSettings,
    logical_name: str,
    load_balancer: LoadBalancer,
    target_group: TargetGroup,
) -> Listener:
    """
    Adds the listener forwarding all traffic to the target group, with the ACM certificates
    when using HTTPS
    """
    props = {
        "LoadBalancerArn": Ref(load_balancer),
        "Port": service.listener_port,
        "Protocol": service.protocol,
        "DefaultActions": [Action(Type="forward", TargetGroupArn=Ref(target_group))],
    }
    if service.protocol == HTTPS_PROTOCOL:
        props["Certificates"] = [
            Certificate(CertificateArn=certificate_arn)
            for certificate_arn in service.certificates
        ]
        if service.ssl_policy:
            props["SslPolicy"] = service.ssl_policy
    listener = graph.add_resource(
        Listener(f"{logical_name}{LISTENER_T}", **props),
        references=[(load_balancer, SERVES), (target_group, ROUTES_TO)],
    )
    LOG.info(
        f"{logical_name} - {service.protocol} listener {listener.title} on port {service.listener_port}"
    )
    return listener


def add_redirect_listener(
    graph: ResourceGraph,
    service: ServiceSettings,
    logical_name: str,
    load_balancer: LoadBalancer,
) -> Listener:
    """
    Adds the HTTP listener on port 80 that redirects all requests to the HTTPS listener
    """
    return graph.add_resource(
        Listener(
            f"{logical_name}{REDIRECT_LISTENER_T}",
            LoadBalancerArn=Ref(load_balancer),
            Port=REDIRECT_LISTENER_PORT,
            Protocol=HTTP_PROTOCOL,
            DefaultActions=[
                Action(
                    Type="redirect",
                    RedirectConfig=RedirectConfig(
                        Protocol=HTTPS_PROTOCOL,
                        Port=str(service.listener_port),
                        Host="#{host}",
                        Path="/#{path}",
                        Query="#{query}",
                        StatusCode="HTTP_301",
                    ),
                )
            ],
        ),
        references=[(load_balancer, SERVES)],
    )


def configure_health_check(target_group: TargetGroup, path: str) -> None:
    """
    Sets the health check path of the target group

    :param troposphere.elasticloadbalancingv2.TargetGroup target_group:
    :param str path:
    """
    target_group.HealthCheckPath = path
    LOG.debug(f"{target_group.title} - Health check path set to {path}")


def define_load_balancing(
    graph: ResourceGraph,
    network: NetworkContext,
    service: ServiceSettings,
    logical_name: str,
    tags: Tags = None,
) -> tuple:
    """
    Declares the load balancer resources.

    :return: the load balancer security group, load balancer, target group and listener
    :rtype: tuple
    """
    lb_sg = add_lb_sg(graph, network, service, logical_name, tags)
    load_balancer = add_load_balancer(graph, network, service, logical_name, lb_sg, tags)
    target_group = add_target_group(graph, network, logical_name, tags)
    listener = add_listener(graph, service, logical_name, load_balancer, target_group)
    return lb_sg, load_balancer, target_group, listener
