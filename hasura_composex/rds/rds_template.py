# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
RDS PostgreSQL instance declaration: password, security group, subnet group, instance
and the ingress rule allowing the Hasura service in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hasura_composex.graph import ResourceGraph
    from hasura_composex.settings import RdsSettings
    from hasura_composex.vpc import NetworkContext

from troposphere import GetAtt, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup, SecurityGroupIngress
from troposphere.rds import DBInstance, DBSubnetGroup
from troposphere.secretsmanager import Secret

from hasura_composex.common.logging import LOG
from hasura_composex.graph import (
    ALLOWS_FROM,
    ALLOWS_TO,
    PLACED_IN,
    PROTECTED_BY,
    USES_SECRET,
)
from hasura_composex.rds.rds_params import (
    DB_ENDPOINT_PORT,
    DB_ENGINE,
    DB_INGRESS_T,
    DB_INSTANCE_T,
    DB_SG_T,
    DB_SUBNET_GROUP_T,
)
from hasura_composex.resources_import import import_record_properties
from hasura_composex.secrets import add_generated_secret, secret_dynamic_reference
from hasura_composex.secrets.secrets_params import PASSWORD_SECRET_T
from hasura_composex.vpc.vpc_params import PUBLIC_PLACEMENT


def define_master_password(
    graph: ResourceGraph, rds: RdsSettings, logical_name: str, tags: Tags = None
) -> tuple:
    """
    Resolves the master password of the DB instance.
    The user password is used verbatim, the user SecretArn is resolved via dynamic reference.
    Otherwise, a new secret is generated.

    :return: the password value and the generated secret, None if not generated
    :rtype: tuple
    """
    if rds.password:
        LOG.info(f"{logical_name} - Using the password set in Rds.Credentials")
        return rds.password, None
    elif rds.password_secret_arn:
        LOG.info(
            f"{logical_name} - Using the password from secret {rds.password_secret_arn}"
        )
        return (
            secret_dynamic_reference(rds.password_secret_arn, rds.password_json_key),
            None,
        )
    secret = add_generated_secret(
        graph,
        f"{logical_name}{PASSWORD_SECRET_T}",
        Sub(f"${{AWS::StackName}} {logical_name} database master password"),
        tags=tags,
    )
    return secret_dynamic_reference(secret), secret


def add_db_sg(
    graph: ResourceGraph, network: NetworkContext, logical_name: str, tags: Tags = None
) -> SecurityGroup:
    """
    Function to add a Security group for the database. It has no ingress, which gets added
    with allow_from.
    """
    props = {
        "GroupDescription": Sub(f"${{AWS::StackName}} {logical_name} database"),
        "VpcId": network.vpc_ref(graph),
    }
    if tags:
        props["Tags"] = tags
    return graph.add_resource(SecurityGroup(f"{logical_name}{DB_SG_T}", **props))


def create_db_subnet_group(
    graph: ResourceGraph,
    network: NetworkContext,
    placement: str,
    logical_name: str,
    tags: Tags = None,
) -> DBSubnetGroup:
    """
    Create the DB Subnet Group in the subnets matching the placement
    """
    if placement == PUBLIC_PLACEMENT:
        LOG.warning(
            f"{logical_name} - The database is placed in {placement} subnets."
            " Set Rds.SubnetsPlacement to App or Storage to keep it private."
        )
    props = {
        "DBSubnetGroupDescription": Sub(
            f"DB Subnet group for {logical_name} in ${{AWS::StackName}}"
        ),
        "SubnetIds": network.subnets_ref(graph, placement),
    }
    if tags:
        props["Tags"] = tags
    return graph.add_resource(
        DBSubnetGroup(f"{logical_name}{DB_SUBNET_GROUP_T}", **props)
    )


def add_db_instance(
    graph: ResourceGraph,
    rds: RdsSettings,
    logical_name: str,
    password,
    db_sg: SecurityGroup,
    subnet_group: DBSubnetGroup,
    password_secret: Secret = None,
    tags: Tags = None,
) -> DBInstance:
    """
    Declares the PostgreSQL DB Instance.
    The user Properties are set first, then the resolved settings, which cannot be overridden.
    """
    props = {"Engine": DB_ENGINE}
    props.update(import_record_properties(rds.properties, DBInstance))
    if rds.subnets_placement == PUBLIC_PLACEMENT and "PubliclyAccessible" not in props:
        props["PubliclyAccessible"] = True
    props.update(
        {
            "DBName": rds.database_name,
            "MasterUsername": rds.master_username,
            "MasterUserPassword": password,
            "DBInstanceClass": rds.instance_class,
            "AllocatedStorage": str(rds.allocated_storage),
            "Port": str(rds.port),
            "DBSubnetGroupName": Ref(subnet_group),
            "VPCSecurityGroups": [GetAtt(db_sg, "GroupId")],
        }
    )
    if rds.engine_version:
        props["EngineVersion"] = rds.engine_version
    if tags:
        props["Tags"] = tags
    references = [(db_sg, PROTECTED_BY), (subnet_group, PLACED_IN)]
    if password_secret is not None:
        references.append((password_secret, USES_SECRET))
    db_instance = graph.add_resource(
        DBInstance(
            f"{logical_name}{DB_INSTANCE_T}",
            DeletionPolicy="Snapshot",
            UpdateReplacePolicy="Snapshot",
            **props,
        ),
        references=references,
    )
    LOG.info(
        f"{logical_name} - RDS {DB_ENGINE} instance {db_instance.title} ({rds.instance_class}) declared"
    )
    return db_instance


def allow_from(
    graph: ResourceGraph,
    db_instance: DBInstance,
    db_sg: SecurityGroup,
    source_sg: SecurityGroup,
    logical_name: str,
) -> SecurityGroupIngress:
    """
    Allows the source security group to connect to the DB instance on its endpoint port.
    """
    port = GetAtt(db_instance, DB_ENDPOINT_PORT)
    ingress = graph.add_resource(
        SecurityGroupIngress(
            f"{logical_name}{DB_INGRESS_T}",
            GroupId=GetAtt(db_sg, "GroupId"),
            SourceSecurityGroupId=GetAtt(source_sg, "GroupId"),
            IpProtocol="tcp",
            FromPort=port,
            ToPort=port,
            Description=Sub(
                f"From {source_sg.title} to {db_instance.title} in ${{AWS::StackName}}"
            ),
        ),
        references=[
            (source_sg, ALLOWS_FROM),
            (db_sg, ALLOWS_TO),
            (db_instance, ALLOWS_TO),
        ],
    )
    LOG.info(
        f"{logical_name} - Allowed {source_sg.title} to access {db_instance.title}"
    )
    return ingress
