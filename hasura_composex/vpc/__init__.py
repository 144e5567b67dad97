# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
The network context the Hasura resources are deployed into.

The VPC and subnets are never created here: they are template parameters, which default to the values
given in the definition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hasura_composex.graph import ResourceGraph

from compose_x_common.compose_x_common import keyisset, set_else_none
from troposphere import Ref

from hasura_composex.common.cfn_params import Parameter
from hasura_composex.common.logging import LOG
from hasura_composex.vpc.vpc_params import (
    APP_SUBNETS_T,
    PLACEMENT_TO_SUBNETS,
    PUBLIC_SUBNETS_T,
    STORAGE_SUBNETS_T,
    SUBNETS_TYPE,
    VPC_ID_T,
    VPC_SETTINGS,
    VPC_TYPE,
)


class NetworkContext:
    """
    Represents the VPC and the subnets groups to place resources into.

    :ivar str vpc_id: the VPC ID
    :ivar dict subnets: subnet IDs per subnets group name (PublicSubnets, AppSubnets, StorageSubnets)
    """

    def __init__(
        self,
        vpc_id: str,
        public_subnets: list = None,
        app_subnets: list = None,
        storage_subnets: list = None,
    ):
        if not vpc_id or not isinstance(vpc_id, str):
            raise ValueError("The network context requires a VPC ID. Got", vpc_id)
        self.vpc_id = vpc_id
        self.subnets = {
            PUBLIC_SUBNETS_T: list(public_subnets) if public_subnets else [],
            APP_SUBNETS_T: list(app_subnets) if app_subnets else [],
            STORAGE_SUBNETS_T: list(storage_subnets) if storage_subnets else [],
        }

    def __repr__(self):
        return f"NetworkContext({self.vpc_id})"

    @classmethod
    def from_definition(cls, definition: dict) -> NetworkContext:
        """
        Creates the network context from the Vpc section of the definition
        """
        if not keyisset(VPC_ID_T, definition):
            raise KeyError(f"{VPC_ID_T} is required to define the network context")
        return cls(
            definition[VPC_ID_T],
            public_subnets=set_else_none(PUBLIC_SUBNETS_T, definition),
            app_subnets=set_else_none(APP_SUBNETS_T, definition),
            storage_subnets=set_else_none(STORAGE_SUBNETS_T, definition),
        )

    def to_dict(self) -> dict:
        definition = {VPC_ID_T: self.vpc_id}
        for name, subnets in self.subnets.items():
            if subnets:
                definition[name] = list(subnets)
        return definition

    def vpc_parameter(self, graph: ResourceGraph) -> Parameter:
        """
        Returns the VpcId parameter, adding it to the graph template if needed.
        """
        if VPC_ID_T in graph.parameters:
            return graph.parameters[VPC_ID_T]
        parameter = Parameter(
            VPC_ID_T, group_label=VPC_SETTINGS, Type=VPC_TYPE, Default=self.vpc_id
        )
        graph.add_parameters([parameter])
        return parameter

    def vpc_ref(self, graph: ResourceGraph) -> Ref:
        return Ref(self.vpc_parameter(graph))

    def subnets_parameter(self, graph: ResourceGraph, placement: str) -> Parameter:
        """
        Returns the subnets parameter matching the placement (Public, App, Storage),
        adding it to the graph template if needed.
        When the network context has no subnets for it, the parameter has no default value
        and must be set when creating the stack.
        """
        if placement not in PLACEMENT_TO_SUBNETS:
            raise ValueError(
                "Subnets placement", placement, "must be one of", list(PLACEMENT_TO_SUBNETS)
            )
        title = PLACEMENT_TO_SUBNETS[placement]
        if title in graph.parameters:
            return graph.parameters[title]
        props = {"Type": SUBNETS_TYPE}
        if self.subnets[title]:
            props["Default"] = ",".join(self.subnets[title])
        else:
            LOG.warning(
                f"No subnets defined for {title} in the network context."
                " The value will have to be set when creating the stack."
            )
        parameter = Parameter(title, group_label=VPC_SETTINGS, **props)
        graph.add_parameters([parameter])
        return parameter

    def subnets_ref(self, graph: ResourceGraph, placement: str) -> Ref:
        return Ref(self.subnets_parameter(graph, placement))
