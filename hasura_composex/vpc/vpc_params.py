# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Parameters related to the VPC settings. Used by hasura_composex.vpc and others
"""

VPC_TYPE = "AWS::EC2::VPC::Id"
SUBNETS_TYPE = "List<AWS::EC2::Subnet::Id>"

VPC_SETTINGS = "VPC Settings"

RES_KEY = "Vpc"
VPC_ID_T = "VpcId"
PUBLIC_SUBNETS_T = "PublicSubnets"
APP_SUBNETS_T = "AppSubnets"
STORAGE_SUBNETS_T = "StorageSubnets"

PUBLIC_PLACEMENT = "Public"
APP_PLACEMENT = "App"
STORAGE_PLACEMENT = "Storage"

PLACEMENT_TO_SUBNETS = {
    PUBLIC_PLACEMENT: PUBLIC_SUBNETS_T,
    APP_PLACEMENT: APP_SUBNETS_T,
    STORAGE_PLACEMENT: STORAGE_SUBNETS_T,
}
