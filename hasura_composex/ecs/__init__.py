# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package to manage the ECS Cluster, Task Definition and Service running Hasura GraphQL engine
"""
