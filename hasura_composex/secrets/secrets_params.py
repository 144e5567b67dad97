#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille <john@compose-x.io>

"""
Module for Secrets titles and settings
"""

PASSWORD_SECRET_T = "InstancePassword"
ADMIN_SECRET_T = "AdminSecret"
CONNECTION_SECRET_T = "ConnectionSecret"

CONNECTION_SECRET_DESCRIPTION = "Hasura RDS connection string"
DEFAULT_PASSWORD_LENGTH = 32

SECRETSMANAGER_ARN_RE = (
    r"^(?P<arn>arn:aws(?:-[a-z]+)*:secretsmanager:[\w-]+:\d{12}:secret:[^:]+)"
    r"(?::(?P<json_key>[^:]*):(?P<version_stage>[^:]*):(?P<version_id>[^:]*))?$"
)
SSM_PARAMETER_ARN_RE = r"^arn:aws(?:-[a-z]+)*:ssm:[\w-]+:\d{12}:parameter/\S+$"
