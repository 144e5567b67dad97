# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Titles and defaults for the Hasura load balancer
"""

LB_T = "LoadBalancer"
LB_SG_T = "LoadBalancerSg"
LISTENER_T = "PublicListener"
REDIRECT_LISTENER_T = "RedirectListener"
TARGET_GROUP_T = "TargetGroup"

HEALTH_CHECK_PATH = "/healthz"

HTTP_PROTOCOL = "HTTP"
HTTPS_PROTOCOL = "HTTPS"
DEFAULT_LISTENER_PORT = 80
DEFAULT_HTTPS_LISTENER_PORT = 443
REDIRECT_LISTENER_PORT = 80
