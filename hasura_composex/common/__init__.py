#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Most commonly used functions shared across all modules.
"""

from __future__ import annotations

import re

NONALPHANUM = re.compile(r"([^a-zA-Z\d]+)")


def define_logical_name(name: str) -> str:
    """
    Returns a CFN friendly (alphanumerical) version of the name

    :param str name: Name as given by the user, i.e. my-hasura
    :return: the logical name, i.e. myhasura
    :rtype: str
    """
    logical_name = NONALPHANUM.sub("", name)
    if not logical_name:
        raise ValueError(f"Name {name} must contain at least one alphanumerical character")
    return logical_name
