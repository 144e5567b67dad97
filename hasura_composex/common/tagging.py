# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Tags added to all the resources supporting them.
"""

from troposphere import Tags

TAGS_SEPARATOR = "::"
TAGS_PREFIX = f"hasura-compose-x{TAGS_SEPARATOR}"


def define_tags(logical_name: str, tags: dict = None, **extra) -> Tags:
    """
    Returns the Tags to apply to a resource: the user tags, then the compose-x ones.

    :param str logical_name: the logical name of the Hasura deployment
    :param dict tags: the user defined tags
    :param extra: additional hasura-compose-x:: tags, i.e. component="rds"
    :rtype: troposphere.Tags
    """
    rendered = dict(tags) if tags else {}
    rendered[f"{TAGS_PREFIX}name"] = logical_name
    for key, value in extra.items():
        rendered[f"{TAGS_PREFIX}{key}"] = value
    return Tags(**rendered)
