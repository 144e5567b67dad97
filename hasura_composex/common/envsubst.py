#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille <john@compose-x.io>

"""
Module to interpolate environment variables into the Hasura definition.
CFN pseudo parameters such as ${AWS::Region} are left as-is.
"""

from __future__ import annotations

import os
import re

SPECIAL_INTERPOLATION = r"(?<!\\)(\$(\{(((?!AWS::)[^}]+)(\:[+-=]{1}))([^}]+)\}))"
IF_UNDEFINED = r":-"
IF_DEFINED = r":+"


def expandvars(path, default=None, skip_escaped=True):
    """
    Expand environment variables of form $var and ${var}.
       If parameter 'skip_escaped' is True, all escaped variable references
       (i.e. preceded by backslashes) are skipped.
       Unknown variables are set to 'default'. If 'default' is None,
       they are left unchanged.
    """

    def replace_var(match):
        if re.match(SPECIAL_INTERPOLATION, match.group(0)):
            groups = re.findall(SPECIAL_INTERPOLATION, match.group(0))
            if groups[0][-2] == IF_UNDEFINED:
                return os.environ.get(groups[0][-3]) or expandvars(
                    groups[0][-1], default, skip_escaped
                )
            elif groups[0][-2] == IF_DEFINED:
                if os.environ.get(groups[0][-3]):
                    return expandvars(groups[0][-1], default, skip_escaped)
                return ""
        return os.environ.get(
            match.group(2) or match.group(1),
            match.group(0) if default is None else default,
        )

    re_string = (r"(?<!\\)" if skip_escaped else "") + r"\$(\w+|\{(?!AWS::)([^}]*)\})"
    return re.sub(re_string, replace_var, path)


def interpolate_definition(definition):
    """
    Walks through the definition and expands the environment variables of every string value.
    Keys are left untouched. Returns a new object, the input is not modified.
    """
    if isinstance(definition, dict):
        return {
            key: interpolate_definition(value) for key, value in definition.items()
        }
    elif isinstance(definition, list):
        return [interpolate_definition(value) for value in definition]
    elif isinstance(definition, str):
        return expandvars(definition)
    return definition
