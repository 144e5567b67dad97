# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to import CFN Resources defined by their properties, i.e. the Properties of Rds and HasuraService
"""

from __future__ import annotations

from inspect import isfunction

from compose_x_common.compose_x_common import keyisset, keypresent
from troposphere import AWSHelperFn, AWSProperty


def handle_list(properties: list, property_class) -> list:
    """
    Function to handle list properties

    :param list properties:
    :param property_class:
    :return:
    """
    rendered_properties = []
    for property_definition in properties:
        if (
            isinstance(property_definition, dict)
            and isinstance(property_class, type)
            and issubclass(property_class, AWSProperty)
        ):
            record = import_record_properties(property_definition, property_class)
            rendered_properties.append(property_class(**record))
        else:
            rendered_properties.append(property_definition)
    return rendered_properties


def import_non_functions(props: dict, prop_name: str, top_class, properties: dict):
    """
    Function to set property for flat object or recursive to sub properties
    """
    expected_type = top_class.props[prop_name][0]
    value = properties[prop_name]
    if isinstance(value, AWSHelperFn):
        props[prop_name] = value
    elif expected_type in (str, int, float) and isinstance(
        value, (str, int, float)
    ):
        props[prop_name] = expected_type(value)
    elif (
        isinstance(value, dict)
        and isinstance(expected_type, type)
        and issubclass(expected_type, AWSProperty)
    ):
        sub_props = import_record_properties(value, expected_type)
        props[prop_name] = expected_type(**sub_props)
    else:
        props[prop_name] = value


def import_record_properties(properties: dict, top_class, ignore_missing_required=True) -> dict:
    """
    Generic function importing the properties of a CFN resource defined as a dict into the
    troposphere types expected by top_class.
    Properties unknown to top_class raise a KeyError.

    :param dict properties:
    :param top_class: The class we are going to import properties for
    :param bool ignore_missing_required: Whether raise an error when missing an essential key.
    :return:  The properties for top_class
    :rtype: dict
    """
    unknown = [prop_name for prop_name in properties if prop_name not in top_class.props]
    if unknown:
        raise KeyError(
            f"{unknown} are not valid properties for {top_class.__name__}",
            sorted(top_class.props.keys()),
        )
    props = {}
    for prop_name, prop_def in top_class.props.items():
        expected_type, required = prop_def[0], prop_def[1]
        if not keypresent(prop_name, properties):
            if required and not ignore_missing_required:
                raise KeyError(
                    f"Property {prop_name} is required for the definition of {top_class.__name__}"
                )
            continue
        if keyisset(prop_name, properties) and isinstance(expected_type, list):
            props[prop_name] = handle_list(properties[prop_name], expected_type[0])
        elif isfunction(expected_type):
            props[prop_name] = properties[prop_name]
        else:
            import_non_functions(props, prop_name, top_class, properties)
    return props
