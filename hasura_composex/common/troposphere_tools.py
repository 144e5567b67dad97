#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Helper functions around troposphere.Template
"""

from __future__ import annotations

from troposphere import Output, Parameter, Template

from hasura_composex.common.cfn_params import Parameter as ComposeParameter
from hasura_composex.common.logging import LOG


def add_parameters(template: Template, parameters: list) -> None:
    """
    Adds the parameters to the template if not already present, sets the group and label if defined.

    :param troposphere.Template template:
    :param list[Parameter] parameters:
    """
    for param in parameters:
        if not isinstance(param, Parameter):
            raise TypeError("Expected", Parameter, "got", type(param))
        if param.title in template.parameters:
            LOG.debug(f"Parameter {param.title} already in template. Skipping")
            continue
        template.add_parameter(param)
        if isinstance(param, ComposeParameter):
            template.add_parameter_to_group(param, param.group_label)
            if param.label:
                template.set_parameter_label(param, param.label)


def add_resource(template: Template, resource, replace=False):
    """
    Adds the resource to the template. Raises ValueError on duplicate unless replace is True.
    """
    if resource.title not in template.resources:
        template.add_resource(resource)
    elif replace:
        LOG.debug(f"Replacing resource {resource.title} in template")
        template.resources[resource.title] = resource
    else:
        raise ValueError(f"Resource {resource.title} is already defined in template")
    return resource


def add_outputs(template: Template, outputs: list) -> None:
    """
    Adds outputs to the template, skipping these already defined.
    """
    for output in outputs:
        if not isinstance(output, Output):
            raise TypeError("Expected", Output, "got", type(output))
        if output.title in template.outputs:
            LOG.debug(f"Output {output.title} already in template. Skipping")
            continue
        template.add_output(output)


def build_template(description=None, parameters=None) -> Template:
    """
    Returns a new template with the version set and parameters added

    :param str description:
    :param list parameters:
    :rtype: troposphere.Template
    """
    template = Template(description if description else "Template generated by Hasura Compose-X")
    template.set_version()
    if parameters:
        add_parameters(template, parameters)
    return template
