# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille<john@compose-x.io>

from os import path

from behave import given, then
from pytest import fail

from hasura_composex.common.files import FileArtifact
from hasura_composex.graph import ALLOWS_FROM
from hasura_composex.hasura import Hasura
from hasura_composex.settings import HasuraSettings


def here():
    return path.abspath(path.dirname(__file__))


@given("I use {file_path} as my Hasura definition")
def step_impl(context, file_path):
    cases_path = path.abspath(f"{here()}/../../../{file_path}")
    context.settings = HasuraSettings.from_file(cases_path)
    context.hasura = Hasura(context.settings)


@then("I render the Hasura template")
def step_impl(context):
    rendered = context.hasura.graph.to_dict()
    if not rendered["Resources"]:
        fail("No resources were rendered for the Hasura template")
    for file_format in ("json", "yaml"):
        artifact = FileArtifact(
            context.hasura.logical_name,
            output_dir="/tmp/hasura-composex",
            file_format=file_format,
            template=context.hasura.graph.template,
        )
        artifact.write()
        assert path.exists(artifact.file_path)


@then("the ECS service AssignPublicIp is {assign_public_ip}")
def step_impl(context, assign_public_ip):
    service = context.hasura.service
    config = service.NetworkConfiguration.AwsvpcConfiguration
    assert config.AssignPublicIp == assign_public_ip


@then("the target group health check path is {health_check_path}")
def step_impl(context, health_check_path):
    assert context.hasura.target_group.HealthCheckPath == health_check_path


@then("the database ingress allows the ECS service")
def step_impl(context):
    hasura = context.hasura
    sources = hasura.graph.dependencies(hasura.ingress_rule, ALLOWS_FROM)
    assert hasura.service_sg.title in sources
    assert hasura.service.title in sources


@then("the database password secret is generated")
def step_impl(context):
    hasura = context.hasura
    assert hasura.password_secret is not None
    assert hasura.password_secret.title in hasura.graph.resources


@then("the admin secret is generated")
def step_impl(context):
    hasura = context.hasura
    assert hasura.admin_secret is not None
    assert hasura.admin_secret.title in hasura.graph.resources


@then("the load balancer listener protocol is {protocol}")
def step_impl(context, protocol):
    listener = context.hasura.listener
    assert listener.Protocol == protocol
    if protocol == "HTTPS":
        assert listener.Certificates


@then("HTTP requests are redirected to HTTPS")
def step_impl(context):
    redirect_listener = context.hasura.redirect_listener
    assert redirect_listener is not None
    action = redirect_listener.DefaultActions[0]
    assert action.Type == "redirect"
    assert action.RedirectConfig.Protocol == "HTTPS"
    assert action.RedirectConfig.Port == str(context.hasura.listener.Port)
