# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the HasuraSettings class.

The definition is validated and all the defaults are resolved here, once. Every construction step
of the composer reads from the resolved settings and never from the raw definition.
"""

from __future__ import annotations

from copy import deepcopy

import yaml

try:
    from yaml import CSafeLoader as Loader
except ImportError:
    from yaml import SafeLoader as Loader

from compose_x_common.compose_x_common import keyisset, set_else_none

from hasura_composex.common import define_logical_name
from hasura_composex.common.envsubst import interpolate_definition
from hasura_composex.common.logging import LOG
from hasura_composex.ecs import ecs_params
from hasura_composex.elbv2.elbv2_params import (
    DEFAULT_HTTPS_LISTENER_PORT,
    DEFAULT_LISTENER_PORT,
    HTTP_PROTOCOL,
    HTTPS_PROTOCOL,
    REDIRECT_LISTENER_PORT,
)
from hasura_composex.exceptions import IncompatibleOptions
from hasura_composex.rds import rds_params
from hasura_composex.specs import validate_definition
from hasura_composex.vpc import NetworkContext
from hasura_composex.vpc.vpc_params import APP_PLACEMENT, PUBLIC_PLACEMENT
from hasura_composex.vpc.vpc_params import RES_KEY as VPC_KEY

TAGS_KEY = "Tags"
MASKED_VALUE = "****"
DEFAULT_NAME = "Hasura"


def load_definition(file_path: str) -> dict:
    """
    Loads the YAML (or JSON) definition file

    :param str file_path:
    :rtype: dict
    """
    with open(file_path, "r") as definition_fd:
        definition = yaml.load(definition_fd.read(), Loader=Loader)
    if not isinstance(definition, dict):
        raise TypeError(
            f"The content of {file_path} must be a mapping. Got", type(definition)
        )
    return definition


def check_managed_properties(properties: dict, managed: tuple, section: str) -> None:
    """
    Raises IncompatibleOptions if Properties try to set what the composer defines.
    """
    conflicts = [prop_name for prop_name in properties if prop_name in managed]
    if conflicts:
        raise IncompatibleOptions(
            f"{section}.Properties cannot set {conflicts}. Use the {section} options instead."
        )


def keep_verbatim_password(definition: dict, interpolated: dict) -> dict:
    """
    Puts back Rds.Credentials.Password as given in the definition, without interpolation.
    A password may legitimately contain $ characters.
    """
    rds = set_else_none(rds_params.RES_KEY, definition)
    if not isinstance(rds, dict):
        return interpolated
    credentials = set_else_none("Credentials", rds)
    if isinstance(credentials, dict) and "Password" in credentials:
        interpolated[rds_params.RES_KEY]["Credentials"]["Password"] = credentials[
            "Password"
        ]
    return interpolated


class RdsSettings:
    """
    Resolved settings of the RDS PostgreSQL instance.

    :ivar str database_name:
    :ivar str master_username:
    :ivar str password: the password as given by the user, used verbatim. None when generated or SecretArn.
    :ivar str password_secret_arn: ARN of the user secret holding the password.
    :ivar str password_json_key: key of the password in the secret JSON document.
    :ivar str subnets_placement: Public, App or Storage
    :ivar str instance_class:
    :ivar str engine_version:
    :ivar int allocated_storage:
    :ivar int port:
    :ivar dict properties: extra DBInstance properties
    """

    def __init__(self, definition: dict = None):
        if definition is None:
            definition = {}
        self.database_name = set_else_none(
            "DatabaseName", definition, rds_params.DEFAULT_DB_NAME
        )
        self.master_username = set_else_none(
            "MasterUsername", definition, rds_params.DEFAULT_DB_USERNAME
        )
        credentials = set_else_none("Credentials", definition, alt_value={})
        if keyisset("Password", credentials) and keyisset("SecretArn", credentials):
            raise IncompatibleOptions(
                "Rds.Credentials - Password and SecretArn are mutually exclusive"
            )
        if keyisset("JsonKey", credentials) and not keyisset("SecretArn", credentials):
            raise IncompatibleOptions("Rds.Credentials - JsonKey requires SecretArn")
        self.password = set_else_none("Password", credentials)
        self.password_secret_arn = set_else_none("SecretArn", credentials)
        self.password_json_key = set_else_none("JsonKey", credentials)

        if keyisset("SubnetsPlacement", definition):
            self.subnets_placement = definition["SubnetsPlacement"]
        else:
            self.subnets_placement = rds_params.DEFAULT_DB_SUBNETS_PLACEMENT
            LOG.warning(
                f"Rds.SubnetsPlacement not set. The database will be placed in {self.subnets_placement} subnets"
            )
        self.instance_class = set_else_none(
            "InstanceClass", definition, rds_params.DEFAULT_INSTANCE_CLASS
        )
        self.engine_version = set_else_none("EngineVersion", definition)
        self.allocated_storage = set_else_none(
            "AllocatedStorage", definition, rds_params.DEFAULT_ALLOCATED_STORAGE
        )
        self.port = set_else_none("Port", definition, rds_params.DEFAULT_DB_PORT)
        self.properties = deepcopy(set_else_none("Properties", definition, {}))
        check_managed_properties(
            self.properties, rds_params.MANAGED_DB_PROPERTIES, rds_params.RES_KEY
        )

    @property
    def generate_password(self) -> bool:
        return not self.password and not self.password_secret_arn

    def to_dict(self, mask_password: bool = False) -> dict:
        credentials = {}
        if self.password:
            credentials["Password"] = MASKED_VALUE if mask_password else self.password
        if self.password_secret_arn:
            credentials["SecretArn"] = self.password_secret_arn
        if self.password_json_key:
            credentials["JsonKey"] = self.password_json_key
        definition = {
            "DatabaseName": self.database_name,
            "MasterUsername": self.master_username,
            "SubnetsPlacement": self.subnets_placement,
            "InstanceClass": self.instance_class,
            "AllocatedStorage": self.allocated_storage,
            "Port": self.port,
        }
        if credentials:
            definition["Credentials"] = credentials
        if self.engine_version:
            definition["EngineVersion"] = self.engine_version
        if self.properties:
            definition["Properties"] = deepcopy(self.properties)
        return definition


class ServiceSettings:
    """
    Resolved settings of the ECS Service and its load balancer

    :ivar str cluster: name or ARN of an existing cluster. None to create a new one
    :ivar bool assign_public_ip:
    :ivar int desired_count:
    :ivar int cpu:
    :ivar int memory:
    :ivar bool public_load_balancer:
    :ivar int listener_port:
    :ivar str protocol: HTTP or HTTPS, for the load balancer listener
    :ivar list certificates: ACM certificates ARNs for the HTTPS listener
    :ivar str ssl_policy: SSL policy of the HTTPS listener
    :ivar bool redirect_http: adds a listener on port 80 redirecting to the HTTPS listener
    :ivar str subnets_placement: subnets for the service tasks
    :ivar dict properties: extra ECS Service properties
    """

    def __init__(self, definition: dict = None):
        if definition is None:
            definition = {}
        self.cluster = set_else_none("Cluster", definition)
        self.assign_public_ip = bool(
            set_else_none("AssignPublicIp", definition, True, eval_bool=True)
        )
        self.desired_count = set_else_none(
            "DesiredCount",
            definition,
            ecs_params.DEFAULT_DESIRED_COUNT,
            eval_bool=True,
        )
        self.cpu = set_else_none("Cpu", definition, ecs_params.DEFAULT_CPU)
        self.memory = set_else_none(
            "MemoryLimitMiB", definition, ecs_params.DEFAULT_MEMORY
        )
        self.public_load_balancer = bool(
            set_else_none("PublicLoadBalancer", definition, True, eval_bool=True)
        )
        self.define_listener(definition)
        self.subnets_placement = set_else_none(
            "SubnetsPlacement",
            definition,
            PUBLIC_PLACEMENT if self.assign_public_ip else APP_PLACEMENT,
        )
        self.properties = deepcopy(set_else_none("Properties", definition, {}))
        check_managed_properties(
            self.properties, ecs_params.MANAGED_SERVICE_PROPERTIES, ecs_params.RES_KEY
        )

    def define_listener(self, definition: dict) -> None:
        """
        Resolves the listener protocol, port and certificates. HTTPS is the default protocol when
        certificates are set.
        """
        self.certificates = list(set_else_none("Certificates", definition, []))
        self.protocol = set_else_none(
            "Protocol",
            definition,
            HTTPS_PROTOCOL if self.certificates else HTTP_PROTOCOL,
        )
        if self.protocol == HTTPS_PROTOCOL and not self.certificates:
            raise IncompatibleOptions(
                f"{ecs_params.RES_KEY} - Protocol {HTTPS_PROTOCOL} requires Certificates"
            )
        if self.protocol == HTTP_PROTOCOL and self.certificates:
            raise IncompatibleOptions(
                f"{ecs_params.RES_KEY} - Certificates are only used with Protocol {HTTPS_PROTOCOL}"
            )
        self.ssl_policy = set_else_none("SslPolicy", definition)
        if self.ssl_policy and self.protocol != HTTPS_PROTOCOL:
            raise IncompatibleOptions(
                f"{ecs_params.RES_KEY} - SslPolicy is only used with Protocol {HTTPS_PROTOCOL}"
            )
        self.listener_port = set_else_none(
            "ListenerPort",
            definition,
            DEFAULT_HTTPS_LISTENER_PORT
            if self.protocol == HTTPS_PROTOCOL
            else DEFAULT_LISTENER_PORT,
        )
        self.redirect_http = keyisset("RedirectHttp", definition)
        if self.redirect_http and self.protocol != HTTPS_PROTOCOL:
            raise IncompatibleOptions(
                f"{ecs_params.RES_KEY} - RedirectHttp requires Protocol {HTTPS_PROTOCOL}"
            )
        if self.redirect_http and self.listener_port == REDIRECT_LISTENER_PORT:
            raise IncompatibleOptions(
                f"{ecs_params.RES_KEY} - RedirectHttp uses port {REDIRECT_LISTENER_PORT}."
                f" ListenerPort cannot be {REDIRECT_LISTENER_PORT}"
            )
        if self.protocol == HTTP_PROTOCOL and self.public_load_balancer:
            LOG.warning(
                f"{ecs_params.RES_KEY} - Public load balancer listener uses {HTTP_PROTOCOL}."
                " Requests to Hasura are not encrypted"
            )

    @property
    def load_balancer_placement(self) -> str:
        return PUBLIC_PLACEMENT if self.public_load_balancer else APP_PLACEMENT

    def to_dict(self) -> dict:
        definition = {
            "AssignPublicIp": self.assign_public_ip,
            "DesiredCount": self.desired_count,
            "Cpu": self.cpu,
            "MemoryLimitMiB": self.memory,
            "PublicLoadBalancer": self.public_load_balancer,
            "ListenerPort": self.listener_port,
            "Protocol": self.protocol,
            "RedirectHttp": self.redirect_http,
            "SubnetsPlacement": self.subnets_placement,
        }
        if self.certificates:
            definition["Certificates"] = list(self.certificates)
        if self.ssl_policy:
            definition["SslPolicy"] = self.ssl_policy
        if self.cluster:
            definition["Cluster"] = self.cluster
        if self.properties:
            definition["Properties"] = deepcopy(self.properties)
        return definition


class HasuraOptions:
    """
    Resolved Hasura GraphQL engine options

    :ivar str version:
    :ivar str image_name:
    :ivar bool enable_telemetry:
    :ivar bool enable_console:
    :ivar str admin_secret: ARN of the user admin secret. None to generate one
    :ivar str jwt_secret: ARN of the user JWT secret. None to disable JWT auth
    :ivar dict env: extra environment variables
    :ivar dict secrets: extra secrets, env var name to secret ARN
    """

    def __init__(self, definition: dict = None):
        if definition is None:
            definition = {}
        self.version = set_else_none(
            "Version", definition, ecs_params.DEFAULT_IMAGE_VERSION
        )
        self.image_name = set_else_none(
            "ImageName", definition, ecs_params.DEFAULT_IMAGE_NAME
        )
        self.enable_telemetry = keyisset("EnableTelemetry", definition)
        self.enable_console = keyisset("EnableConsole", definition)
        self.admin_secret = set_else_none("AdminSecret", definition)
        self.jwt_secret = set_else_none("JwtSecret", definition)
        self.env = {
            key: str(value)
            for key, value in set_else_none("Env", definition, {}).items()
        }
        self.secrets = dict(set_else_none("Secrets", definition, {}))

    @property
    def image(self) -> str:
        return f"{self.image_name}:{self.version}"

    def to_dict(self) -> dict:
        definition = {
            "Version": self.version,
            "ImageName": self.image_name,
            "EnableTelemetry": self.enable_telemetry,
            "EnableConsole": self.enable_console,
        }
        if self.admin_secret:
            definition["AdminSecret"] = self.admin_secret
        if self.jwt_secret:
            definition["JwtSecret"] = self.jwt_secret
        if self.env:
            definition["Env"] = dict(self.env)
        if self.secrets:
            definition["Secrets"] = dict(self.secrets)
        return definition


class HasuraSettings:
    """
    Class holding the fully resolved settings for one Hasura deployment.

    :ivar str name: the name as given
    :ivar str logical_name: alphanumerical name, used as prefix for all resources titles
    :ivar NetworkContext network:
    :ivar RdsSettings rds:
    :ivar ServiceSettings service:
    :ivar HasuraOptions options:
    :ivar dict tags:
    """

    def __init__(
        self, definition: dict, name: str = None, network: NetworkContext = None
    ):
        self.original_definition = deepcopy(definition)
        self.definition = keep_verbatim_password(
            definition, interpolate_definition(deepcopy(definition))
        )
        validate_definition(self.definition)
        self.name = name if name else DEFAULT_NAME
        self.logical_name = define_logical_name(self.name)
        if network is not None:
            self.network = network
        elif keyisset(VPC_KEY, self.definition):
            self.network = NetworkContext.from_definition(self.definition[VPC_KEY])
        else:
            raise KeyError(
                f"{VPC_KEY} must be defined when no network context is given"
            )
        self.rds = RdsSettings(set_else_none(rds_params.RES_KEY, self.definition))
        self.service = ServiceSettings(
            set_else_none(ecs_params.RES_KEY, self.definition)
        )
        self.options = HasuraOptions(
            set_else_none(ecs_params.OPTIONS_KEY, self.definition)
        )
        self.tags = dict(set_else_none(TAGS_KEY, self.definition, {}))
        LOG.debug(f"{self.logical_name} - Settings resolved")

    def __repr__(self):
        return f"HasuraSettings({self.logical_name})"

    @classmethod
    def from_file(cls, file_path: str, name: str = None) -> HasuraSettings:
        LOG.info(f"Loading definition from {file_path}")
        return cls(load_definition(file_path), name=name)

    def to_dict(self, mask_password: bool = False) -> dict:
        """
        The effective definition, with all defaults resolved.

        :param bool mask_password: replaces a user supplied DB password with a placeholder
        """
        definition = {
            VPC_KEY: self.network.to_dict(),
            rds_params.RES_KEY: self.rds.to_dict(mask_password=mask_password),
            ecs_params.RES_KEY: self.service.to_dict(),
            ecs_params.OPTIONS_KEY: self.options.to_dict(),
        }
        if self.tags:
            definition[TAGS_KEY] = dict(self.tags)
        return definition
