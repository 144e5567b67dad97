#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille <john@compose-x.io>

"""
Functions to render a template or a configuration and write it to the local filesystem
"""

import json
import pprint
from os import makedirs, path

import yaml

try:
    from yaml import CDumper as Dumper
except ImportError:
    from yaml import Dumper

from troposphere import Template

from hasura_composex.common.logging import LOG

JSON_MIME = "application/json"
YAML_MIME = "application/x-yaml"
ALLOWED_FORMATS = ["json", "yaml", "yml"]
DEFAULT_FORMAT = "json"
DEFAULT_OUTPUT_DIR = "outputs"


class FileArtifact(object):
    """
    Class to handle files artifacts, such as configuration files or templates.

    :cvar str body: The content of the FileArtifact
    :cvar troposphere.Template template: the CFN template
    :cvar str file_name: the base name of the file
    :cvar str mime: MIME-type of the file
    :cvar str output_dir: Path to the local director to output the file to.
    :cvar str file_path: Output file path for the FileArtifact
    """

    mime = "text/plain"
    file_path = None

    def __init__(
        self,
        file_name,
        output_dir=DEFAULT_OUTPUT_DIR,
        file_format=DEFAULT_FORMAT,
        template=None,
        content=None,
    ):
        """
        Init method for FileArtifact

        :param file_name: Name of the file. Mandatory
        :param template: If you are providing a template to generate
        """
        self.template = None
        self.content = None
        self.file_name = file_name
        self.output_dir = output_dir
        self.body = None
        if template is not None and not isinstance(template, Template):
            raise TypeError("template must be of type", Template, "got", type(template))
        elif (
            content is not None
            and not isinstance(content, (tuple, dict, str, list))
            and template is None
        ):
            raise TypeError(
                "content must be of type", tuple, dict, str, list, "Got", type(content)
            )
        elif template is not None:
            self.template = template
        elif content is not None:
            self.content = content
        else:
            raise ValueError(f"{file_name} - Either template or content must be set")
        if file_format is not None and not isinstance(file_format, str):
            raise TypeError("format is of type", type(file_format), "expected", str)
        self.define_file_specs(file_name, file_format)
        self.file_path = path.join(self.output_dir, self.file_name)
        self.define_body()

    def __repr__(self):
        return self.file_path

    def write(self):
        """
        Method to write the file to local filesystem, creating the output directory if needed.
        """
        makedirs(self.output_dir, exist_ok=True)
        with open(self.file_path, "w") as template_fd:
            template_fd.write(self.body)
        LOG.info(
            f"{self.file_name} written successfully at {path.abspath(self.file_path)}"
        )

    def define_body(self):
        """
        Method to define the body of the file artifact.
        """
        if isinstance(self.template, Template):
            try:
                if self.mime == YAML_MIME:
                    self.body = self.template.to_yaml()
                else:
                    self.body = self.template.to_json()
            except Exception as error:
                pp = pprint.PrettyPrinter(indent=2)
                pp.pprint(self.template.resources)
                raise error
        elif isinstance(self.content, str):
            self.body = self.content
        elif isinstance(self.content, (list, dict, tuple)):
            if self.mime == YAML_MIME:
                self.body = yaml.dump(self.content, Dumper=Dumper)
            else:
                self.body = json.dumps(self.content, indent=4)

    def define_file_specs(self, file_name, file_format):
        """
        Method to set the file name and mime type from the format

        :param file_name: name of the file
        :param file_format: format to use for the file.
        """
        if file_format is not None and file_format in ALLOWED_FORMATS:
            self.file_name = f"{file_name}.{file_format}"

        if self.file_name.endswith(".json"):
            self.mime = JSON_MIME
        elif self.file_name.endswith(".yml") or self.file_name.endswith(".yaml"):
            self.mime = YAML_MIME
        else:
            self.mime = JSON_MIME
            self.file_name = f"{self.file_name}.template"
