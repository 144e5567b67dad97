# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Console script for hasura_composex.
"""

import argparse
import sys

import yaml
from cfn_flip.yaml_dumper import LongCleanDumper

from hasura_composex import __version__
from hasura_composex.common.files import (
    ALLOWED_FORMATS,
    DEFAULT_FORMAT,
    DEFAULT_OUTPUT_DIR,
    FileArtifact,
)
from hasura_composex.common.logging import LOG, set_log_level
from hasura_composex.hasura import Hasura
from hasura_composex.settings import HasuraSettings

RENDER_COMMAND = "render"
CONFIG_COMMAND = "config"
VERSION_COMMAND = "version"


class ArgparseHelper(argparse._HelpAction):
    """
    Used to help print top level '--help' arguments from argparse
    when used with subparsers
    """

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        print()
        subparsers_actions = [
            action
            for action in parser._actions
            if isinstance(action, argparse._SubParsersAction)
        ]
        for subparsers_action in subparsers_actions:
            for choice, subparser in list(subparsers_action.choices.items()):
                print(f"Command '{choice}'")
                print(subparser.format_usage())
        parser.exit()


def main_parser():
    """
    Console script for hasura_composex.
    """
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action=ArgparseHelper,
        help="show this help message and exit",
    )
    cmd_parsers = parser.add_subparsers(dest="command", help="Command to execute.")
    files_parser = argparse.ArgumentParser(add_help=False)
    files_parser.add_argument(
        "-f",
        "--file",
        dest="DefinitionFile",
        required=True,
        help="Path to the Hasura definition file",
    )
    files_parser.add_argument(
        "-n",
        "--name",
        help="Name of your Hasura deployment. Defaults to Hasura",
        required=False,
        type=str,
        dest="Name",
    )
    files_parser.add_argument(
        "--loglevel", type=str, help="Log level. Defaults to INFO", required=False
    )
    render_parser = argparse.ArgumentParser(add_help=False)
    render_parser.add_argument(
        "-d",
        "--output-dir",
        required=False,
        help="Output directory to write the template to.",
        type=str,
        dest="OutputDirectory",
        default=DEFAULT_OUTPUT_DIR,
    )
    render_parser.add_argument(
        "--format",
        help="Defines the format you want to use.",
        type=str,
        dest="TemplateFormat",
        choices=ALLOWED_FORMATS,
        default=DEFAULT_FORMAT,
    )
    cmd_parsers.add_parser(
        name=RENDER_COMMAND,
        help="Renders the CloudFormation template for Hasura",
        parents=[files_parser, render_parser],
    )
    cmd_parsers.add_parser(
        name=CONFIG_COMMAND,
        help="Prints the definition with all defaults resolved",
        parents=[files_parser],
    )
    cmd_parsers.add_parser(name=VERSION_COMMAND, help="Prints the version")
    return parser


def render(args) -> FileArtifact:
    settings = HasuraSettings.from_file(args.DefinitionFile, name=args.Name)
    hasura = Hasura(settings)
    template_file = FileArtifact(
        settings.logical_name,
        output_dir=args.OutputDirectory,
        file_format=args.TemplateFormat,
        template=hasura.graph.template,
    )
    template_file.write()
    return template_file


def main(argv=None):
    """
    Main entry point for CLI
    :return: status code
    """
    parser = main_parser()
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        parser.print_help()
        return 0
    args = parser.parse_args(argv)
    if getattr(args, "loglevel", None) and not set_log_level(args.loglevel):
        print(
            f"Log level value {args.loglevel} is invalid. Must me one of"
            " CRITICAL, ERROR, WARNING, INFO, DEBUG"
        )
    LOG.debug(args)
    if args.command == VERSION_COMMAND:
        print("Hasura Compose-X", __version__)
    elif args.command == CONFIG_COMMAND:
        settings = HasuraSettings.from_file(args.DefinitionFile, name=args.Name)
        print(
            yaml.dump(settings.to_dict(mask_password=True), Dumper=LongCleanDumper)
        )
    elif args.command == RENDER_COMMAND:
        render(args)
    else:
        parser.print_help()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())  # pragma: no cover
