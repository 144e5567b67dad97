# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille<john@compose-x.io>

import json
from os import path

import yaml
from pytest import fixture

from hasura_composex import __version__
from hasura_composex.cli import main

HERE = path.abspath(path.dirname(__file__))
USE_CASES = path.abspath(f"{HERE}/../../use-cases/hasura")


@fixture
def minimal_file():
    return f"{USE_CASES}/minimal.yml"


def test_version(capsys):
    assert main(["version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_no_command(capsys):
    assert main([]) == 0


def test_render_json(minimal_file, tmp_path):
    assert (
        main(
            [
                "render",
                "-f",
                minimal_file,
                "-n",
                "my-hasura",
                "-d",
                str(tmp_path),
                "--loglevel",
                "warning",
            ]
        )
        == 0
    )
    template_path = tmp_path / "myhasura.json"
    assert template_path.exists()
    template = json.loads(template_path.read_text())
    assert "myhasuraService" in template["Resources"]
    assert "myhasuraConnectionSecret" in template["Resources"]


def test_render_yaml(minimal_file, tmp_path):
    output_dir = tmp_path / "outputs"
    assert (
        main(["render", "-f", minimal_file, "-d", str(output_dir), "--format", "yaml"])
        == 0
    )
    assert (output_dir / "Hasura.yaml").exists()


def test_config(minimal_file, capsys):
    assert main(["config", "-f", minimal_file, "--loglevel", "error"]) == 0
    resolved = yaml.safe_load(capsys.readouterr().out)
    assert resolved["Rds"]["DatabaseName"] == "postgres"
    assert resolved["HasuraService"]["AssignPublicIp"] is True
    assert resolved["HasuraOptions"]["Version"] == "latest"


def test_config_masks_password(capsys):
    private_db_file = f"{USE_CASES}/private_db.yml"
    assert main(["config", "-f", private_db_file, "--loglevel", "error"]) == 0
    output = capsys.readouterr().out
    assert "ssm-secure" not in output
    resolved = yaml.safe_load(output)
    assert resolved["Rds"]["Credentials"]["Password"] == "****"
