#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Load the JSON Schema of the Hasura definition
"""

import json

import jsonschema
from importlib_resources import files as pkg_files

from hasura_composex.common.logging import LOG

SPEC_FILE_NAME = "hasura.spec.json"


def load_schema() -> dict:
    source = pkg_files("hasura_composex").joinpath(f"specs/{SPEC_FILE_NAME}")
    return json.loads(source.read_text())


def validate_definition(definition: dict) -> None:
    """
    Validates the definition against the schema.

    :raises: jsonschema.exceptions.ValidationError
    """
    LOG.debug(f"Validating definition against {SPEC_FILE_NAME}")
    try:
        jsonschema.validate(definition, load_schema())
    except jsonschema.exceptions.ValidationError as error:
        LOG.error(
            f"Definition is not conform to schema: {error.message}"
            f" at {'.'.join(str(part) for part in error.absolute_path)}"
        )
        raise
