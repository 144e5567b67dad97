#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Custom exceptions for hasura-compose-x
"""


class HasuraComposeXException(Exception):
    """
    Top class for Hasura Compose-X Exceptions
    """

    def __init__(self, msg, *args):
        super().__init__(msg, *args)


class IncompatibleOptions(HasuraComposeXException):
    """
    Exception when two options of the definition conflict,
    i.e. setting both a Password and a SecretArn for the database credentials
    """
