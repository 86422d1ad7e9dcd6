# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

# Default error messages. Strings are templates: `${name}` is replaced
# by the printed value of the named error parameter.

from typing import *

from .utility import printvalue, items, ismap


def nottype(params: Dict[str, Any]) -> str:
    path = params.get('path')
    value = params.get('value')
    originalvalue = params.get('originalvalue')

    iscast = originalvalue is not None and originalvalue is not value
    msg = (
        f"{path} must be a `{params.get('type')}` type, "
        f"but the final value was: `{printvalue(value, True)}`" +
        (f" (cast from the value `{printvalue(originalvalue, True)}`)."
         if iscast else '.')
    )

    if value is None:
        msg += ('\n If "null" is intended as an empty value be sure to '
                'mark the schema as `.nullable()`')

    return msg


MIXED = {
    'default': '${path} is invalid',
    'required': '${path} is a required field',
    'defined': '${path} must be defined',
    'oneof': '${path} must be one of the following values: ${values}',
    'notoneof': '${path} must not be one of the following values: ${values}',
    'nottype': nottype,
}

LOCALE = {
    'mixed': MIXED,
}


def setlocale(custom: Dict[str, Dict[str, Any]]) -> None:
    "Replace messages in place, by section (e.g. {'mixed': {'required': ...}})."
    for section, messages in items(custom):
        if section in LOCALE and ismap(messages):
            LOCALE[section].update(messages)
