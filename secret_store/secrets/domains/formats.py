"""Conversion of secret content between JSON, YAML and plain text.

JSON and YAML are two spellings of the same value space: conversion always
parses the source and re-serializes the value. Plain text is never parsed.
"""
import json
import logging
import re
from typing import Any

import yaml

from .errors import ParseError
from .models import ContentFormat

logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_BOOL_TAG = "tag:yaml.org,2002:bool"
_INT_TAG = "tag:yaml.org,2002:int"


class _SecretLoader(yaml.SafeLoader):
    """Safe loader with YAML 1.2 style plain scalars.

    Secret payloads end up as JSON, which has no date type, so a value like
    ``2024-01-01`` must survive a YAML -> JSON conversion untouched. The
    YAML 1.1 spellings ``yes``/``no``/``on``/``off``, leading-zero octals
    (``0123``) and sexagesimals (``1:30``) stay strings as well.
    """
    pass


_SecretLoader.yaml_implicit_resolvers = {
    first_char: [
        (tag, regexp) for tag, regexp in resolvers
        if tag not in (_TIMESTAMP_TAG, _BOOL_TAG, _INT_TAG)
    ]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_SecretLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
_SecretLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"^(?:[-+]?(?:0|[1-9][0-9]*)|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)


def _parse(content: str, source_format: ContentFormat) -> Any:
    if source_format is ContentFormat.JSON:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(ContentFormat.JSON, e) from e

    try:
        return yaml.load(content, Loader=_SecretLoader)
    except yaml.YAMLError as e:
        raise ParseError(ContentFormat.YAML, e) from e


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        # e.g. !!binary payloads or .nan, which JSON cannot carry
        raise ParseError(ContentFormat.JSON, e) from e


def _to_yaml(value: Any) -> str:
    return yaml.dump(
        value,
        Dumper=yaml.SafeDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def convert(content: str, source_format: ContentFormat, destination_format: ContentFormat) -> str:
    """
    Convert ``content`` from ``source_format`` to ``destination_format``.

    Args:
        content: Content written in ``source_format``
        source_format: Format the content is currently in
        destination_format: Format to produce

    Returns:
        The content in ``destination_format``. Text, either as source or as
        destination, is returned unchanged (a structured source is still
        validated first).

    Raises:
        ParseError: If ``content`` is not valid ``source_format``, or the
            parsed value cannot be represented in ``destination_format``
    """
    if source_format is ContentFormat.TEXT:
        return content

    value = _parse(content, source_format)

    if destination_format is ContentFormat.TEXT:
        return content
    if destination_format is ContentFormat.JSON:
        return _to_json(value)
    return _to_yaml(value)


def round_trip(content: str, secret_format: ContentFormat, edit_format: ContentFormat) -> str:
    """Return ``content`` as it would come back from an unchanged edit."""
    edited = convert(content, secret_format, edit_format)
    return convert(edited, edit_format, secret_format)


def placeholder(content_format: ContentFormat) -> str:
    """Initial content seeded for a secret that does not exist yet."""
    if content_format is ContentFormat.TEXT:
        return ""
    if content_format is ContentFormat.JSON:
        return _to_json({})
    return _to_yaml({})
