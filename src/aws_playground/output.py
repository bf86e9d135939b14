"""YAML output of SDK responses."""

import base64
import datetime
import json
from typing import Any, TextIO

import yaml

DOCUMENT_START = "---"


def _to_json(value: Any) -> Any:
    """Fallback conversion for values json can't encode natively."""
    if isinstance(value, datetime.date | datetime.datetime):
        return value.isoformat()
    if isinstance(value, bytes | bytearray):
        return base64.b64encode(value).decode("ascii")
    return str(value)


def marshal_yaml(value: Any) -> str:
    """Render ``value`` as YAML, going through JSON first.

    The JSON pass normalizes the value (datetimes become ISO strings,
    bytes become base64), so the YAML reflects exactly what a JSON
    encoder would produce.
    """
    data = json.loads(json.dumps(value, default=_to_json))
    return yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def output_as_yaml(value: Any, stream: TextIO) -> None:
    """Write ``value`` to ``stream`` as a YAML document starting with ``---``."""
    text = marshal_yaml(value)
    stream.write(DOCUMENT_START + "\n")
    stream.write(text)
    stream.flush()
