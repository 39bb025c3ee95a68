"""YARRRML front end: the YAML shorthand is compiled to RML Turtle by yatter."""

import yaml
import yatter

from rmlturtle.core.diagnostics import MappingParseError
from rmlturtle.log import get_logger

log = get_logger(__name__)

YARRRML_SUFFIXES = (".yml", ".yaml")


def translate_yarrrml(text: str) -> str:
    """Return the RML (Turtle) equivalent of a YARRRML document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MappingParseError(f"YARRRML is not valid YAML: {exc}") from exc
    if not isinstance(data, dict) or "mappings" not in data:
        raise MappingParseError("YARRRML document has no 'mappings' section")

    try:
        rml = yatter.translate(data)
    except Exception as exc:
        raise MappingParseError(f"Cannot translate YARRRML: {exc}") from exc
    if not rml:
        raise MappingParseError("YARRRML translation produced no mapping")
    log.debug("Translated YARRRML into %d characters of RML", len(rml))
    return rml
