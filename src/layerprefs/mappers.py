"""
Mappers turn the bytes read by a data source into ``key -> default`` pairs.

Pre-built mappers decode a format and hand the decoded object to a caller
supplied ``using`` function that picks out the settings.
"""

import dataclasses
import json
import logging
import plistlib
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar
from xml.parsers.expat import ExpatError

import yaml

from layerprefs.errors import DecodeError, UnexpectedDeserializationResult

logger = logging.getLogger(__name__)

D = TypeVar('D')

MappingFunction = Callable[[bytes], Mapping[str, Any]]


class Mapper:
    """Synchronous, pure transform from raw bytes to settings."""

    def __init__(self, mapping: MappingFunction):
        self._mapping = mapping

    def map(self, data: bytes) -> Mapping[str, Any]:
        return self._mapping(data)

    # ------------------------------------------------------------------
    # Pre-built mappers
    # ------------------------------------------------------------------

    @classmethod
    def json(cls, using: Callable[[Any], Mapping[str, Any]]) -> 'Mapper':
        """Decode JSON and pass whatever it holds to ``using``."""
        def mapping(data: bytes) -> Mapping[str, Any]:
            logger.debug("🧩 Deserializing JSON data")
            return using(_decode_json(data))
        return cls(mapping)

    @classmethod
    def json_dictionary(cls, using: Optional[Callable[[Dict[str, Any]], Mapping[str, Any]]] = None) -> 'Mapper':
        """
        Decode JSON that must hold an object.

        Args:
            using: Picks settings out of the object; the object itself is used if omitted

        Raises:
            UnexpectedDeserializationResult: if the JSON is not an object
        """
        def from_object(obj: Any) -> Mapping[str, Any]:
            if not isinstance(obj, dict):
                raise UnexpectedDeserializationResult("JSON", type(obj))
            return using(obj) if using is not None else obj
        return cls.json(from_object)

    @classmethod
    def json_dataclass(cls, model: Type[D], using: Callable[[D], Mapping[str, Any]]) -> 'Mapper':
        """Decode a JSON object into the ``model`` dataclass, then map it."""
        if not dataclasses.is_dataclass(model):
            raise TypeError(f"{model.__name__} is not a dataclass")
        field_names = {f.name for f in dataclasses.fields(model)}

        def from_object(obj: Any) -> Mapping[str, Any]:
            if not isinstance(obj, dict):
                raise UnexpectedDeserializationResult("JSON", type(obj))
            logger.debug(f"🧩 Deserializing data as a {model.__name__}")
            try:
                instance = model(**{k: v for k, v in obj.items() if k in field_names})
            except TypeError as e:
                raise DecodeError("JSON", f"cannot build {model.__name__}: {e}") from e
            return using(instance)
        return cls.json(from_object)

    @classmethod
    def plist(cls, using: Callable[[Any], Mapping[str, Any]]) -> 'Mapper':
        """Decode a property list (XML or binary)."""
        def mapping(data: bytes) -> Mapping[str, Any]:
            logger.debug("🧩 Deserializing plist data")
            try:
                obj = plistlib.loads(data)
            except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
                raise DecodeError("plist", str(e)) from e
            return using(obj)
        return cls(mapping)

    @classmethod
    def yaml(cls, using: Callable[[Any], Mapping[str, Any]]) -> 'Mapper':
        """Decode YAML with ``yaml.safe_load``."""
        def mapping(data: bytes) -> Mapping[str, Any]:
            logger.debug("🧩 Deserializing YAML data")
            try:
                obj = yaml.safe_load(data)
            except yaml.YAMLError as e:
                raise DecodeError("YAML", str(e)) from e
            return using(obj)
        return cls(mapping)


def _decode_json(data: bytes) -> Any:
    try:
        return json.loads(data)
    except ValueError as e:
        raise DecodeError("JSON", str(e)) from e
