"""Tests for mappers."""
import plistlib
from dataclasses import dataclass

import pytest

from layerprefs import DecodeError, Mapper, UnexpectedDeserializationResult


@dataclass
class RemoteSettings:
    abc: int
    url: str = "http://a.com"


class TestJSONMappers:
    """Test the JSON family."""

    def test_json_passes_decoded_object(self):
        mapper = Mapper.json(lambda obj: {"items": len(obj)})
        assert mapper.map(b"[1, 2, 3]") == {"items": 3}

    def test_json_dictionary_identity(self):
        assert Mapper.json_dictionary().map(b'{"abc": 5}') == {"abc": 5}

    def test_json_dictionary_using(self):
        mapper = Mapper.json_dictionary(lambda d: {"retries": d["network"]["retries"]})
        assert mapper.map(b'{"network": {"retries": 3}}') == {"retries": 3}

    def test_json_dictionary_rejects_list(self):
        with pytest.raises(UnexpectedDeserializationResult) as exc_info:
            Mapper.json_dictionary().map(b"[1, 2]")
        assert exc_info.value.actual_type is list

    def test_invalid_json(self):
        with pytest.raises(DecodeError, match="JSON"):
            Mapper.json_dictionary().map(b"{nope")

    def test_json_dataclass(self):
        mapper = Mapper.json_dataclass(RemoteSettings, lambda s: {"abc": s.abc, "url": s.url})
        assert mapper.map(b'{"abc": 5, "extra": true}') == {"abc": 5, "url": "http://a.com"}

    def test_json_dataclass_missing_field(self):
        mapper = Mapper.json_dataclass(RemoteSettings, lambda s: {"abc": s.abc})
        with pytest.raises(DecodeError, match="RemoteSettings"):
            mapper.map(b'{"url": "http://b.com"}')

    def test_json_dataclass_needs_dataclass(self):
        with pytest.raises(TypeError):
            Mapper.json_dataclass(dict, lambda d: d)


class TestOtherFormats:
    """Test plist and YAML mappers."""

    def test_plist(self):
        data = plistlib.dumps({"abc": 5, "flag": True})
        assert Mapper.plist(lambda p: p).map(data) == {"abc": 5, "flag": True}

    def test_invalid_plist(self):
        with pytest.raises(DecodeError, match="plist"):
            Mapper.plist(lambda p: p).map(b"not a plist")

    def test_yaml(self):
        data = b"network:\n  retries: 3\n  url: http://a.com\n"
        mapper = Mapper.yaml(lambda y: y["network"])
        assert mapper.map(data) == {"retries": 3, "url": "http://a.com"}

    def test_invalid_yaml(self):
        with pytest.raises(DecodeError, match="YAML"):
            Mapper.yaml(lambda y: y).map(b"key: [unclosed")

    def test_custom_mapping(self):
        mapper = Mapper(lambda data: {"raw": data.decode()})
        assert mapper.map(b"hello") == {"raw": "hello"}
