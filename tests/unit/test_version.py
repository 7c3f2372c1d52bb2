import json

import pytest

from htcc_installer.errors import VersionDescriptorError
from htcc_installer.packaging import load_version_descriptor, parse_version_descriptor

DESCRIPTOR = {
    "components": {"a": 1, "b": 2, "c": 3, "d": 456},
    "readable": "1.2.3-beta.1",
    "tweakLabel": "beta",
    "stable": False,
    "tagged": False,
}


def test_parse_full_descriptor():
    version = parse_version_descriptor(DESCRIPTOR)

    assert version.components == (1, 2, 3, 456)
    assert version.triple == "1.2.3"
    assert version.quad == "1.2.3.456"
    assert version.tweak_label == "beta"
    assert not version.tagged


def test_keys_are_case_insensitive():
    version = parse_version_descriptor({
        "Components": {"A": 4, "B": 5, "C": 6, "D": 7},
        "Readable": "4.5.6",
        "TweakLabel": "rc",
        "Tagged": True,
    })

    assert version.quad == "4.5.6.7"
    assert version.tweak_label == "rc"
    assert version.tagged


def test_untagged_suffix_carries_label_and_tweak():
    assert parse_version_descriptor(DESCRIPTOR).out_file_suffix() == "-v1.2.3+beta.456"


def test_tagged_suffix_is_triple_only():
    version = parse_version_descriptor(dict(DESCRIPTOR, tagged=True))
    assert version.out_file_suffix() == "-v1.2.3"


def test_registry_values():
    values = dict(parse_version_descriptor(DESCRIPTOR).registry_values())

    assert values == {
        "Semantic": "1.2.3-beta.1",
        "Readable": "v1.2.3-beta.1",
        "Major": 1,
        "Minor": 2,
        "Build": 3,
        "Tweak": 456,
        "Triple": "1.2.3",
        "Quad": "1.2.3.456",
    }


def test_missing_components_default_to_zero():
    version = parse_version_descriptor({"components": {"a": 2}})
    assert version.components == (2, 0, 0, 0)


@pytest.mark.parametrize("bad", [
    [],
    {},
    {"components": [1, 2, 3, 4]},
    {"components": {"a": -1}},
    {"components": {"a": "1"}},
    {"components": {"a": True}},
])
def test_invalid_descriptors_are_rejected(bad):
    with pytest.raises(VersionDescriptorError):
        parse_version_descriptor(bad)


def test_load_from_input_root(tmp_path):
    (tmp_path / "installer").mkdir()
    (tmp_path / "installer" / "version.json").write_text(json.dumps(DESCRIPTOR), encoding="utf-8")

    assert load_version_descriptor(tmp_path).quad == "1.2.3.456"


def test_load_missing_file(tmp_path):
    with pytest.raises(VersionDescriptorError, match="installer/version.json"):
        load_version_descriptor(tmp_path)


def test_load_invalid_json(tmp_path):
    (tmp_path / "installer").mkdir()
    (tmp_path / "installer" / "version.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(VersionDescriptorError, match="Invalid JSON"):
        load_version_descriptor(tmp_path)


@pytest.mark.parametrize("components", [
    {"a": 256},
    {"a": 1, "b": 256},
    {"a": 1, "b": 0, "c": 65536},
    {"a": 1, "b": 0, "c": 0, "d": 65536},
])
def test_components_above_installer_limits_are_rejected(components):
    with pytest.raises(VersionDescriptorError, match="above the installer limit"):
        parse_version_descriptor({"components": components})


def test_components_at_installer_limits_are_accepted():
    version = parse_version_descriptor({"components": {"a": 255, "b": 255, "c": 65535, "d": 65535}})
    assert version.quad == "255.255.65535.65535"
