import json
from collections import OrderedDict
from collections.abc import Sequence
from pathlib import Path

import pytest

from plugin_harness.errors import ClassResolutionError
from plugin_harness.reflection.loaders import (
    ClassLoader,
    ImportLoader,
    RegistryLoader,
    qualified_name,
)


def test_import_loader_resolves_classes_and_modules():
    loader = ImportLoader()

    assert loader.load_class("collections.OrderedDict") is OrderedDict
    assert loader.load_class("collections.abc.Sequence") is Sequence
    assert loader.load_class("json") is json


def test_import_loader_resolves_nested_attributes():
    assert ImportLoader().load_class("collections.OrderedDict.fromkeys") == OrderedDict.fromkeys


@pytest.mark.parametrize(
    "name",
    ["no_such_module_for_harness_tests", "collections.NoSuchThing", "", "collections..abc"],
)
def test_import_loader_misses(name):
    with pytest.raises(ClassResolutionError, match="Could not load"):
        ImportLoader().load_class(name)


def test_import_loader_reports_broken_modules(monkeypatch, tmp_path: Path):
    """Test a failing import inside the target is not mistaken for a miss"""
    (tmp_path / "harness_broken_module.py").write_text(
        "import harness_missing_dependency\n\nclass Thing:\n    pass\n"
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(ClassResolutionError, match="harness_missing_dependency") as excinfo:
        ImportLoader().load_class("harness_broken_module.Thing")

    assert isinstance(excinfo.value.__cause__, ModuleNotFoundError)


def test_registry_loader():
    marker = object()
    loader = RegistryLoader({"org.example.Marker": marker})

    assert loader.load_class("org.example.Marker") is marker
    with pytest.raises(ClassResolutionError, match="not registered"):
        loader.load_class("org.example.Other")


def test_registry_loader_delegates_to_parent():
    loader = RegistryLoader({}, parent=ImportLoader())

    assert loader.load_class("json") is json


def test_loaders_satisfy_protocol():
    assert isinstance(ImportLoader(), ClassLoader)
    assert isinstance(RegistryLoader({}), ClassLoader)


def test_qualified_name():
    assert qualified_name(OrderedDict) == "collections.OrderedDict"
    assert qualified_name(json) == "json"
    assert qualified_name(test_qualified_name) == f"{__name__}.test_qualified_name"
