# tests/test_packaging.py
"""The wheel must carry every source package, none of which has an __init__.py."""
from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")
setuptools = pytest.importorskip("setuptools")

ROOT = Path(__file__).resolve().parents[1]


def load_find_options():
    with open(ROOT / "pyproject.toml", "rb") as fh:
        return tomllib.load(fh)["tool"]["setuptools"]["packages"]["find"]


def test_package_discovery_covers_every_source_package():
    options = load_find_options()
    assert options.get("namespaces", True) is True

    source_root = ROOT / options["where"][0]
    found = set(
        setuptools.find_namespace_packages(
            where=str(source_root), include=options["include"]
        )
    )
    expected = {
        path.name
        for path in source_root.iterdir()
        if path.is_dir() and any(path.glob("*.py"))
    } - {"alembic"}

    assert expected
    assert expected <= found
