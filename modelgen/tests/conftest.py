"""
Shared fixtures: the ``apimodels`` test package and loading of generated modules.
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import pytest

from modelgen.pipeline import GeneratorConfig, Introspector, ModelGenerator

TEST_DATA_DIR = Path(__file__).parent / "test_data"

# the generation sources are imported as the top-level package "apimodels"
if str(TEST_DATA_DIR) not in sys.path:
    sys.path.insert(0, str(TEST_DATA_DIR))


@pytest.fixture
def introspector():
    return Introspector()


@pytest.fixture
def generator_config():
    """Config producing deterministic output: no generation comment."""
    return GeneratorConfig(add_generation_comment=False)


@pytest.fixture
def generator(generator_config):
    return ModelGenerator(generator_config)


@pytest.fixture
def load_generated(tmp_path, monkeypatch):
    """Write generated code to a file and import it as a module."""
    counter = iter(range(1000))

    def load(code: str):
        name = f"generated_models_{next(counter)}"
        path = tmp_path / f"{name}.py"
        path.write_text(code, encoding="utf-8")
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, name, module)
        spec.loader.exec_module(module)
        return module

    return load
