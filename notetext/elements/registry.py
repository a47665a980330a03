"""Element factory loading."""

from __future__ import annotations

import importlib

from notetext.elements.base import ElementFactory
from notetext.elements.default import DefaultElements


def load_import_elements(import_string: str) -> ElementFactory:
    """Load a factory from ``pkg.module:ClassName`` (the part after ``import:``)."""
    module_path, _, class_name = import_string.rpartition(":")
    if not module_path or not class_name:
        raise ValueError(f"Invalid import string '{import_string}' (expected pkg.module:Class)")
    mod = importlib.import_module(module_path)
    obj = getattr(mod, class_name)
    factory = obj() if isinstance(obj, type) else obj
    if not isinstance(factory, ElementFactory):
        raise ValueError(f"'{import_string}' does not implement the ElementFactory protocol")
    return factory


def load_elements(spec: str = "default") -> ElementFactory:
    """Resolve an element factory spec.

    ``default``    — :class:`DefaultElements`
    ``import:...`` — factory from an import string
    """
    if spec.startswith("import:"):
        return load_import_elements(spec[len("import:"):])
    if spec == "default":
        return DefaultElements()
    raise ValueError(f"Unknown element factory '{spec}'")
