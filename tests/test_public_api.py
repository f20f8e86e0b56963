# tests/test_public_api.py
"""
Unit tests for the package layout.

Every subpackage must import on its own and resolve each name it lists in
``__all__``.
"""

from unittest import TestCase
import importlib
import unittest

_PACKAGES = (
    "keybin",
    "keybin.domain",
    "keybin.domain.utils",
    "keybin.infrastructure",
    "keybin.infrastructure.codec",
    "keybin.infrastructure.view",
    "keybin.infrastructure.ops",
    "keybin.infrastructure.interop",
)


class TestPublicApi(TestCase):
    def test_subpackages_import(self):
        for name in _PACKAGES:
            with self.subTest(package=name):
                module = importlib.import_module(name)
                for attr in getattr(module, "__all__", ()):
                    self.assertTrue(hasattr(module, attr), f"{name}.{attr}")

    def test_ops_reach_domain_types(self):
        from keybin.domain import U8
        from keybin.infrastructure.ops import transpose

        out = transpose((2, 3), U8, bytes(range(6)))
        self.assertEqual(tuple(out.shape), (3, 2))
        self.assertEqual(bytes(out.buffer), bytes([0, 3, 1, 4, 2, 5]))


if __name__ == "__main__":
    unittest.main()
