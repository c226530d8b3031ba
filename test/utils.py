"""
Tests for the shared helpers (Unset sentinel, coalesce, rename, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import unittest
from threading import Thread, Lock
from unittest import TestCase

from clitree.utils import *


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFalsyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertIsNot(Unset, None)

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", Unset | str)
        self.assertNotIsInstance(None, str | Unset)

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testConcurrentConstruction(self):
        seen, lock = [], Lock()

        def worker():
            instance = UnsetType()
            with lock:
                seen.append(instance)

        threads = [Thread(target=worker) for _ in range(32)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertTrue(all(instance is Unset for instance in seen))


class TestHelpers(TestCase):

    def testCoalesce(self):
        self.assertEqual(coalesce("origin", "push"), "origin")
        self.assertEqual(coalesce(Unset, "push"), "push")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "push"))
        self.assertEqual(coalesce("", "push"), "")

    def testRename(self):
        def original():
            pass

        self.assertIs(rename(original, "renamed"), original)
        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__name__, "decorated")
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(1, "x")

    def testMirrorFreezesContainers(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")

        holder = Holder()
        holder._items = [1, 2]
        holder._table = {"a": 1}

        self.assertEqual(holder.items, (1, 2))
        with self.assertRaises(TypeError):
            holder.table["b"] = 2
        with self.assertRaises(AttributeError):
            holder.items = []

    def testIntrospectiveType(self):
        class RemoteBranch(metaclass=IntrospectiveType):
            __introspectable__ = ("name", "url")
            __displayable__ = ("name",)

            def __init__(self, name, url):
                self._name, self._url = name, url

        branch = RemoteBranch("origin", "https://example.com")
        self.assertEqual(RemoteBranch.__typename__, "remote-branch")
        self.assertEqual(branch.url, "https://example.com")
        self.assertEqual(repr(branch), "remote-branch(name='origin')")


if __name__ == "__main__":
    unittest.main()
