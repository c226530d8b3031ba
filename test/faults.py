"""
Fault tests (codes, contextual copies, shell vs raising mode).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import io
import sys
import unittest
from contextlib import redirect_stdout
from unittest import TestCase, mock

from rich.text import Text

from clitree.faults import *


class TestFaults(TestCase):

    def setUp(self):
        self.fault = UnknownOptionError("Unknown option: --bogus", code=FaultCode.UNKNOWN_OPTION, input="--bogus")

    def testAttributes(self):
        self.assertEqual(str(self.fault), "Unknown option: --bogus")
        self.assertEqual(self.fault.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(self.fault.input, "--bogus")
        self.assertIsNone(self.fault.command)

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            self.fault.options["input"] = "--other"

    def testReplaceKeepsType(self):
        replaced = copy.replace(self.fault, command="app")
        self.assertIsInstance(replaced, UnknownOptionError)
        self.assertEqual(replaced.message, self.fault.message)
        self.assertEqual(replaced.command, "app")
        self.assertEqual(replaced.input, "--bogus")
        self.assertIsNone(self.fault.command)

    def testTriggerPrintsInShellMode(self):
        with redirect_stdout(io.StringIO()) as stdout:
            triggered = trigger(self.fault, shell=True, command="app")

        self.assertEqual(stdout.getvalue(), "Unknown option: --bogus\n\n")
        self.assertIsNot(triggered, self.fault)
        self.assertEqual(triggered.command, "app")

    def testTriggerRaisesOtherwise(self):
        with redirect_stdout(io.StringIO()) as stdout:
            with self.assertRaises(UnknownOptionError) as context:
                trigger(self.fault, shell=False)

        self.assertEqual(stdout.getvalue(), "")
        self.assertFalse(context.exception.options["shell"])

    def testTriggerRejectsPlainExceptions(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))

    def testRichRendering(self):
        plain = self.fault.__rich__()
        self.assertIsInstance(plain, Text)
        self.assertEqual(plain.plain, "Unknown option: --bogus")
        self.assertFalse(plain.spans)

        styled = copy.replace(self.fault, colorful=True).__rich__()
        self.assertEqual(styled.plain, "Unknown option: --bogus")
        self.assertTrue(styled.spans)

    def testNormalize(self):
        self.assertEqual(FaultCode.UNKNOWN_SUBCOMMAND.normalize(), "11102")
        codes = {FaultCode.UNKNOWN_OPTION: "E-OPTION"}
        with mock.patch.object(sys.modules["__main__"], "__codes__", codes, create=True):
            self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E-OPTION")

    def testRegistrationConflict(self):
        self.assertTrue(issubclass(RegistrationConflictError, ValueError))
        self.assertEqual(RegistrationConflictError.code, FaultCode.REGISTRATION_CONFLICT)


if __name__ == "__main__":
    unittest.main()
