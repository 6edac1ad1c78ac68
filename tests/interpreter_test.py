import unittest

import luna
from luna.lang.error import LunaRuntimeError, ParseError


class InterpreterTestCase(unittest.TestCase):

    def test_run(self):
        result = luna.run("var x = 5; print x;")
        self.assertTrue(result.ok)
        self.assertEqual(0, result.status)
        self.assertEqual("5\n", result.output)
        self.assertEqual("", result.diagnostic)
        self.assertIsNone(result.error)
        self.assertEqual(5.0, result.value)

    def test_errors(self):
        cases = {
            "print x;": "Error: undefined variable 'x'",
            "var s = 'open": "Error: unterminated string",
            "print 1": "Error: expected ';'",
            "break": "Error: 'break' outside of a loop",
        }
        for case, expected in cases.items():
            result = luna.run(case)
            self.assertFalse(result.ok, case)
            self.assertEqual(1, result.status, case)
            self.assertTrue(result.diagnostic.startswith(expected), (case, result.diagnostic))
            self.assertEqual(1, result.diagnostic.count("Error: "), case)

    def test_error_stops_run(self):
        result = luna.run("print 'before'; print missing; print 'after';")
        self.assertEqual("before\n", result.output)
        self.assertIsInstance(result.error, LunaRuntimeError)

    def test_missing_module(self):
        result = luna.run("print 'never'; import nonexistentmodule", modules_path="/nonexistent/lina_modules")
        self.assertEqual("", result.output)
        self.assertEqual(ParseError.Kind.MODULE_NOT_FOUND, result.error.kind)
        self.assertIn("<in>:1:23", result.diagnostic)

    def test_input(self):
        lines = iter(["luna"])
        result = luna.run("var name = input; print name;", reader=lambda: next(lines))
        self.assertEqual("luna\n", result.output)

        result = luna.run("print input;", reader=lambda: next(iter([])))
        self.assertTrue(result.ok)
        self.assertEqual("null\n", result.output)

    def test_trace(self):
        result = luna.run("print 1;", verbose=True)
        self.assertEqual("[PrintStatement] at 0 (depth 0)\n", result.diagnostic)


if __name__ == '__main__':
    unittest.main()
