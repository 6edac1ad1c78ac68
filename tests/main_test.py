import contextlib
import io
import os
import tempfile
import unittest

from luna.main import build_parser, main


def invoke(*argv):
    """Returns (status, stdout, stderr) of running the luna executable with argv."""
    stdout, stderr = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
        status = main(["--no-color", *argv])
    return status, stdout.getvalue(), stderr.getvalue()


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def script(self, source):
        path = os.path.join(self.tmp.name, "main.luna")
        with open(path, "w") as file:
            file.write(source)
        return path

    def test_arguments(self):
        args = build_parser().parse_args(["script.luna", "--modules", "lib", "--trace"])
        self.assertEqual("script.luna", args.file)
        self.assertEqual("lib", args.modules)
        self.assertTrue(args.trace)
        self.assertFalse(args.ast)
        self.assertIsNone(args.source)

    def test_source(self):
        self.assertEqual((0, "5\n", ""), invoke("-c", "var x = 5; print x;"))

        status, stdout, stderr = invoke("-c", "print y;")
        self.assertEqual(1, status)
        self.assertEqual("", stdout)
        self.assertTrue(stderr.startswith("Error: undefined variable 'y'\n"), stderr)

    def test_file(self):
        path = self.script("loop\n    print 'once';\n    break\nend\n")
        self.assertEqual((0, "once\n", ""), invoke(path))

    def test_file_error_exits(self):
        path = self.script("print 1;\nprint nope;\n")
        with self.assertRaises(SystemExit) as context:
            invoke(path)
        self.assertEqual(1, context.exception.code)

        with self.assertRaises(SystemExit):
            invoke(os.path.join(self.tmp.name, "missing.luna"))

    def test_modules(self):
        os.makedirs(os.path.join(self.tmp.name, "lib", "std"))
        status, stdout, stderr = invoke("--modules", os.path.join(self.tmp.name, "lib"), "-c", "import std print 1;")
        self.assertEqual((0, "1\n"), (status, stdout))
        self.assertIn("module found: std", stderr)

    def test_ast(self):
        status, stdout, __ = invoke("--ast", "-c", "print x;")
        self.assertEqual(0, status)
        expected = "Program(nodes=[\n    PrintStatement(nodes=[\n        Identifier(name='x')\n    ])\n])\n"
        self.assertEqual(expected, stdout)

    def test_trace(self):
        status, __, stderr = invoke("--trace", "-c", "print 1;")
        self.assertEqual(0, status)
        self.assertIn("[PrintStatement]", stderr)


if __name__ == '__main__':
    unittest.main()
