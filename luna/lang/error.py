"""Error handling for the luna language. Only LunaExceptions should be encountered during a run: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every stage of the pipeline has its own exception class and a `Kind` enum naming what went wrong:

```
LexError          UNTERMINATED_STRING, UNKNOWN_TOKEN
ParseError        EXPECTED_TOKEN, EXPECTED_KEYWORD, BREAK_OUTSIDE_LOOP, MODULE_NOT_FOUND, RETURN_OUTSIDE_FUNCTION
LunaRuntimeError  UNDEFINED_VARIABLE, UNDEFINED_FUNCTION, TYPE_COERCION_ERROR
```
"""

import sys
from enum import Enum

from termcolor import colored


class LunaException(Exception):
    """Templates an error/warning message so that it can be reported by ErrorHandler. exprs are the snippets that get
    formatted (and highlighted) into msg. position is the offset into the source text of the offending token.
    """

    class Kind(Enum):
        GENERIC = "generic"

    def __init__(self, msg, exprs=None, kind=None, position=None, expected=None, actual=None, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = list(exprs)
        self.kind = kind if kind is not None else LunaException.Kind.GENERIC
        self.position = position
        self.expected = expected
        self.actual = actual
        self.internal = internal

        super().__init__(self.format())

    def format(self, paint=None):
        """Returns message with exprs substituted in. paint is applied to every expr (used for highlighting)."""
        if paint is None:
            paint = str
        return self.template.format(*(paint(expr) for expr in self.exprs))

    @property
    def msg(self):
        return self.format()


class LexError(LunaException):
    """Raised by the Lexer when the source text cannot be split into tokens."""

    class Kind(Enum):
        UNTERMINATED_STRING = "unterminated string"
        UNKNOWN_TOKEN = "unknown token"


class ParseError(LunaException):
    """Raised by the Parser on the first grammar violation. There is no error recovery."""

    class Kind(Enum):
        EXPECTED_TOKEN = "expected token"
        EXPECTED_KEYWORD = "expected keyword"
        BREAK_OUTSIDE_LOOP = "break outside loop"
        MODULE_NOT_FOUND = "module not found"
        RETURN_OUTSIDE_FUNCTION = "return outside function"


class LunaRuntimeError(LunaException):
    """Raised by the Runtime. Named so that it does not shadow Python's builtin RuntimeError.

    Calling a name that is bound to a variable holding a non-function value is a TYPE_COERCION_ERROR, not an
    UNDEFINED_FUNCTION: the name is defined, it just cannot be called.
    """

    class Kind(Enum):
        UNDEFINED_VARIABLE = "undefined variable"
        UNDEFINED_FUNCTION = "undefined function"
        TYPE_COERCION_ERROR = "type coercion error"


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report luna errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"
    INFO = "cyan"
    STEP = "blue"

    def __init__(self, fatal=True, stream=None, color=True, verbose=False):
        self.fatal = fatal
        self.color = color
        self.verbose = verbose
        self._stream = stream

        self.status = 0
        self.last_error = None
        self.sources = {}  # dict of path: source text, used to locate error positions

    @property
    def stream(self):
        return self._stream if self._stream is not None else sys.stderr

    def paint(self, text, color=None, bold=True):
        """Colors text with termcolor, unless colors are turned off."""
        if not self.color:
            return text
        return colored(text, color, attrs=["bold"] if bold else None)

    def register_source(self, path, source):
        """Registers source text in traceback given path. Should be called prior to Session run."""
        self.sources = {path: source}

    def remove_source(self, path):
        """Removes source from traceback given path. Should be called after successful Session run."""
        self.sources.pop(path, None)

    @staticmethod
    def locate(source, position):
        """Returns (line, line_num, col) of position in source. line_num and col are 1-based."""
        position = max(0, min(position, len(source)))
        start = source.rfind("\n", 0, position) + 1
        end = source.find("\n", position)
        if end == -1:
            end = len(source)
        return source[start:end], source.count("\n", 0, position) + 1, position - start + 1

    def diagnose(self, line, col, width=1, warning=False):
        """Returns offending part of line highlighted, with a caret underneath it."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start = col - 1
        end = min(max(start + width, start + 1), len(line)) if line else start

        diagnosis = "  " + line[:start]
        diagnosis += self.paint(line[start:end], color)
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += self.paint("^" + "~" * (end - start - 1), color)

        return diagnosis

    def _emit(self, text):
        print(text, file=self.stream)

    def info(self, msg, *exprs):
        """Prints an informational diagnostic, e.g. a resolved import."""
        self._emit(self.paint("info: ", ErrorHandler.INFO) + msg.format(*(self.paint(expr) for expr in exprs)))

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = LunaException(*args, **kwargs)
        self._emit(self.paint("warning: ", ErrorHandler.WARNING) + error.format(self.paint))

    def register_step(self, kind, text):
        """Prints a trace step when verbose."""
        if self.verbose:
            self._emit(self.paint(f"[{kind}] ", ErrorHandler.STEP) + text)

    def throw(self, error):
        """Reports error exactly once. error must be a LunaException. If error.position is set, the registered source
        text is used to point at the offending token.
        """
        error_msg = ""
        if error.internal:
            error_msg += self.paint("[internal] ", ErrorHandler.ERROR)
        error_msg += self.paint("Error: ", ErrorHandler.ERROR) + error.format(self.paint)
        self._emit(error_msg)

        if error.position is not None and not error.internal:
            for path, source in self.sources.items():
                line, line_num, col = ErrorHandler.locate(source, error.position)
                self._emit(self.paint(f"  {path}:{line_num}:{col}", bold=False))
                width = len(error.actual) if error.actual else 1
                self._emit(self.diagnose(line, col, width))

        self.status = 1
        self.last_error = error

        if self.fatal:
            sys.exit(1)
        self.sources = {}  # if error occurred, reset traceback (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(LunaException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(LunaRuntimeError("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, LunaException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LunaException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
