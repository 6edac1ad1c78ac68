"""luna: a small interpreted scripting language with a tree-walking evaluator."""

from luna.interpreter import Result, run
from luna.lang.error import ErrorHandler, LexError, LunaException, LunaRuntimeError, ParseError
from luna.lang.session import Session

__version__ = "0.1.0"
