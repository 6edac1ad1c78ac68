"""luna interpreter.

Basic program flow:
    1. Lexer: converts source text into tokens on demand (see luna/lang/lexical.py)
    2. Parser: pulls tokens and builds one syntax tree by recursive descent (see luna/lang/parser.py)
        - Will fail on the first grammar violation, a `break` outside a loop, or an `import` of a missing module
    3. Runtime: walks the syntax tree once against a chain of Scopes (see luna/lang/runtime.py)
        - not a compiler, so statements are executed on the fly

Any failure is reported once by an ErrorHandler as "Error: <message>" and ends the run with a nonzero status.

"""

import io
from dataclasses import dataclass
from typing import Optional

from luna.lang.error import ErrorHandler, LunaException
from luna.lang.session import Session


@dataclass
class Result:
    """Outcome of running luna source: status is 0 on success, output is everything print wrote, diagnostic is
    everything the ErrorHandler reported.
    """
    status: int
    output: str
    diagnostic: str
    error: Optional[LunaException] = None
    value: object = None

    @property
    def ok(self):
        return self.status == 0


def run(source, modules_path=None, reader=None, color=False, verbose=False):
    """Runs source text and returns a Result instead of exiting the process. reader is called once per input
    expression and ends input by raising EOFError or StopIteration.
    """
    output, diagnostic = io.StringIO(), io.StringIO()
    value = None

    with ErrorHandler(fatal=False, stream=diagnostic, color=color, verbose=verbose) as error_handler:
        sess = Session.from_source(error_handler, source, modules_path=modules_path, output=output, reader=reader)
        value = sess.run()

    return Result(error_handler.status, output.getvalue(), diagnostic.getvalue(), error_handler.last_error, value)
