"""Tree-walking evaluator for the luna language. Executes a Program directly against a chain of Scopes.

Values are plain Python objects:

```
Null      None
Bool      bool
Number    float
String    str
Function  Function (a closure: declaration body + the Scope it was declared in)
```

break and return are implemented as exceptions (BreakSignal, ReturnSignal) that unwind to the nearest loop or call.
The Parser guarantees that neither can escape to the top level.
"""

import sys
from dataclasses import dataclass, field

from luna.lang import grammar
from luna.lang.error import LunaRuntimeError
from luna.lang.scope import Scope


class BreakSignal(Exception):
    """Raised by a break statement, caught by the nearest enclosing loop."""


class ReturnSignal(Exception):
    """Raised by a return statement, caught at the call boundary."""

    def __init__(self, value):
        super().__init__(value)
        self.value = value


@dataclass
class Function:
    name: str
    body: grammar.Node
    scope: Scope = field(repr=False, compare=False)  # defining Scope, not the calling one


def truthy(value):
    """Truthiness at if/while condition sites: null, false, "", "false" and 0 are falsy."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value not in ("", "false")
    if isinstance(value, float):
        return value != 0
    return True


def represent(value):
    """Textual form of value, as written by print."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, Function):
        return f"<func {value.name}>"
    return str(value)


class Runtime:
    """Executes luna syntax trees. output is a writable text stream (stdout by default) and reader a callable that
    returns one line of input (builtin input by default).
    """

    def __init__(self, output=None, reader=None, error_handler=None):
        self._output = output
        self.reader = reader if reader is not None else input
        self.error_handler = error_handler

        self.exports = {}  # dict of name: value, filled by export statements

        self._statements = {
            grammar.IfStatement: self.execute_if,
            grammar.WhileStatement: self.execute_while,
            grammar.LoopStatement: self.execute_loop,
            grammar.FunctionDeclaration: self.execute_function_declaration,
            grammar.LetDeclaration: self.execute_declaration,
            grammar.VarDeclaration: self.execute_declaration,
            grammar.ImportStatement: self.execute_import,
            grammar.ExportStatement: self.execute_export,
            grammar.PrintStatement: self.execute_print,
            grammar.BreakStatement: self.execute_break,
            grammar.ReturnStatement: self.execute_return,
            grammar.ExpressionStatement: self.execute_expression,
        }
        self._expressions = {
            grammar.Literal: self.evaluate_literal,
            grammar.Identifier: self.evaluate_identifier,
            grammar.Call: self.evaluate_call,
            grammar.Input: self.evaluate_input,
        }

    @property
    def output(self):
        return self._output if self._output is not None else sys.stdout

    def run(self, program, scope=None):
        """Runs every statement of program in scope (a fresh global Scope if None). Returns the last evaluated
        value.
        """
        if scope is None:
            scope = Scope()
        for statement in program.statements:
            self.execute(statement, scope)
        return scope.last_value

    def execute(self, statement, scope):
        if self.error_handler is not None:
            self.error_handler.register_step(type(statement).__name__, f"at {statement.position} (depth {scope.depth})")

        try:
            self._statements[type(statement)](statement, scope)
        except LunaRuntimeError as error:
            if error.position is None:
                error.position = statement.position
            raise

    def evaluate(self, expression, scope):
        try:
            return self._expressions[type(expression)](expression, scope)
        except LunaRuntimeError as error:
            if error.position is None:
                error.position = expression.position
            raise

    # statements

    def execute_if(self, statement, scope):
        if self.condition(statement.condition, scope):
            self.execute(statement.body, scope.child())

    def execute_while(self, statement, scope):
        while self.condition(statement.condition, scope):
            try:
                self.execute(statement.body, scope.child())
            except BreakSignal:
                break

    def execute_loop(self, statement, scope):
        while True:
            block = scope.child()
            try:
                for body_statement in statement.body:
                    self.execute(body_statement, block)
            except BreakSignal:
                break

    def execute_function_declaration(self, statement, scope):
        if statement.name in scope.functions and self.error_handler is not None:
            self.error_handler.warn("function '{}' redeclared", statement.name)
        scope.define_function(Function(statement.name, statement.body, scope))

    def execute_declaration(self, statement, scope):
        value = self.evaluate(statement.initializer, scope)
        scope.define(statement.name, value)
        scope.remember(value)

    def execute_import(self, statement, scope):
        """Modules are only checked for existence (at parse time). No names are bound."""

    def execute_export(self, statement, scope):
        self.exports[statement.name] = self.value_of(statement.name, scope)

    def execute_print(self, statement, scope):
        value = self.evaluate(statement.expression, scope)
        self.output.write(represent(value) + "\n")
        scope.remember(value)

    def execute_break(self, statement, scope):
        raise BreakSignal()

    def execute_return(self, statement, scope):
        value = None
        if statement.expression is not None:
            value = self.evaluate(statement.expression, scope)
        raise ReturnSignal(value)

    def execute_expression(self, statement, scope):
        scope.remember(self.evaluate(statement.expression, scope))

    def condition(self, expression, scope):
        return truthy(self.evaluate(expression, scope))

    # expressions

    def evaluate_literal(self, expression, scope):
        return expression.value

    def evaluate_identifier(self, expression, scope):
        return self.value_of(expression.name, scope)

    def value_of(self, name, scope):
        """Value of name in the nearest Scope binding it. A variable wins over a function declared in the same Scope."""
        owner = scope.resolve_binding(name)
        if owner is not None and name not in owner.variables:
            return owner.functions[name]
        return scope.lookup(name)  # raises UNDEFINED_VARIABLE

    def evaluate_call(self, expression, scope):
        """Calls the nearest binding of the name. A function wins over a variable bound in the same Scope."""
        owner = scope.resolve_binding(expression.name)
        if owner is None:
            function = scope.lookup_function(expression.name)  # raises UNDEFINED_FUNCTION
        elif expression.name in owner.functions:
            function = owner.functions[expression.name]
        else:
            function = owner.variables[expression.name]
            if not isinstance(function, Function):
                raise LunaRuntimeError("'{}' is not a function (got {})", (expression.name, represent(function)),
                                       kind=LunaRuntimeError.Kind.TYPE_COERCION_ERROR, actual=expression.name)

        return self.call(function)

    def call(self, function):
        """Runs function's body in a new Scope whose parent is the Scope the function was declared in."""
        frame = function.scope.child(Scope.CALL)
        try:
            self.execute(function.body, frame)
        except ReturnSignal as signal:
            return signal.value
        return frame.last_value

    def evaluate_input(self, expression, scope):
        try:
            return self.reader()
        except (EOFError, StopIteration):
            return None
