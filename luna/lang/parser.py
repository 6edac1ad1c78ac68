"""Recursive-descent parser for the luna language: one method per grammar production. The first grammar violation
aborts the whole parse, there is no error recovery.

```
<program>     ::= <statement>* EOF
<statement>   ::= <if> | <while> | <loop> | <func> | <import> | <export> | <let> | <var> | <break> | <return>
                | <print> | <expr_stmt>
<if>          ::= "if" <expr> <statement> "end"
<while>       ::= "while" <expr> <statement> "end"
<loop>        ::= "loop" <statement>* "end"
<func>        ::= "func" IDENT <statement> "end"
<let>         ::= "let" IDENT "=" <expr> ";"
<var>         ::= "var" IDENT "=" <expr> ";"
<import>      ::= "import" IDENT               ; IDENT must name a directory under the modules root
<export>      ::= "export" IDENT ";"
<print>       ::= "print" <expr> ";"
<break>       ::= "break"                      ; only inside a loop
<return>      ::= "return" <expr>? ";"         ; only inside a function body
<expr_stmt>   ::= IDENT                        ; a bare name as a statement is a call
                | <expr>
<expr>        ::= "true" | "false" | "null" | NUMBER | STRING | "input" | IDENT "(" ")" | IDENT
```
"""

import os

from luna.lang import grammar
from luna.lang.error import ParseError
from luna.lang.lexical import Lexer, TokenKind


class DirectoryProbe:
    """Answers whether a module directory exists under root. The only filesystem access the Parser relies on."""

    def __init__(self, root):
        self.root = root

    def path(self, module):
        return os.path.join(self.root, module)

    def __call__(self, module):
        return os.path.isdir(self.path(module))

    def __repr__(self):
        return f"DirectoryProbe({self.root!r})"


class Parser:
    """Pulls tokens from a Lexer one at a time (with a single token of lookahead) and builds one Program."""
    LITERALS = {"true": True, "false": False, "null": None}

    def __init__(self, lexer, module_probe=None, error_handler=None):
        """lexer can also be source text. module_probe is any callable taking a module name and returning whether it
        exists; by default modules are looked up in the current directory's lina_modules/.
        """
        if isinstance(lexer, str):
            lexer = Lexer(lexer)
        if module_probe is None:
            module_probe = DirectoryProbe("lina_modules")

        self.lexer = lexer
        self.module_probe = module_probe
        self.error_handler = error_handler

        self.loops = []      # stack of enclosing loop statements
        self.functions = []  # stack of enclosing function declarations
        self.token = self.lexer.next_token()

    # token helpers

    def advance(self):
        """Consumes the current token and returns it."""
        token = self.token
        if not token.is_(TokenKind.END_OF_INPUT):
            self.token = self.lexer.next_token()
        return token

    def check(self, kind, text=None):
        return self.token.is_(kind, text)

    def expect(self, kind, text=None, expected=None):
        """Consumes the current token if it matches kind/text, else raises ParseError."""
        if self.check(kind, text):
            return self.advance()

        if expected is None:
            expected = f"'{text}'" if text is not None else kind.value
        error_kind = ParseError.Kind.EXPECTED_KEYWORD if kind is TokenKind.KEYWORD else ParseError.Kind.EXPECTED_TOKEN
        raise ParseError("expected {}, got {}", (expected, self.token.describe()), kind=error_kind,
                         position=self.token.position, expected=expected, actual=self.token.text)

    def expect_keyword(self, keyword):
        return self.expect(TokenKind.KEYWORD, keyword)

    def expect_symbol(self, symbol):
        return self.expect(TokenKind.SYMBOL, symbol)

    def expect_identifier(self, what="identifier"):
        return self.expect(TokenKind.IDENTIFIER, expected=what).text

    # productions

    def parse(self):
        """Program -> Statement* EOF"""
        program = grammar.Program(position=self.token.position)
        while not self.check(TokenKind.END_OF_INPUT):
            program.statements.append(self.statement())
        return program

    def statement(self):
        """Dispatches on the current token to the matching statement production."""
        if self.check(TokenKind.IMPORT):
            return self.import_statement()

        if self.check(TokenKind.KEYWORD):
            production = {
                "if": self.if_statement,
                "while": self.while_statement,
                "loop": self.loop_statement,
                "func": self.function_declaration,
                "let": self.let_declaration,
                "var": self.var_declaration,
                "export": self.export_statement,
                "print": self.print_statement,
                "break": self.break_statement,
                "return": self.return_statement,
            }.get(self.token.text)

            if production is not None:
                return production()

        return self.expression_statement()

    def if_statement(self):
        start = self.expect_keyword("if")
        condition = self.expression()
        body = self.statement()
        self.expect_keyword("end")
        return grammar.IfStatement(condition, body, position=start.position)

    def while_statement(self):
        start = self.expect_keyword("while")
        condition = self.expression()

        node = grammar.WhileStatement(condition, None, position=start.position)
        self.loops.append(node)
        try:
            node.body = self.statement()
        finally:
            self.loops.pop()

        self.expect_keyword("end")
        return node

    def loop_statement(self):
        start = self.expect_keyword("loop")

        node = grammar.LoopStatement(position=start.position)
        self.loops.append(node)
        try:
            while not self.check(TokenKind.KEYWORD, "end"):
                if self.check(TokenKind.END_OF_INPUT):
                    self.expect_keyword("end")
                node.body.append(self.statement())
        finally:
            self.loops.pop()

        self.expect_keyword("end")
        return node

    def function_declaration(self):
        start = self.expect_keyword("func")
        name = self.expect_identifier("function name")

        node = grammar.FunctionDeclaration(name, None, position=start.position)
        enclosing_loops, self.loops = self.loops, []  # loops outside the function cannot be broken from inside it
        self.functions.append(node)
        try:
            node.body = self.statement()
        finally:
            self.functions.pop()
            self.loops = enclosing_loops

        self.expect_keyword("end")
        return node

    def let_declaration(self):
        start = self.expect_keyword("let")
        name = self.expect_identifier("variable name")
        self.expect_symbol("=")
        initializer = self.expression()
        self.expect_symbol(";")
        return grammar.LetDeclaration(name, initializer, position=start.position)

    def var_declaration(self):
        start = self.expect_keyword("var")
        name = self.expect_identifier("variable name")
        self.expect_symbol("=")
        initializer = self.expression()
        self.expect_symbol(";")
        return grammar.VarDeclaration(name, initializer, position=start.position)

    def import_statement(self):
        start = self.expect(TokenKind.IMPORT)
        module_token = self.token
        module = self.expect_identifier("module name")

        if not self.module_probe(module):
            raise ParseError("module '{}' not found", module, kind=ParseError.Kind.MODULE_NOT_FOUND,
                             position=module_token.position, actual=module)
        if self.error_handler is not None:
            self.error_handler.info("module found: {}", module)

        return grammar.ImportStatement(module, position=start.position)

    def export_statement(self):
        start = self.expect_keyword("export")
        name = self.expect_identifier("variable name")
        self.expect_symbol(";")
        return grammar.ExportStatement(name, position=start.position)

    def print_statement(self):
        start = self.expect_keyword("print")
        expression = self.expression()
        self.expect_symbol(";")
        return grammar.PrintStatement(expression, position=start.position)

    def break_statement(self):
        start = self.expect_keyword("break")
        if not self.loops:
            raise ParseError("'{}' outside of a loop", "break", kind=ParseError.Kind.BREAK_OUTSIDE_LOOP,
                             position=start.position, actual=start.text)
        return grammar.BreakStatement(position=start.position)

    def return_statement(self):
        start = self.expect_keyword("return")
        if not self.functions:
            raise ParseError("'{}' outside of a function", "return", kind=ParseError.Kind.RETURN_OUTSIDE_FUNCTION,
                             position=start.position, actual=start.text)

        expression = None
        if not self.check(TokenKind.SYMBOL, ";"):
            expression = self.expression()
        self.expect_symbol(";")
        return grammar.ReturnStatement(expression, position=start.position)

    def expression_statement(self):
        start = self.token
        if start.is_(TokenKind.IDENTIFIER):
            expression = self.expression()
            if isinstance(expression, grammar.Identifier):
                expression = grammar.Call(expression.name, position=start.position)
        else:
            expression = self.expression()
        return grammar.ExpressionStatement(expression, position=start.position)

    def expression(self):
        """Expr -> Literal | Number | String | Input | Call | Identifier"""
        token = self.token

        if token.is_(TokenKind.NUMBER):
            self.advance()
            return grammar.Literal(float(token.text), position=token.position)

        elif token.is_(TokenKind.STRING):
            self.advance()
            return grammar.Literal(token.text, position=token.position)

        elif token.is_(TokenKind.KEYWORD) and token.text in Parser.LITERALS:
            self.advance()
            return grammar.Literal(Parser.LITERALS[token.text], position=token.position)

        elif token.is_(TokenKind.KEYWORD, "input"):
            self.advance()
            return grammar.Input(position=token.position)

        elif token.is_(TokenKind.IDENTIFIER):
            self.advance()
            if self.check(TokenKind.SYMBOL, "("):
                self.advance()
                self.expect_symbol(")")
                return grammar.Call(token.text, position=token.position)
            return grammar.Identifier(token.text, position=token.position)

        self.expect(TokenKind.IDENTIFIER, expected="expression")
