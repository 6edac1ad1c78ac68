import unittest

from luna.lang.error import LexError
from luna.lang.lexical import Lexer, Token, TokenKind


def kinds_and_texts(source):
    return [(token.kind, token.text) for token in Lexer(source).tokenize()]


class LexerTestCase(unittest.TestCase):

    def test_ignored(self):
        cases = ["", "   ", "\n\t  \r\n", "// comment", "// a\n  // b\n", "/* block */", "/* a */ // b\n /* c",
                 "/* unterminated block comment", "  /* nested /* not */ "]
        for case in cases:
            token = Lexer(case).next_token()
            self.assertEqual(TokenKind.END_OF_INPUT, token.kind, case)

    def test_end_of_input_repeats(self):
        lexer = Lexer("x")
        self.assertEqual(TokenKind.IDENTIFIER, lexer.next_token().kind)
        for _ in range(3):
            self.assertEqual(TokenKind.END_OF_INPUT, lexer.next_token().kind)

    def test_symbols(self):
        cases = {
            "==": [(TokenKind.SYMBOL, "==")],
            "= =": [(TokenKind.SYMBOL, "="), (TokenKind.SYMBOL, "=")],
            "===": [(TokenKind.SYMBOL, "=="), (TokenKind.SYMBOL, "=")],
            "!=<=>=": [(TokenKind.SYMBOL, "!="), (TokenKind.SYMBOL, "<="), (TokenKind.SYMBOL, ">=")],
            "&&||": [(TokenKind.SYMBOL, "&&"), (TokenKind.SYMBOL, "||")],
            "+-*/": [(TokenKind.SYMBOL, symbol) for symbol in "+-*/"],
            "();": [(TokenKind.SYMBOL, "("), (TokenKind.SYMBOL, ")"), (TokenKind.SYMBOL, ";")],
        }
        for case, expected in cases.items():
            self.assertEqual(expected + [(TokenKind.END_OF_INPUT, "")], kinds_and_texts(case), case)

    def test_strings(self):
        cases = {
            "'abc'": "abc",
            "\"abc\"": "abc",
            "''": "",
            "\"a\\nb\"": "a\nb",
            "'a\\tb'": "a\tb",
            "'a\\\\b'": "a\\b",
            "'it\\'s'": "it's",
            "\"say \\\"hi\\\"\"": "say \"hi\"",
            "'a\"b'": "a\"b",
            "'\\q'": "\\q",
        }
        for case, expected in cases.items():
            token = Lexer(case).next_token()
            self.assertEqual(TokenKind.STRING, token.kind, case)
            self.assertEqual(expected, token.text, case)

    def test_newline_escape(self):
        token = Lexer("\"line\\n\"").next_token()
        self.assertIn("\n", token.text)
        self.assertNotIn("\\", token.text)

    def test_unterminated_string(self):
        should_raise = ["'abc", "\"abc", "'abc\"", "'abc\\'", "x = \"", "'\\"]
        for case in should_raise:
            with self.assertRaises(LexError, msg=case) as context:
                Lexer(case).tokenize()
            self.assertEqual(LexError.Kind.UNTERMINATED_STRING, context.exception.kind, case)

    def test_numbers(self):
        cases = {
            "0": [(TokenKind.NUMBER, "0")],
            "42": [(TokenKind.NUMBER, "42")],
            "3.14": [(TokenKind.NUMBER, "3.14")],
            "1.": [(TokenKind.NUMBER, "1.")],
            "1.2.3": [(TokenKind.NUMBER, "1.2"), (TokenKind.SYMBOL, "."), (TokenKind.NUMBER, "3")],
            "12abc": [(TokenKind.NUMBER, "12"), (TokenKind.IDENTIFIER, "abc")],
            ".5": [(TokenKind.SYMBOL, "."), (TokenKind.NUMBER, "5")],
        }
        for case, expected in cases.items():
            self.assertEqual(expected + [(TokenKind.END_OF_INPUT, "")], kinds_and_texts(case), case)

    def test_words(self):
        keywords = ["if", "while", "func", "return", "end", "true", "false", "null", "print", "input", "var", "let",
                    "const", "break", "continue", "export", "loop"]
        for case in keywords:
            self.assertEqual(Token(TokenKind.KEYWORD, case, 0), Lexer(case).next_token(), case)

        identifiers = ["x", "_", "_private", "snake_case", "x1", "ifs", "endless", "printer", "imports"]
        for case in identifiers:
            self.assertEqual(Token(TokenKind.IDENTIFIER, case, 0), Lexer(case).next_token(), case)

        self.assertEqual(Token(TokenKind.IMPORT, "import", 0), Lexer("import").next_token())

    def test_unknown_token(self):
        cases = {"@": 0, "x #": 2, "print $;": 6, "'ok' ~": 5, "\\": 0}
        for case, position in cases.items():
            with self.assertRaises(LexError, msg=case) as context:
                Lexer(case).tokenize()
            self.assertEqual(LexError.Kind.UNKNOWN_TOKEN, context.exception.kind, case)
            self.assertEqual(position, context.exception.position, case)

    def test_positions(self):
        tokens = Lexer("var x = 'a'; // done\n print x;").tokenize()
        self.assertEqual([0, 4, 6, 8, 11, 22, 28, 29, 30], [token.position for token in tokens])

        positions = [token.position for token in tokens[:-1]]
        self.assertEqual(sorted(set(positions)), positions)

    def test_statement(self):
        expected = [
            (TokenKind.KEYWORD, "let"), (TokenKind.IDENTIFIER, "name"), (TokenKind.SYMBOL, "="),
            (TokenKind.STRING, "luna"), (TokenKind.SYMBOL, ";"), (TokenKind.IMPORT, "import"),
            (TokenKind.IDENTIFIER, "std"), (TokenKind.END_OF_INPUT, "")
        ]
        self.assertEqual(expected, kinds_and_texts("let name = \"luna\"; /* c */ import std"))


if __name__ == '__main__':
    unittest.main()
