"""The luna language: lexer, parser, runtime and the session/shell that drive them."""
