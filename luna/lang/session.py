"""Session control for the luna language. A Session owns the global Scope and runs source text through the
lexer -> parser -> runtime pipeline, either from a .luna file or line by line in command-line mode.
"""

import os

from luna.lang.error import LunaException
from luna.lang.lexical import Lexer, TokenKind
from luna.lang.parser import DirectoryProbe, Parser
from luna.lang.runtime import Runtime
from luna.lang.scope import Scope


class Session:
    """Governs a luna session, with control over the global Scope and module resolution."""
    SH_FILE = "<in>"                      # command-line interpreter filename
    MODULES_DIR = "lina_modules"          # default modules root, relative to the script's directory
    MODULES_ENV = "LUNA_MODULES"          # environment variable overriding MODULES_DIR
    BLOCK_OPENERS = ("if", "while", "loop", "func")

    def __init__(self, error_handler, path, modules_path=None, cmd_line=False, output=None, reader=None):
        self.error_handler = error_handler
        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.modules_path = Session.resolve_modules_path(modules_path, path)
        self.probe = DirectoryProbe(self.modules_path)

        self.scope = Scope()  # global Scope, lives as long as the session
        self.runtime = Runtime(output, reader, error_handler)
        self.pending = []     # source texts waiting to be run

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    self.add(file.read())
            except (OSError, UnicodeDecodeError):
                raise LunaException("'{}' could not be opened", path)
        elif not cmd_line:
            raise LunaException("'{}' is a reserved filename", Session.SH_FILE)

    @staticmethod
    def resolve_modules_path(modules_path, path=SH_FILE):
        """Returns the absolute modules root. Explicit modules_path wins over the LUNA_MODULES environment variable,
        which wins over MODULES_DIR. Relative roots are relative to the script's directory (cwd in command-line mode).
        """
        if modules_path is None:
            modules_path = os.environ.get(Session.MODULES_ENV, Session.MODULES_DIR)

        if not os.path.isabs(modules_path) and path != Session.SH_FILE:
            modules_path = os.path.join(os.path.dirname(os.path.abspath(path)), modules_path)
        return os.path.abspath(modules_path)

    @classmethod
    def from_source(cls, error_handler, source, **kwargs):
        """Returns a command-line style session with source already added."""
        kwargs.setdefault("cmd_line", True)
        sess = cls(error_handler, Session.SH_FILE, **kwargs)
        sess.add(source)
        return sess

    @staticmethod
    def needs_continuation(source):
        """Whether or not source still has an open if/while/loop/func block. Used for line continuations in the shell.
        Source that fails to lex is considered complete, so that running it reports the error.
        """
        depth = 0
        lexer = Lexer(source)
        try:
            token = lexer.next_token()
            while not token.is_(TokenKind.END_OF_INPUT):
                if token.is_(TokenKind.KEYWORD) and token.text in Session.BLOCK_OPENERS:
                    depth += 1
                elif token.is_(TokenKind.KEYWORD, "end"):
                    depth -= 1
                token = lexer.next_token()
        except LunaException:
            return False
        return depth > 0

    def add(self, source):
        """Queues source text. Parsing and execution are delayed until run is called."""
        self.pending.append(source)

    def parse(self, source):
        """Lexes and parses source. Imports are checked against this session's modules root."""
        self.error_handler.register_source(self.path, source)  # in case error is raised
        return Parser(Lexer(source), self.probe, self.error_handler).parse()

    def run(self):
        """Runs every queued source text against the global Scope. Each text is fully parsed before any of it runs.
        Raises any errors that are encountered. Returns the last evaluated value.
        """
        while self.pending:
            source = self.pending.pop(0)
            program = self.parse(source)
            self.runtime.run(program, self.scope)
            self.error_handler.remove_source(self.path)  # error was not raised
        return self.scope.last_value

    @property
    def exports(self):
        return self.runtime.exports
