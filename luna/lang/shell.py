"""Handles interactive/command-line mode for the luna interpreter. Uses cmd as backend."""

import cmd

from luna.lang.runtime import represent


class Shell(cmd.Cmd):
    """luna interpreter shell."""
    intro = "luna interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary luna source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line = self._tmp_line + line + "\n"

            if self.sess.needs_continuation(line):
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.add(line)
            self.sess.run()

    def onecmd(self, line):
        """Keeps cmd.Cmd from treating luna keywords as shell commands while a block is open."""
        if self._tmp_line and line != "EOF":
            return self.default(line)
        return super().onecmd(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the luna interpreter!\n\n"
              "luna is a small scripting language. Statements run as soon as they are complete:\n"
              "blocks opened with 'if', 'while', 'loop' or 'func' continue until their 'end'.\n\n"
              "Try it out by typing 'var x = 5;' and then 'print x;'. Declare a function with\n"
              "'func greet print \"hi\"; end' and call it by typing 'greet'.")

    def do_vars(self, arg):
        """Lists the names bound in the global scope."""
        for name, value in sorted(self.sess.scope.variables.items()):
            print(f"{name} = {represent(value)}")
        for name in sorted(self.sess.scope.functions):
            print(f"func {name}")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
