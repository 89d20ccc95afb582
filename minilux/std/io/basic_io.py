import builtins
import sys


class BasicIO:
    """Console collaborator used by print, printf and read."""
    def __init__(self, stdout=None):
        self.stdout = stdout

    def write(self, text: str):
        out = self.stdout if self.stdout is not None else sys.stdout
        out.write(text)
        out.flush()

    def read_line(self) -> str:
        # End of input reads as an empty line.
        try:
            line = builtins.input()
        except EOFError:
            return ''
        return line.rstrip('\r\n')
