import sys


class TapError(Exception):
    """Raised when the TAP stream is driven out of order."""


class BailOut(Exception):
    pass


def _escape(description: str) -> str:
    return description.replace('#', '\\#')


def _quote(value) -> str:
    if value is None:
        return 'undef'
    return f"'{value}'"


class TapReporter:
    """
    Writes a Test Anything Protocol stream.
    Results go to `out`, failure diagnostics go to `err` (same split as Test::More).
    """

    def __init__(self, out=None, err=None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.planned = None
        self.results = []

    @property
    def current(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r['ok'])

    def _write(self, stream, line):
        stream.write(line + '\n')
        stream.flush()

    def plan(self, count: int):
        if self.planned is not None:
            raise TapError("You tried to plan twice")
        if self.results:
            raise TapError("The plan must come before the first test")
        if count < 0:
            raise TapError(f"Number of tests must be a positive integer, got {count}")
        self.planned = count
        self._write(self.out, f"1..{count}")

    def ok(self, passed, description: str = '') -> bool:
        passed = bool(passed)
        number = self.current + 1
        self.results.append({
            "number": number,
            "ok": passed,
            "description": description,
        })

        line = "ok" if passed else "not ok"
        line = f"{line} {number}"
        if description:
            line = f"{line} - {_escape(description)}"
        self._write(self.out, line)

        if not passed:
            if description:
                self.diag(f"  Failed test '{description}'")
            else:
                self.diag("  Failed test")
        return passed

    def is_(self, got, expected, description: str = '') -> bool:
        if got is None or expected is None:
            passed = got is None and expected is None
        else:
            passed = str(got) == str(expected)

        if not self.ok(passed, description):
            self.diag(f"         got: {_quote(got)}")
            self.diag(f"    expected: {_quote(expected)}")
        return passed

    def diag(self, message):
        for line in str(message).splitlines() or ['']:
            self._write(self.err, f"# {line}".rstrip())

    def note(self, message):
        for line in str(message).splitlines() or ['']:
            self._write(self.out, f"# {line}".rstrip())

    def bail_out(self, reason: str = ''):
        self._write(self.out, f"Bail out!  {reason}".rstrip())
        raise BailOut(reason)

    def exit_status(self) -> int:
        if self.failed:
            return min(self.failed, 254)
        if self.planned is not None and self.planned != self.current:
            return 255
        return 0

    def finish(self) -> int:
        """Emit the closing diagnostics and return the exit status for the run."""
        ran = self.current
        if self.planned is None:
            # no plan up front: trailing plan, like done_testing()
            self.planned = ran
            self._write(self.out, f"1..{ran}")
        elif self.planned != ran:
            noun = "test" if self.planned == 1 else "tests"
            self.diag(f"Looks like you planned {self.planned} {noun} but ran {ran}.")

        if self.failed:
            noun = "test" if self.failed == 1 else "tests"
            self.diag(f"Looks like you failed {self.failed} {noun} of {ran}.")

        return self.exit_status()
