"""
clitree top-level runner: reserved global options around the dispatcher.

Runner
- owns the root Command (named after the program file unless a name is
  given) and a version string.
- the root always carries the reserved flags --help/-h and --version/-v;
  --config/-c is available on demand via runner.root.config_option().

run(prompt), in order
1. empty prompt: the root action is invoked with the root defaults (usage is
   shown when the root has no action); reserved flags are not looked at.
2. --help or -h anywhere in the prompt: the root usage is printed and
   nothing is dispatched.
3. --version or -v anywhere in the prompt: "Version: <version>" is printed,
   then dispatch continues with the whole prompt. At the root the flag itself
   resolves to the reserved option, so `app -v` prints the version and then
   runs the root action.
4. the whole prompt is dispatched from the root.

Runners never mutate their tree while running, so run() may be called any
number of times.
"""
import logging
import os.path
import sys
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .commands import *
from .options import *
from .utils import *

logger = logging.getLogger(__name__)


class Runner(metaclass=IntrospectiveType):
    """
    Entry point holding the root command and the program version.

    Parameters
    - action: Callable[[Settings], Any] | Unset, the root action.
    - name: str | Unset, program name (default: basename of sys.argv[0]).
    - version: str | Unset, printed by --version (default: "").
    - shell: print faults (True, default) or raise them (False).
    - colorful: style output (False by default).
    """

    __introspectable__ = (
        "root",
    )

    __displayable__ = (
        "root",
        "version",
    )

    def __new__(cls, action=Unset, /, *, name=Unset, version=Unset, shell=True, colorful=False):
        if not isinstance(name, str | Unset):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")

        self = super().__new__(cls)
        self._root = Command(
            coalesce(name, os.path.basename(sys.argv[0])),
            action=action,
            shell=shell,
            colorful=colorful,
        )
        self._root.option(HELP_NAME, HELP_ALIAS, descr=HELP_DESCR)
        self._root.option(VERSION_NAME, VERSION_ALIAS, descr=VERSION_DESCR)
        self._version = ""
        self.version = coalesce(version, "")
        return self

    @property
    def version(self):
        return self._version

    @version.setter
    def version(self, version):
        if not isinstance(version, str):
            raise TypeError(f"{type(self).__typename__} 'version' must be a string")
        self._version = version

    def _versioner(self):
        styles = defaultdict(str, {
            "version-label": "bold #FF4D94",  # magenta-pink label
            "program-version": "bold #00E6FF",  # cyan version
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.root.colorful else ""

        version = Text.assemble(("Version:", styler("version-label")), " ", (self.version, styler("program-version")))
        Console(highlight=False).print(version, soft_wrap=True)

    def run(self, prompt=Unset, /):
        """
        Run the program against a prompt (default: sys.argv[1:]) and return
        the dispatch Result.
        """
        tokens = tokenize(prompt)

        if not tokens:
            logger.debug("empty prompt, running the root command")
            return self.root._dispatch(tokens)

        if any(token in ("--" + HELP_NAME, "-" + HELP_ALIAS) for token in tokens):
            logger.debug("help requested")
            self.root._helper()
            return Result(Outcome.USAGE, (self.root,), Settings.fresh(self.root.options))

        if any(token in ("--" + VERSION_NAME, "-" + VERSION_ALIAS) for token in tokens):
            logger.debug("version requested")
            self._versioner()

        return self.root._dispatch(tokens)

    __invoke__ = run

    def main(self, prompt=Unset, /):
        """
        Run and exit the process with the result code (0 on success, 1 on failure).
        """
        raise SystemExit(self.run(prompt).code)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for runners, commands or plain callables.

    - object with __invoke__: called with prompt; its Result is returned.
    - plain callable: wrapped into a Runner as the root action, then run.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if callable(object):
        return invoke(Runner(object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Runner",
    "invoke",
)
