import shlex

from bashls.catalog.shell import exec_shell_script

BUILTINS: tuple[str, ...] = (
    ".",
    ":",
    "[",
    "alias",
    "bg",
    "bind",
    "break",
    "builtin",
    "caller",
    "cd",
    "command",
    "compgen",
    "complete",
    "continue",
    "declare",
    "dirs",
    "disown",
    "echo",
    "enable",
    "eval",
    "exec",
    "exit",
    "export",
    "false",
    "fc",
    "fg",
    "getopts",
    "hash",
    "help",
    "history",
    "jobs",
    "kill",
    "let",
    "local",
    "logout",
    "popd",
    "printf",
    "pushd",
    "pwd",
    "read",
    "readonly",
    "return",
    "set",
    "shift",
    "shopt",
    "source",
    "suspend",
    "test",
    "times",
    "trap",
    "true",
    "type",
    "typeset",
    "ulimit",
    "umask",
    "unalias",
    "unset",
    "wait",
)

_BUILTIN_SET = frozenset(BUILTINS)


class Builtins:
    """Static catalog of bash builtins, documented through ``help``."""

    def list(self) -> list[str]:
        return list(BUILTINS)

    def contains(self, name: str) -> bool:
        return name in _BUILTIN_SET

    async def documentation(self, name: str) -> str:
        return await exec_shell_script(f"help {shlex.quote(name)}")
