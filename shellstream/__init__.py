"""shellstream - Shell scripting with lazy streams, patterns and guarded resources."""

import logging

from shellstream.shell import (
    Fold,
    Shell,
    cat,
    concat,
    empty,
    first,
    fold,
    handlein,
    limit,
    limit_while,
    once,
    select,
    sh,
    using,
    view,
)
from shellstream.pattern import (
    Pattern,
    alpha_num,
    any_char,
    between,
    char,
    choice,
    count,
    decimal,
    digit,
    has,
    hex_digit,
    inside,
    letter,
    lower,
    many,
    many1,
    match,
    newline,
    none_of,
    not_char,
    one_of,
    option,
    plus,
    prefix,
    satisfy,
    signed,
    skip,
    space,
    spaces,
    spaces1,
    star,
    suffix,
    tab,
    text,
    upper,
)
from shellstream.protected import (
    Protected,
    Task,
    checkpoint,
    current_task,
    fork,
    sleep,
    wait,
)
from shellstream.executor import ExitCode, ExitFailure, ExitSuccess, stream, system
from shellstream.filesystem import (
    FileStatus,
    appendhandle,
    cd,
    cp,
    datefile,
    du,
    home,
    ls,
    lstree,
    mkdir,
    mktemp,
    mktempdir,
    mktree,
    mv,
    pwd,
    readhandle,
    realpath,
    rm,
    rmdir,
    rmtree,
    stat,
    testdir,
    testfile,
    writehandle,
)
from shellstream.environment import env, export, need, unset
from shellstream.prelude import (
    append,
    date,
    die,
    echo,
    err,
    exit,
    find,
    grep,
    input,
    output,
    sed,
    stderr,
    stdin,
    stdout,
    time,
    touch,
    yes,
)
from shellstream.errors import ConfigurationError, ShellStreamError, TaskCancelled
from shellstream.tools import clear_tool_cache

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    # Streams
    "Fold",
    "Shell",
    "cat",
    "concat",
    "empty",
    "first",
    "fold",
    "handlein",
    "limit",
    "limit_while",
    "once",
    "select",
    "sh",
    "using",
    "view",
    # Patterns
    "Pattern",
    "alpha_num",
    "any_char",
    "between",
    "char",
    "choice",
    "count",
    "decimal",
    "digit",
    "has",
    "hex_digit",
    "inside",
    "letter",
    "lower",
    "many",
    "many1",
    "match",
    "newline",
    "none_of",
    "not_char",
    "one_of",
    "option",
    "plus",
    "prefix",
    "satisfy",
    "signed",
    "skip",
    "space",
    "spaces",
    "spaces1",
    "star",
    "suffix",
    "tab",
    "text",
    "upper",
    # Guarded resources and tasks
    "Protected",
    "Task",
    "checkpoint",
    "current_task",
    "fork",
    "sleep",
    "wait",
    # Processes
    "ExitCode",
    "ExitFailure",
    "ExitSuccess",
    "stream",
    "system",
    # Filesystem
    "FileStatus",
    "appendhandle",
    "cd",
    "cp",
    "datefile",
    "du",
    "home",
    "ls",
    "lstree",
    "mkdir",
    "mktemp",
    "mktempdir",
    "mktree",
    "mv",
    "pwd",
    "readhandle",
    "realpath",
    "rm",
    "rmdir",
    "rmtree",
    "stat",
    "testdir",
    "testfile",
    "writehandle",
    # Environment
    "env",
    "export",
    "need",
    "unset",
    # Commands
    "append",
    "date",
    "die",
    "echo",
    "err",
    "exit",
    "find",
    "grep",
    "input",
    "output",
    "sed",
    "stderr",
    "stdin",
    "stdout",
    "time",
    "touch",
    "yes",
    # Errors and configuration
    "ConfigurationError",
    "ShellStreamError",
    "TaskCancelled",
    "clear_tool_cache",
]
