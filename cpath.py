#!/usr/bin/env python3
"""
cpath - inspect and edit the persisted Windows PATH
- Show the user and/or system Path, one entry per line
- Append, prepend or delete a single entry in one scope
- Duplicate and lookup checks ignore case and surrounding whitespace

Usage:
  cpath                          # user path, then system path
  cpath -c user -v               # user path with a header line
  cpath -c user -a C:\\Tools      # append to the user path
  cpath -c system -p C:\\Tools    # prepend to the system path (needs admin)
  cpath -c user -d c:\\tools      # delete from the user path
  cpath --json                   # JSON document instead of plain lines

  cpath-user                     # same tool, defaults to the user scope and
                                 # always lists both scopes when not editing

Logs:
  --log-file FILE appends one line per change (with before/after values at
  --debug level). --debug also mirrors the log to stderr.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from rich.console import Console

import path_editor
from path_errors import CPathError, ConfigurationError, ErrorKind
from path_store import SEPARATOR, PathStore, RegistryPathStore, Scope, serialize_path


__version__ = "1.0.0"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

logger = logging.getLogger("cpath")
logger.addHandler(logging.NullHandler())


# ---- Variants ----------------------------------------------------------------

# The tool ships as two commands that differ only in these knobs.

@dataclass(frozen=True)
class VariantPolicy:
    name: str
    default_context: str
    contexts: Tuple[str, ...]
    require_context: bool     # a mutation needs an explicit, non-empty context
    display_all_scopes: bool  # always list user then system, and only when nothing changed
    combinable: bool = False  # delete/append/prepend may be given together


VARIANTS: Dict[str, VariantPolicy] = {
    "cpath": VariantPolicy(
        name="cpath",
        default_context="both",
        contexts=("user", "system", "both"),
        require_context=True,
        display_all_scopes=False,
    ),
    "cpath-user": VariantPolicy(
        name="cpath-user",
        default_context="user",
        contexts=("user", "system"),
        require_context=False,
        display_all_scopes=True,
    ),
}


# ---- Configuration -----------------------------------------------------------

class OperationKind(Enum):
    DISPLAY = "display"
    APPEND = "append"
    PREPEND = "prepend"
    DELETE = "delete"


EDITORS: Dict[OperationKind, Callable[[List[str], str], List[str]]] = {
    OperationKind.APPEND: path_editor.append,
    OperationKind.PREPEND: path_editor.prepend,
    OperationKind.DELETE: path_editor.delete,
}


@dataclass(frozen=True)
class Configuration:
    variant: VariantPolicy
    context: str
    verbose: bool = False
    operation: OperationKind = OperationKind.DISPLAY
    item: Optional[str] = None
    output_json: bool = False
    log_file: Optional[str] = None
    debug: bool = False

    @property
    def mutating(self) -> bool:
        return self.operation is not OperationKind.DISPLAY

    @property
    def scope(self) -> Scope:
        """The single scope a mutation targets."""
        return Scope.from_context(self.context)


class OptionParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad arguments as ConfigurationError instead of exiting."""

    def error(self, message):
        raise ConfigurationError(message)


def _exit_code_epilog() -> str:
    lines = ["exit codes:", "  0  success", "  1  unexpected error"]
    for kind in ErrorKind:
        lines.append(f"  {kind.exit_code}  {kind.summary}")
    return "\n".join(lines)


def build_parser(policy: VariantPolicy) -> OptionParser:
    parser = OptionParser(
        prog=policy.name,
        description="Show or edit the persisted PATH for the current user or the whole system.",
        epilog=_exit_code_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--context",
        default=policy.default_context,
        help=f"[{' | '.join(policy.contexts)}] Scope to show or edit "
             f"(default: {policy.default_context}). 'user' or 'system' is required for changes.",
    )
    parser.add_argument("-d", "--delete", metavar="ITEM", help="Delete the specified entry from the path")
    parser.add_argument("-a", "--append", metavar="ITEM", help="Append item to path")
    parser.add_argument("-p", "--prepend", metavar="ITEM", help="Prepend item to path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print a header line before each scope")
    parser.add_argument("--json", dest="output_json", action="store_true", help="Print the path as a JSON document")
    parser.add_argument("--log-file", metavar="FILE", help="Append a log of changes to FILE")
    parser.add_argument("--debug", action="store_true", help="Log debug details to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def validate_options(args: argparse.Namespace, policy: VariantPolicy) -> Configuration:
    """Check flag combinations in order; the first broken rule wins."""
    to_delete = args.delete or None
    to_append = args.append or None
    to_prepend = args.prepend or None
    context = (args.context or "").strip().lower()
    mutating = bool(to_delete or to_append or to_prepend)

    if not policy.combinable:
        if to_delete and (to_append or to_prepend):
            raise ConfigurationError("cannot combine delete with an add operation.")

        if to_append and to_prepend:
            raise ConfigurationError("cannot combine append and prepend.")

    if policy.require_context and mutating and not context:
        raise ConfigurationError("context required for mutation.")

    if context and context not in policy.contexts:
        raise ConfigurationError(
            f"invalid context '{args.context}'; expected one of: {', '.join(policy.contexts)}."
        )

    if mutating and context == "both":
        raise ConfigurationError("context must be 'user' or 'system' for a mutation.")

    # An item is stored as a single segment
    for item in (to_delete, to_append, to_prepend):
        if item is None:
            continue
        if not item.strip():
            raise ConfigurationError("path entry cannot be blank.")
        if SEPARATOR in item:
            raise ConfigurationError(f"path entry cannot contain '{SEPARATOR}': {item}")

    if not context:
        context = policy.default_context

    if to_delete:
        operation, item = OperationKind.DELETE, to_delete
    elif to_append:
        operation, item = OperationKind.APPEND, to_append
    elif to_prepend:
        operation, item = OperationKind.PREPEND, to_prepend
    else:
        operation, item = OperationKind.DISPLAY, None

    return Configuration(
        variant=policy,
        context=context,
        verbose=args.verbose,
        operation=operation,
        item=item,
        output_json=args.output_json,
        log_file=args.log_file,
        debug=args.debug,
    )


def parse_options(parser: OptionParser, argv: Optional[Sequence[str]], policy: VariantPolicy) -> Configuration:
    args = parser.parse_args(argv)
    return validate_options(args, policy)


# ---- Logging -----------------------------------------------------------------

def setup_logger(log_file: Optional[str] = None, debug: bool = False) -> logging.Logger:
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    fmt = logging.Formatter(LOG_FORMAT)

    # Avoid duplicate handlers if main() is called more than once
    if log_file:
        log_path = str(Path(log_file).resolve())
        if not any(isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == log_path for h in logger.handlers):
            fh = logging.FileHandler(log_path, encoding="utf-8")
            fh.setFormatter(fmt)
            logger.addHandler(fh)

    if debug and not any(type(h) is logging.StreamHandler for h in logger.handlers):
        sh = logging.StreamHandler()
        sh.setLevel(logging.DEBUG)
        sh.setFormatter(fmt)
        logger.addHandler(sh)

    return logger


# ---- Display -----------------------------------------------------------------

def make_console() -> Console:
    # Paths are printed verbatim: no markup, emoji codes, highlighting or wrapping.
    return Console(markup=False, emoji=False, highlight=False, soft_wrap=True)


def display_scopes(config: Configuration) -> List[Scope]:
    if config.variant.display_all_scopes or config.context == "both":
        return [Scope.USER, Scope.SYSTEM]
    return [config.scope]


def show(config: Configuration, store: PathStore, scopes: List[Scope], console: Console) -> None:
    listing = [(scope, store.load(scope)) for scope in scopes]

    if config.output_json:
        console.print(json.dumps({scope.label: entries for scope, entries in listing}, indent=2))
        return

    for scope, entries in listing:
        if config.verbose:
            console.print(f"========{scope.label.capitalize()} Path========", style="bold")
        for entry in entries:
            console.print(entry)


# ---- Run ---------------------------------------------------------------------

def run(config: Configuration, store: PathStore, console: Console) -> int:
    if not config.mutating:
        show(config, store, display_scopes(config), console)
        return 0

    scope = config.scope
    current = store.load(scope)
    updated = EDITORS[config.operation](current, config.item)
    store.save(scope, updated, expected=current)

    logger.info("%s | scope=%s | item=%s", config.operation.name, scope, config.item)
    logger.debug("before: %s", serialize_path(current))
    logger.debug("after : %s", serialize_path(updated))

    if not config.variant.display_all_scopes:
        show(config, store, [scope], console)
    return 0


def main(argv: Optional[Sequence[str]] = None, store: Optional[PathStore] = None,
         variant: str = "cpath") -> int:
    policy = VARIANTS[variant]
    parser = build_parser(policy)
    console = make_console()

    try:
        config = parse_options(parser, argv, policy)
    except ConfigurationError as err:
        console.print("Invalid command line options")
        console.print(str(err))
        console.print(parser.format_usage().rstrip())
        return err.exit_code

    setup_logger(config.log_file, config.debug)
    logger.debug("%s %s | context=%s | item=%s", policy.name, config.operation.value, config.context, config.item)

    try:
        if store is None:
            store = RegistryPathStore()
        return run(config, store, console)
    except CPathError as err:
        logger.error("%s failed: %s", config.operation.value, err)
        console.print(f"Error: {err}")
        return err.exit_code
    except Exception as err:
        logger.exception("Unexpected failure")
        console.print(f"Error: {err}")
        return 1


def main_user(argv: Optional[Sequence[str]] = None, store: Optional[PathStore] = None) -> int:
    return main(argv, store, variant="cpath-user")


if __name__ == "__main__":
    sys.exit(main())
