#!/usr/bin/env python3
"""Command line options for webpage, resolved once into a Configuration."""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_DEFAULT_LEVEL = logging.WARNING

USAGE = "Usage: webpage [-h] [-v] [-x] [-f <flags>] [-c <abs path to html root>] [-n navembedcode] <markdown file>"

HELP_TEXT = USAGE + """

Broadly speaking, the expectation is that this tool will be used as part of a script that
traverses a directory hierarchy containing md files and converts them to html. In particular,
it's expected that the markdown file resides in the current working directory, and that this
directory is underneath html root ( yes, html root not markdown root ).

 -h                         : print this help
 -v                         : output verbose information on stderr
 -x                         : extended rendering ( footnotes, heading anchors, highlighted code )
 -f <flags>                 : <flags> are hexadecimal, bitwise as follows -
                            : 0x01 - omit DOCTYPE
                            : 0x02 - omit title
                            : 0x04 - omit datetime
                            : 0x08 - omit author
 -c <abs path to html root> : Enables linking to css file. File linked will be first found
                              searching from cwd towards html root. NB Requires an absolute,
                              not relative, path.
 -n <navembedcode>          : HTML tacked on to the end of the body, e.g. for navigation.
 <markdown file>            : File containing Commonmark markdown.
"""

# options taking a value, and plain switches
VALUE_OPTIONS = "fcn"
SWITCH_OPTIONS = "hvx"

HEX_PREFIX_RE = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]*)")


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger with default configuration applied."""
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=_DEFAULT_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    return logger


def set_verbose(enabled: bool) -> None:
    level = logging.DEBUG if enabled else _DEFAULT_LEVEL
    for name in ("webpage", "page_options", "css_search", "render"):
        logging.getLogger(name).setLevel(level)


LOGGER = get_logger(__name__)


# ---------- Errors ----------

class WebpageError(Exception):
    """A user or configuration error; ends the run with ``exit_code``."""

    exit_code = 1


class MissingSource(WebpageError):
    exit_code = 1


class MissingOptionValue(WebpageError):
    exit_code = 2


class UnknownOption(WebpageError):
    exit_code = 3


class NoStylesheetFound(WebpageError):
    exit_code = 4


class AbsolutePathRequired(WebpageError):
    exit_code = 5


class OutsideDeclaredRoot(WebpageError):
    exit_code = 6


class ExcessArguments(WebpageError):
    exit_code = 7


class HelpRequested(Exception):
    """Raised by ``-h``; the caller prints HELP_TEXT and exits normally."""


# ---------- Omission flags ----------

class Omit(enum.IntFlag):
    DOCTYPE = 0x01
    TITLE = 0x02
    DATETIME = 0x04
    AUTHOR = 0x08


def parse_mask(text: str) -> int:
    """Read a hexadecimal flag value, leniently, the way strtol(text, NULL, 16) does."""
    sign, digits = HEX_PREFIX_RE.match(text).groups()
    if not digits:
        return 0
    value = int(digits, 16)
    return -value if sign == "-" else value


def decode_omissions(mask: int) -> dict:
    """Map an omission mask onto the include_* fields. Unknown bits are ignored."""
    return {
        "include_doctype": not mask & Omit.DOCTYPE,
        "include_title": not mask & Omit.TITLE,
        "include_datetime": not mask & Omit.DATETIME,
        "include_author": not mask & Omit.AUTHOR,
    }


def base_name(source: str) -> str:
    """File name of ``source`` without its final extension."""
    name = Path(source).name
    stem, dot, _ = name.rpartition(".")
    if dot and stem:
        return stem
    return name


# ---------- Configuration ----------

@dataclass(frozen=True)
class Configuration:
    source: str
    source_base_name: str
    include_doctype: bool = True
    include_title: bool = True
    include_datetime: bool = True
    include_author: bool = True
    stylesheet_root: Optional[str] = None
    navigation: Optional[str] = None
    verbose: bool = False
    extended: bool = False

    @property
    def webpage_filename(self) -> str:
        return self.source_base_name + ".html"

    @property
    def txt_filename(self) -> str:
        return self.source_base_name + ".txt"


def iter_options(argv, operands):
    """
    Walk argv getopt-style, yielding (option, value) pairs in order and
    appending operands to ``operands`` as they turn up. Errors are raised
    when the offending argument is reached, so earlier options act first.
    Options may be clustered (-vx), values attached (-f0x05) or separate
    (-f 0x05), and operands may appear anywhere; '--' ends option parsing.
    """
    args = list(argv)
    i = 0
    while i < len(args):
        arg = args[i]
        i += 1
        if arg == "--":
            operands.extend(args[i:])
            return
        if not arg.startswith("-") or arg == "-":
            operands.append(arg)
            continue
        pos = 1
        while pos < len(arg):
            opt = arg[pos]
            pos += 1
            if opt in SWITCH_OPTIONS:
                yield opt, None
            elif opt in VALUE_OPTIONS:
                if pos < len(arg):
                    value = arg[pos:]
                elif i < len(args):
                    value = args[i]
                    i += 1
                else:
                    raise MissingOptionValue(f"Option -{opt} requires a value")
                yield opt, value
                break
            else:
                raise UnknownOption(f"Unknown option -{opt} specified")


def resolve(argv) -> Configuration:
    """Turn command line arguments (without the program name) into a Configuration."""
    set_verbose(False)
    verbose = False
    mask = 0
    stylesheet_root = None
    navigation = None
    extended = False
    operands = []
    for opt, value in iter_options(argv, operands):
        if opt == "v":
            verbose = True
            set_verbose(True)
            LOGGER.debug("Verbose reporting ON")
        LOGGER.debug("Processing option %s", opt)
        if opt == "h":
            raise HelpRequested()
        if opt == "f":
            LOGGER.debug("Read flags as %s", value)
            mask |= parse_mask(value)
            LOGGER.debug("Converted flags to %#x", mask)
        elif opt == "c":
            LOGGER.debug("Read css root as %s", value)
            if not value.startswith("/"):
                raise AbsolutePathRequired("Absolute path required for 'c' option")
            stylesheet_root = value
        elif opt == "n":
            LOGGER.debug("Read navigation embedding as %s", value)
            navigation = value
        elif opt == "x":
            extended = True

    if not operands:
        raise MissingSource("Expecting a markdown file to be specified")
    if len(operands) > 1:
        raise ExcessArguments(f"Expecting one markdown file, got {len(operands)}: {' '.join(operands)}")

    source = operands[0]
    config = Configuration(
        source=source,
        source_base_name=base_name(source),
        stylesheet_root=stylesheet_root,
        navigation=navigation,
        verbose=verbose,
        extended=extended,
        **decode_omissions(mask),
    )
    LOGGER.debug("Resolved %s", config)
    return config
