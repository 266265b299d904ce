#!/usr/bin/env python3
"""
Build a web page from markdown.

Combines body text rendered from a markdown file with head metadata to make
a *simple* web page. The page is written to <name>.html in the working
directory, where <name> is the markdown file name minus its extension.

Usage: webpage [-h] [-v] [-x] [-f <flags>] [-c <abs path to html root>] [-n navembedcode] <markdown file>
"""
from __future__ import annotations

import datetime
import os
import pwd
import shutil
import sys
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from css_search import find_stylesheet
from page_options import (
    HELP_TEXT,
    Configuration,
    HelpRequested,
    NoStylesheetFound,
    WebpageError,
    get_logger,
    resolve,
)
from render import render_markdown

LOGGER = get_logger(__name__)

# ---------- Markup ----------

DOCTYPE = "<!DOCTYPE html>\n"
PAGE_OPEN, PAGE_CLOSE = "<html>\n", "</html>\n"
HEAD_OPEN, HEAD_CLOSE = "<head>\n", "</head>\n"
BODY_OPEN, BODY_CLOSE = "<body>\n", "</body>\n"
COMMENT_OPEN, COMMENT_CLOSE = "<!--", "-->\n"
NAVIGATION_MARKER = "<!-- NAVIGATION EMBEDDING -->\n"


# ---------- Collaborators ----------

def current_user_name() -> str:
    """Name of the effective user; KeyError if the euid has no passwd entry."""
    name = pwd.getpwuid(os.geteuid()).pw_name
    LOGGER.debug("Effective user is %s", name)
    return name


def local_timestamp() -> str:
    return datetime.datetime.now().strftime("%c")


def copy_verbatim(path: Path, out: BinaryIO) -> int:
    """Copy the whole of ``path`` into ``out`` unchanged; returns the byte count."""
    expected = path.stat().st_size
    with path.open("rb") as src:
        shutil.copyfileobj(src, out)
        copied = src.tell()
    LOGGER.debug("Copied %d of %d bytes from %s", copied, expected, path)
    if copied != expected:
        raise OSError(f"Short copy of {path}: {copied} of {expected} bytes")
    return copied


# ---------- Assembly ----------

class WebpageWriter:
    """Writes the sections of one page, in order, to an open binary stream."""

    def __init__(
        self,
        config: Configuration,
        out: BinaryIO,
        directory: Path,
        user_name: Callable[[], str] = current_user_name,
        timestamp: Callable[[], str] = local_timestamp,
        renderer: Callable[[str, bool], str] = render_markdown,
    ) -> None:
        self.config = config
        self.out = out
        self.directory = directory
        self.user_name = user_name
        self.timestamp = timestamp
        self.renderer = renderer

    def write(self, text: str) -> None:
        data = text.encode("utf-8")
        written = self.out.write(data)
        LOGGER.debug("Wrote %d bytes to file, tried %d bytes", written, len(data))
        if written != len(data):
            raise OSError(f"Short write: {written} of {len(data)} bytes")

    def comment(self, text: str) -> None:
        self.write(COMMENT_OPEN + text + COMMENT_CLOSE)

    def write_page(self) -> None:
        # DOCTYPE comes before everything else; HTML5 only, so no DTD
        if self.config.include_doctype:
            self.write(DOCTYPE)
        self.write(PAGE_OPEN)
        self.write_head()
        self.write_body()
        self.write(PAGE_CLOSE)
        self.out.flush()

    def write_head(self) -> None:
        config = self.config
        self.write(HEAD_OPEN)
        if config.include_title:
            LOGGER.debug("Writing title as %s", config.source_base_name)
            self.write(f"<title>{config.source_base_name}</title>\n")
        if config.include_author:
            self.comment("Author is " + self.user_name())
        if config.include_datetime:
            self.comment("Datetime is " + self.timestamp())
        if config.stylesheet_root is not None:
            self.write_stylesheet_link(config.stylesheet_root)
        self.write_txt_file()
        self.write(HEAD_CLOSE)
        self.out.flush()

    def write_stylesheet_link(self, root: str) -> None:
        href = find_stylesheet(root, start=str(self.directory))
        if href is None:
            raise NoStylesheetFound(f"No css file found under {root}")
        LOGGER.debug("Writing link to css file %s", href)
        self.write(f'<link rel="stylesheet" href="{href}">\n')

    def write_txt_file(self) -> None:
        """Include <name>.txt in the head as-is, if there is one. It should be valid html."""
        txt_path = self.directory / self.config.txt_filename
        if not txt_path.is_file():
            LOGGER.debug("Txt file %s not provided", txt_path)
            return
        LOGGER.debug("Copying %s into web page", txt_path)
        copy_verbatim(txt_path, self.out)

    def write_body(self) -> None:
        config = self.config
        # invalid UTF-8 becomes U+FFFD rather than failing the build, as cmark does
        md_text = Path(config.source).read_text(encoding="utf-8", errors="replace")
        LOGGER.debug("Read markdown file %s", config.source)
        self.write(BODY_OPEN)
        self.write(self.renderer(md_text, config.extended))
        if config.navigation is not None:
            LOGGER.debug("Adding navigation embedding %s", config.navigation)
            self.write(NAVIGATION_MARKER)
            self.write(config.navigation + "\n")
        self.write(BODY_CLOSE)
        self.out.flush()


def make_webpage(config: Configuration, directory: Optional[Path] = None, **collaborators) -> Path:
    """
    Create <name>.html in ``directory`` (default: the working directory),
    truncating anything already there, and write the whole page into it.
    """
    directory = Path(directory) if directory is not None else Path(".")
    webpage_path = directory / config.webpage_filename
    LOGGER.debug("Using web page filename of %s", webpage_path)
    with webpage_path.open("wb") as out:
        WebpageWriter(config, out, directory, **collaborators).write_page()
    return webpage_path


# ---------- Main ----------

def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    try:
        config = resolve(argv)
        make_webpage(config)
    except HelpRequested:
        print(HELP_TEXT)
        return 0
    except WebpageError as err:
        print(f"webpage: {err}", file=sys.stderr)
        return err.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
