#!/usr/bin/env python3
"""
Find the stylesheet a web page should link to.

The search starts in the page's own directory and walks up through its
parents until a css file turns up or the declared html root has been
searched. The root must be absolute: at the point we are invoked we don't
know how deeply nested we are, so a relative root can't be compared against
anything. The working directory is never changed; every directory is
addressed by a growing ``./../../`` prefix, which is also the shape of the
link that ends up in the html.
"""
from __future__ import annotations

import os
from typing import Callable, Iterable, Optional

from page_options import OutsideDeclaredRoot, get_logger

LOGGER = get_logger(__name__)

CSS_MARKER = ".css"
FILESYSTEM_ROOT = "/"


def find_stylesheet(
    root: str,
    start: str = ".",
    listdir: Callable[[str], Iterable[str]] = os.listdir,
    realpath: Callable[[str], str] = os.path.realpath,
) -> Optional[str]:
    """
    Return the relative path ('./', then '../' per level, then the file name)
    of the first entry whose name contains '.css', or None if the root was
    searched without finding one.

    Raises OutsideDeclaredRoot if the walk reaches '/' without passing the
    root, which only happens when ``start`` is not underneath it.
    """
    root = os.path.normpath(root)
    prefix = "./"
    while True:
        search_dir = os.path.join(start, prefix)
        LOGGER.debug("Searching %s for css...", search_dir)
        for name in listdir(search_dir):
            if CSS_MARKER in name:
                LOGGER.debug("Found css, file is %s%s", prefix, name)
                return prefix + name

        abs_path = realpath(search_dir)
        LOGGER.debug("Real path just searched was %s", abs_path)
        if abs_path == FILESYSTEM_ROOT:
            raise OutsideDeclaredRoot(f"Invoked outside of html root hierarchy {root}")
        if abs_path == root:
            LOGGER.debug("Found no css file under %s", root)
            return None
        prefix += "../"
