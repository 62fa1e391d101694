"""Path utilities: joining, slash normalisation and folder stripping."""

import re
from typing import Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_MULTI_SLASH_RE = re.compile(r"/{2,}")


def strip_starting_slash(path: str) -> str:
    """Strip a single leading slash if present."""
    return path[1:] if path.startswith("/") else path


def strip_ending_slash(path: str) -> str:
    """Strip a single trailing slash if present."""
    return path[:-1] if path.endswith("/") else path


def add_starting_slash(path: Optional[str] = None) -> str:
    """Return *path* with a leading slash, or ``"/"`` for an empty path."""
    if not path:
        return "/"
    if not path.startswith("/"):
        return f"/{path}"
    return path


def remove_first_folder(slug: str) -> str:
    """``"de/blog/post"`` → ``"blog/post"``."""
    parts = strip_starting_slash(slug).split("/")
    return "/".join(parts[1:])


def remove_last_folder(slug: str) -> str:
    """``"blog/post/"`` → ``"blog"``."""
    parts = strip_ending_slash(slug).split("/")
    return "/".join(parts[:-1])


def join_path(*parts: Optional[str]) -> str:
    """Join two or more path segments, avoiding duplicate slashes.

    Empty and ``None`` segments are dropped. When the first remaining segment
    carries a scheme (``https://``), the ``scheme://`` separator is kept intact
    while every other run of slashes is collapsed.
    """
    segments = [p for p in parts if p]
    if not segments:
        return ""

    first = segments[0]
    if "://" in first:
        scheme, _, rest = first.partition("://")
        path = f"{scheme}://{rest}/" + "/".join(segments[1:])
        return _MULTI_SLASH_RE.sub("/", path).replace(":/", "://", 1)

    return _MULTI_SLASH_RE.sub("/", "/".join(segments))


def extend_url(
    href: str,
    prefix: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
) -> str:
    """Prefix *href* and append *params* as query parameters.

    Relative results always start with a slash. Parameters in *params*
    replace same-named parameters already present in *href*.
    """
    parts = urlsplit(join_path(prefix, href))
    path = parts.path if parts.scheme else add_starting_slash(parts.path)

    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    if params:
        query.update(params)

    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), parts.fragment))
