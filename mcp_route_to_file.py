#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.10"
# dependencies = ["mcp>=0.1.0"]
#
# [project.optional-dependencies]
# dev = ["pytest>=7.0", "pytest-asyncio>=0.21.0"]
# ///

# ==============================================================================
# ROUTE TO FILE SERVER - Find the page source file behind a frontend route
# ==============================================================================
# Keywords: route, page file, Next.js, Vue, React, views, pages, dynamic route
# Purpose: MCP server that maps a runtime URL path to the file that renders it
# What it does: Probes routing conventions on disk, then falls back to keywords
# ==============================================================================
"""
`mcp_route_to_file.py` – **Model Context Protocol** server that maps a frontend
route path (e.g. ``/guild/42/salary``) to the source file that renders it.

AI AGENT QUICK REFERENCE
------------------------
**What this does**: Turns a URL path from a running app into a file path
**When to use**: You see a page in the browser and need the file to edit
**Key capability**: Handles dynamic segments (``/user/123``) by dropping IDs

Tools Provided
--------------
1. **`open_route_source`** – Resolve a route path to its page source file
   - Exact pass: tries every file name the detected conventions allow
   - Keyword pass: ranks page files whose path contains the route words

Supported Conventions
---------------------
* Next.js App Router: ``app/<route>/page.tsx``
* Next.js Pages Router: ``pages/<route>.tsx`` or ``pages/<route>/index.tsx``
* Vue / React views: ``src/views``, ``src/pages``, ``views``, ``pages`` with
  ``<route>/index.vue`` or ``<parent>/<Name>.vue`` (also tsx, jsx, js)

Dynamic Segments
----------------
Purely numeric segments, UUIDs and 24 character hex object IDs are dropped
before the keyword pass, so ``/guild/42/salary`` searches for ``guild`` and
``salary``.

Configuration
-------------
Default project root comes from:
- Tool argument: projectRoot
- Environment variable: ROUTE_TO_FILE_PROJECT_ROOT
- Otherwise the current working directory

Quick start
-----------
```bash
# 1. CLI usage
./mcp_route_to_file.py resolve /dashboard/settings --project-root ~/code/web
./mcp_route_to_file.py resolve /user/123 --keyword profile
./mcp_route_to_file.py candidates /guild/salary --project-root ~/code/web

# 2. Run as MCP server (stdio)
ROUTE_TO_FILE_PROJECT_ROOT=~/code/web ./mcp_route_to_file.py
```

Implementation Notes
--------------------
* Read-only: nothing here writes to disk
* ``node_modules`` and ``.git`` are never walked
* Paths are not confined to the project root; ``..`` segments resolve as-is
"""

from __future__ import annotations

import argparse
import enum
import json
import logging
import os
import re
import sys
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, NamedTuple

from mcp.server.fastmcp import FastMCP

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

PROJECT_ROOT_ENV = "ROUTE_TO_FILE_PROJECT_ROOT"

CANDIDATE_PREVIEW_LIMIT = 20
IGNORED_DIRS = frozenset({"node_modules", ".git"})

APP_ROUTER_EXTS = ("tsx", "js", "jsx")
PAGES_ROUTER_EXTS = ("tsx", "jsx", "js")
VIEW_EXTS = ("vue", "tsx", "jsx", "js")

VIEW_DIRS = ("src/views", "src/pages", "views", "pages")

_NUMERIC_RE = re.compile(r"^\d+$")
_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{24}$", re.IGNORECASE)
_KEYWORD_SPLIT_RE = re.compile(r"[\s,]+")

_APP_PAGE_SUFFIXES = tuple(f"page.{ext}" for ext in APP_ROUTER_EXTS)
_VIEW_FILE_RE = re.compile(r"\.(vue|tsx|jsx|js)$")


def _normalize_path(path: str) -> str:
    """Normalize path to use forward slashes consistently across platforms."""
    return path.replace("\\", "/")


def _default_project_root() -> str:
    return os.environ.get(PROJECT_ROOT_ENV) or os.getcwd()


def resolve_project_root(project_root: str | None = None) -> str:
    """Return the absolute project root: override, then environment, then cwd."""
    root = project_root or _default_project_root()
    return os.path.abspath(os.path.expanduser(root))


# ---------------------------------------------------------------------------
# Conventions
# ---------------------------------------------------------------------------


class Convention(NamedTuple):
    name: str
    dir: str


# Probe order matters: candidate precedence follows it.
KNOWN_CONVENTIONS: tuple[Convention, ...] = (
    Convention("next-app", "app"),
    Convention("next-pages", "pages"),
    Convention("src-views", "src/views"),
    Convention("src-pages", "src/pages"),
    Convention("views", "views"),
    Convention("pages", "pages"),
)


def detect_conventions(project_root: str) -> list[Convention]:
    """Return the known conventions whose directory exists under *project_root*."""
    found = []
    for convention in KNOWN_CONVENTIONS:
        # isdir() reports False for missing paths and permission errors alike
        if os.path.isdir(os.path.join(project_root, convention.dir)):
            found.append(convention)
    return found


def normalize_route_path(route_path: str) -> list[str]:
    """Split a route path into its non-empty segments.

    ``"/guild/salary"`` -> ``["guild", "salary"]``; ``""`` and ``"/"`` map to
    ``[]``, the application root route.
    """
    text = (route_path or "").strip()
    if text.startswith("/"):
        text = text[1:]
    return [segment for segment in text.split("/") if segment]


# ---------------------------------------------------------------------------
# Candidate generation
# ---------------------------------------------------------------------------


def _app_router_candidates(project_root: str, segments: list[str]) -> list[str]:
    page_dir = os.path.join(project_root, "app", *segments)
    return [os.path.join(page_dir, f"page.{ext}") for ext in APP_ROUTER_EXTS]


def _pages_router_candidates(project_root: str, segments: list[str]) -> list[str]:
    pages_dir = os.path.join(project_root, "pages")
    if not segments:
        return [os.path.join(pages_dir, f"index.{ext}") for ext in PAGES_ROUTER_EXTS]

    route_path = os.path.join(pages_dir, *segments)
    out = []
    for ext in PAGES_ROUTER_EXTS:
        out.append(f"{route_path}.{ext}")
        out.append(os.path.join(route_path, f"index.{ext}"))
    return out


def _view_dir_candidates(
    project_root: str, segments: list[str], dirs: list[str]
) -> list[str]:
    if not segments:
        return []

    *parents, name = segments
    out = []
    for view_dir in dirs:
        base = os.path.join(project_root, view_dir)
        for ext in VIEW_EXTS:
            out.append(os.path.join(base, *segments, f"index.{ext}"))
            out.append(os.path.join(base, *parents, f"{name}.{ext}"))
    return out


def generate_candidates(
    project_root: str, segments: list[str], conventions: list[Convention]
) -> list[str]:
    """Build the ordered, de-duplicated candidate file list for *segments*.

    App Router comes first, then Pages Router, then the view/page directories
    in detection order. Nothing here touches the filesystem.
    """
    dirs = [c.dir for c in conventions]
    view_dirs = [d for d in VIEW_DIRS if d in dirs]

    generated: list[str] = []
    if "app" in dirs:
        generated += _app_router_candidates(project_root, segments)
    if "pages" in dirs:
        generated += _pages_router_candidates(project_root, segments)
    generated += _view_dir_candidates(project_root, segments, view_dirs)

    # dict keeps insertion order, so this is an ordered set keyed by normpath
    ordered = dict.fromkeys(os.path.normpath(p) for p in generated)
    return list(ordered)


def find_first_existing_file(candidates: list[str]) -> str | None:
    """Return the first candidate that is a readable regular file, else None."""
    for candidate in candidates:
        if os.path.isfile(candidate) and os.access(candidate, os.R_OK):
            return candidate
    return None


# ---------------------------------------------------------------------------
# Keyword fallback
# ---------------------------------------------------------------------------


def is_dynamic_segment(segment: str) -> bool:
    """True for segments that look like runtime IDs (number, UUID, object id)."""
    return bool(
        _NUMERIC_RE.match(segment)
        or _UUID_RE.match(segment)
        or _OBJECT_ID_RE.match(segment)
    )


def extract_search_terms(route_path: str, keyword: str | None = None) -> list[str]:
    """Collect lower-cased search terms from the route and an optional keyword.

    Dynamic segments are dropped; keyword tokens are split on whitespace and
    commas. The result is de-duplicated and keeps first-seen order.
    """
    terms = [s for s in normalize_route_path(route_path) if not is_dynamic_segment(s)]
    if keyword:
        terms += [t for t in _KEYWORD_SPLIT_RE.split(str(keyword).strip()) if t]
    return list(dict.fromkeys(t.lower() for t in terms))


@dataclass(frozen=True)
class PageFile:
    absolute_path: str
    relative_path: str


def _is_app_page(name: str) -> bool:
    return name.lower().endswith(_APP_PAGE_SUFFIXES)


def _is_view_file(name: str) -> bool:
    return bool(_VIEW_FILE_RE.search(name))


def page_file_predicate(convention: Convention) -> Callable[[str], bool]:
    """Return the "is a page file" test used when walking *convention*'s dir."""
    if convention.dir == "app":
        return _is_app_page
    return _is_view_file


def collect_page_files(
    project_root: str, base_dir: str, is_page: Callable[[str], bool]
) -> list[PageFile]:
    """Walk ``<project_root>/<base_dir>`` and collect files accepted by *is_page*.

    Uses an explicit stack rather than recursion. Entries are visited in
    sorted order so the result does not depend on the filesystem's listing
    order. ``node_modules`` and ``.git`` subtrees are pruned and symlinks are
    neither followed nor collected. A directory that cannot be listed simply
    contributes nothing.
    """
    start = os.path.join(project_root, base_dir)
    collected: list[PageFile] = []
    stack = [start]

    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", current, exc)
            continue

        subdirs = []
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    if entry.name not in IGNORED_DIRS:
                        subdirs.append(entry.path)
                elif entry.is_file(follow_symlinks=False) and is_page(entry.name):
                    relative = _normalize_path(
                        os.path.relpath(entry.path, project_root)
                    )
                    collected.append(PageFile(entry.path, relative))
            except OSError as exc:
                logger.debug("Skipping %s: %s", entry.path, exc)

        # Reverse so the stack pops subdirectories in sorted order
        stack.extend(reversed(subdirs))

    return collected


def collect_convention_files(
    project_root: str, conventions: list[Convention]
) -> list[PageFile]:
    """Collect page files across every detected convention, each file once."""
    seen: dict[str, PageFile] = {}
    for convention in conventions:
        files = collect_page_files(
            project_root, convention.dir, page_file_predicate(convention)
        )
        for page_file in files:
            seen.setdefault(page_file.relative_path, page_file)
    return list(seen.values())


@dataclass(frozen=True)
class ScoredMatch:
    page_file: PageFile
    match_count: int


def score_page_file(page_file: PageFile, terms: list[str]) -> int:
    haystack = _normalize_path(page_file.relative_path).lower()
    return sum(1 for term in terms if term in haystack)


def rank_page_files(page_files: list[PageFile], terms: list[str]) -> list[ScoredMatch]:
    """Score *page_files* against *terms* and order them best first.

    More matched terms wins; among equal counts the shorter relative path
    wins; full ties keep collection order (``sorted`` is stable).
    """
    scored = []
    for page_file in page_files:
        count = score_page_file(page_file, terms)
        if count > 0:
            scored.append(ScoredMatch(page_file, count))
    return sorted(
        scored, key=lambda m: (-m.match_count, len(m.page_file.relative_path))
    )


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class Confidence(str, enum.Enum):
    EXACT = "exact"
    KEYWORD_UNIQUE = "keyword_unique"
    KEYWORD_BEST = "keyword_best"


@dataclass
class ResolutionResult:
    """Outcome of resolving one route path."""

    route_path: str
    project_root: str
    found: bool = False
    path: str | None = None
    relative_path: str | None = None
    confidence: Confidence | None = None
    candidates_tried: list[str] = field(default_factory=list)
    candidate_count: int = 0
    search_terms: list[str] = field(default_factory=list)
    match_count: int = 0
    tied: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["confidence"] = self.confidence.value if self.confidence else None
        return data


def resolve_route_source(
    route_path: str,
    project_root: str | None = None,
    keyword: str | None = None,
) -> ResolutionResult:
    """Find the source file that renders *route_path*.

    Tries the exact candidates of every detected convention first. When none
    exists, ranks page files by how many route words and keyword tokens their
    path contains. Missing files or directories never raise.
    """
    root = resolve_project_root(project_root)
    segments = normalize_route_path(route_path)
    conventions = detect_conventions(root)
    candidates = generate_candidates(root, segments, conventions)

    logger.debug(
        "Route %r: %d convention(s), %d candidate(s)",
        route_path,
        len(conventions),
        len(candidates),
    )

    result = ResolutionResult(
        route_path=route_path,
        project_root=root,
        candidates_tried=candidates[:CANDIDATE_PREVIEW_LIMIT],
        candidate_count=len(candidates),
    )

    found = find_first_existing_file(candidates)
    if found:
        result.found = True
        result.path = found
        result.confidence = Confidence.EXACT
    else:
        terms = extract_search_terms(route_path, keyword)
        result.search_terms = terms
        if terms:
            logger.debug("Keyword fallback for %r with terms %s", route_path, terms)
            ranked = rank_page_files(collect_convention_files(root, conventions), terms)
            if ranked:
                best = ranked[0]
                tied = sum(1 for m in ranked if m.match_count == best.match_count)
                result.found = True
                result.path = best.page_file.absolute_path
                result.match_count = len(ranked)
                result.tied = tied
                result.confidence = (
                    Confidence.KEYWORD_UNIQUE if tied == 1 else Confidence.KEYWORD_BEST
                )

    if result.path:
        result.relative_path = _normalize_path(os.path.relpath(result.path, root))
        logger.info(
            "Resolved %r -> %s (%s)",
            route_path,
            result.relative_path,
            result.confidence.value,
        )
    else:
        logger.info("No source file found for %r under %s", route_path, root)

    return result


def format_result(result: ResolutionResult) -> str:
    """Render *result* as the text shown to a human (or an LLM) caller."""
    if not result.found:
        lines = [
            f'No page source file found for route "{result.route_path}".',
            f"Project root: {result.project_root}",
            "Paths tried (partial):",
        ]
        lines += [f"  - {p}" for p in result.candidates_tried]
        if result.candidate_count > len(result.candidates_tried):
            lines.append("  ...")
        lines.append(
            "Try passing the `keyword` parameter (e.g. the page or menu name) to "
            "search the page directories by path. Dynamic segments such as "
            "/user/123 have numeric, UUID and object-id parts removed before "
            "matching."
        )
        return "\n".join(lines)

    if result.confidence is Confidence.EXACT:
        label = "exact match"
    elif result.confidence is Confidence.KEYWORD_UNIQUE:
        label = f"unique keyword match on {', '.join(result.search_terms)}"
    else:
        label = (
            f"best of {result.match_count} keyword matches on "
            f"{', '.join(result.search_terms)}, {result.tied} tied at top score"
        )

    return (
        f'Page source for route "{result.route_path}" ({label}):\n\n'
        f"File path: {result.path}\n"
        f"Relative path: {result.relative_path}\n\n"
        "Open the path above in your editor to make changes."
    )


# ---------------------------------------------------------------------------
# FastMCP server instance
# ---------------------------------------------------------------------------

mcp = FastMCP("route-to-file")

# ---------------------------------------------------------------------------
# Tool: open_route_source
# ---------------------------------------------------------------------------


@mcp.tool(
    description=(
        "Find the frontend source file (Vue 2/3, Next.js, React) that renders a route.\n\n"
        "PURPOSE: Jump from a URL seen in the running app to the page file to edit.\n"
        "First tries exact file names for the routing conventions found in the project;\n"
        "if none exists (e.g. dynamic routes like /user/123) it ranks page files whose\n"
        "path contains the route words and keyword tokens.\n\n"
        "Args:\n"
        "  routePath   (str): Route path, with or without leading slash. Required.\n"
        "  projectRoot (str, optional): Absolute project root. Defaults to\n"
        "              $ROUTE_TO_FILE_PROJECT_ROOT or the current directory.\n"
        "  keyword     (str, optional): Extra hints (page or menu name), separated by\n"
        "              spaces or commas. Helps when the route alone does not match.\n\n"
        "Examples:\n"
        "  routePath='/dashboard/settings' - Next.js pages/dashboard/settings.tsx\n"
        "  routePath='/guild/42/salary' - 42 is dropped, searches 'guild' and 'salary'\n"
        "  routePath='/user/123', keyword='profile' - keyword narrows the search\n\n"
        "Returns: { found, path, relative_path, confidence, candidates_tried, message, ... }\n"
        "         or { error: string }"
    )
)
def open_route_source(
    routePath: str,
    projectRoot: str | None = None,
    keyword: str | None = None,
) -> dict[str, Any]:
    """Resolve *routePath* and return the result plus its text rendering."""
    try:
        result = resolve_route_source(routePath, projectRoot, keyword)
    except Exception as exc:
        logger.exception("Failed to resolve route %r", routePath)
        return {"error": str(exc)}

    data = result.to_dict()
    data["message"] = format_result(result)
    return data


# ---------------------------------------------------------------------------
# CLI helper (optional) ------------------------------------------------------
# ---------------------------------------------------------------------------


def _cli() -> None:
    parser = argparse.ArgumentParser(
        description="Map a frontend route path to its page source file",
        epilog="examples: resolve /dashboard/settings, resolve /user/123 --keyword profile",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_resolve = sub.add_parser("resolve", help="Resolve a route to a source file")
    p_resolve.add_argument("route_path", help="Route path, e.g. /guild/42/salary")
    p_resolve.add_argument(
        "--project-root",
        default=None,
        help=f"Project root (default: ${PROJECT_ROOT_ENV} or cwd)",
    )
    p_resolve.add_argument("--keyword", default=None, help="Extra search words")
    p_resolve.add_argument(
        "--text", action="store_true", help="Print the human-readable message only"
    )

    p_candidates = sub.add_parser(
        "candidates", help="List the exact-match candidates for a route"
    )
    p_candidates.add_argument("route_path", help="Route path, e.g. /guild/salary")
    p_candidates.add_argument(
        "--project-root",
        default=None,
        help=f"Project root (default: ${PROJECT_ROOT_ENV} or cwd)",
    )

    ns = parser.parse_args()

    if ns.cmd == "resolve":
        result = resolve_route_source(ns.route_path, ns.project_root, ns.keyword)
        if ns.text:
            print(format_result(result))
            return
        res = result.to_dict()
    else:
        root = resolve_project_root(ns.project_root)
        conventions = detect_conventions(root)
        res = {
            "project_root": root,
            "conventions": [c._asdict() for c in conventions],
            "candidates": generate_candidates(
                root, normalize_route_path(ns.route_path), conventions
            ),
        }

    print(json.dumps(res, indent=2))


# ---------------------------------------------------------------------------
# Entry‑point ---------------------------------------------------------------
# ---------------------------------------------------------------------------


def main() -> None:
    if len(sys.argv) > 1:
        _cli()
    else:
        mcp.run()  # defaults to stdio transport


if __name__ == "__main__":
    main()
