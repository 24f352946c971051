# json_locator.py
# Maps a JSON Pointer style error path back to a line in raw JSON text
# Author: Bradley Saucier - call sign viper1
#
# Disclaimer:
# This is a personal project submitted for a coding competition.
# It does not represent or reflect the views, policies, or positions
# of the United States Department of Defense or Anduril Industries.
#
# =============================================================================
#  LOCATOR IMPLEMENTATION: ONE-PASS STRUCTURAL KEY SCAN
# =============================================================================
#
# Validation engines report errors as structural paths (/address/city), not
# text offsets. This module walks the raw text once, character by character,
# and recognises property declarations ("name":) outside of string literals
# while keeping a nesting stack of objects and arrays. Each declaration gets
# the path implied by the stack, so the scan can compare it to the target.
#
# Resolution order:
# 1. Exact match - the accumulated path equals the target path.
# 2. Suffix match - first key whose name equals the last target segment.
# 3. Line fallback - first line holding "<last>" followed by a colon.
#
# The text may be user-typed and incomplete. Nothing here raises on bad
# input; an unresolved path is reported as None [RFC 8259; RFC 6901].
#
# =============================================================================
#  REFERENCES
# =============================================================================
# [1] RFC 8259 - The JavaScript Object Notation (JSON) standard
# [2] RFC 6901 - JavaScript Object Notation (JSON) Pointer
# [3] craftinginterpreters.com - Scanning
# =============================================================================

import argparse
import json
import logging
import re
import sys
from typing import Iterator, List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
ROOT_TOKEN = "root"     # Path token used by validators for the document itself
FIRST_LINE = 1

# ---------------------------------------------------------------------------
# REGEX BLUEPRINT
# ---------------------------------------------------------------------------
# A key is a complete string literal followed by optional whitespace and a
# colon. Matched from an opening quote found outside of string context only.
_ESCAPE   = r'\\.'
_KEY_BODY = r'(?:[^"\\\n]|' + _ESCAPE + r')*'
_KEY_RE   = re.compile(rf'"(?P<name>{_KEY_BODY})"\s*:')

OBJECT = "object"
ARRAY  = "array"

# ---------------------------------------------------------------------------
# TOKEN RECORD
# ---------------------------------------------------------------------------
class KeyToken(NamedTuple):
    """
    One property declaration: (name, path, line).

    `path` holds the object keys and array indices leading to the key,
    the key itself included. `line` is 1-indexed.
    """
    name: str
    path: Tuple[str, ...]
    line: int

# ---------------------------------------------------------------------------
# SCAN STATE
# ---------------------------------------------------------------------------
class _Frame:
    """Open container on the nesting stack."""
    __slots__ = ("kind", "line", "key", "index")

    def __init__(self, kind: str, line: int):
        self.kind = kind
        self.line = line
        self.key: Optional[str] = None   # last key declared (objects)
        self.index = 0                   # current element (arrays)

    def segment(self) -> Optional[str]:
        if self.kind == ARRAY:
            return str(self.index)
        return self.key


class _ScanState:
    def __init__(self):
        self.line = FIRST_LINE
        self.in_string = False
        self.escape_next = False
        self.stack: List[_Frame] = []

    def push(self, kind: str):
        self.stack.append(_Frame(kind, self.line))

    def pop(self, kind: str):
        # Unbalanced or mismatched closers leave the stack alone.
        if self.stack and self.stack[-1].kind == kind:
            self.stack.pop()

    def path_for(self, name: str) -> Tuple[str, ...]:
        frames = self.stack
        if frames and frames[-1].kind == OBJECT:
            frames = frames[:-1]   # the key being declared replaces this segment
        parts = [seg for seg in (f.segment() for f in frames) if seg is not None]
        parts.append(name)
        return tuple(parts)

# ---------------------------------------------------------------------------
# KEY NAME DECODING
# ---------------------------------------------------------------------------
def _decode_key(raw: str) -> str:
    """JSON-unescape a key body; keep the raw text if the escapes are invalid."""
    if "\\" not in raw:
        return raw
    try:
        return json.loads(f'"{raw}"')
    except ValueError:
        return raw


def split_path(path: str) -> List[str]:
    """
    Split a pointer into segments, dropping empty ones.

    ~1 and ~0 are unescaped per RFC 6901, in that order.
    """
    return [
        seg.replace("~1", "/").replace("~0", "~")
        for seg in path.split("/")
        if seg != ""
    ]

# ---------------------------------------------------------------------------
# STRUCTURAL SCANNER
# ---------------------------------------------------------------------------
def iter_keys(text: str) -> Iterator[KeyToken]:
    """
    Single-pass generator producing every property declaration in `text`.

    Braces, brackets, commas and colons inside string literals are ignored.
    Malformed input never raises; the scan just runs to the end of the text.
    """
    state = _ScanState()
    pos = 0
    n = len(text)
    while pos < n:
        ch = text[pos]

        if ch == "\n":
            state.line += 1
            state.escape_next = False
            pos += 1
            continue

        if state.in_string:
            if state.escape_next:
                state.escape_next = False
            elif ch == "\\":
                state.escape_next = True
            elif ch == '"':
                state.in_string = False
            pos += 1
            continue

        if ch == '"':
            m = _KEY_RE.match(text, pos)
            if m is None:
                state.in_string = True
                pos += 1
                continue
            name = _decode_key(m.group("name"))
            yield KeyToken(name, state.path_for(name), state.line)
            if state.stack and state.stack[-1].kind == OBJECT:
                state.stack[-1].key = name
            state.line += m.group().count("\n")
            pos = m.end()
            continue

        if ch == "{":
            state.push(OBJECT)
        elif ch == "[":
            state.push(ARRAY)
        elif ch == "}":
            state.pop(OBJECT)
        elif ch == "]":
            state.pop(ARRAY)
        elif ch == "," and state.stack and state.stack[-1].kind == ARRAY:
            state.stack[-1].index += 1
        pos += 1

    for frame in state.stack:
        logger.debug("unclosed %s opened on line %d", frame.kind, frame.line)

# ---------------------------------------------------------------------------
# PATH MATCHER
# ---------------------------------------------------------------------------
def _match_structural(text: str, segments: List[str]) -> Optional[int]:
    """
    Exact path match wins immediately; otherwise the first key named like
    the last segment.
    """
    target = tuple(segments)
    last = segments[-1]
    suffix_line = None
    for token in iter_keys(text):
        if token.path == target:
            return token.line
        if suffix_line is None and token.name == last:
            suffix_line = token.line
    return suffix_line

# ---------------------------------------------------------------------------
# FALLBACK SEARCH
# ---------------------------------------------------------------------------
def _fallback_search(text: str, segments: List[str]) -> Optional[int]:
    """First line with "<last>" followed somewhere later by a colon."""
    # Search for the key as it is spelled in JSON text, escapes included.
    needle = json.dumps(segments[-1], ensure_ascii=False)
    for lineno, line in enumerate(text.split("\n"), start=FIRST_LINE):
        at = line.find(needle)
        if at != -1 and ":" in line[at + len(needle):]:
            return lineno
    return None

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def locate(text: str, path: str) -> Optional[int]:
    """
    Return the 1-indexed line declaring the key at `path`, or None.

    Root paths ("", "/", "root") and blank text always resolve to line 1.
    """
    if not text.strip() or path in ("", ROOT_TOKEN):
        return FIRST_LINE

    segments = split_path(path)
    if not segments:
        return FIRST_LINE

    line = _match_structural(text, segments)
    if line is not None:
        return line

    logger.debug("structural scan missed %r, trying line fallback", path)
    return _fallback_search(text, segments)

# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _cli(argv: List[str]):
    """
    Command-line interface for locating a path in a JSON file.

    0 when a line was found (or --debug), 1 when not found or unreadable.
    """
    ap = argparse.ArgumentParser(description="Locate the line declaring a JSON path")
    ap.add_argument("file", help="JSON file to scan")
    ap.add_argument("path", nargs="?", default="", help="error path, e.g. /address/city")
    ap.add_argument("--debug", action="store_true", help="dump key declarations and exit")
    ap.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        with open(args.file, "r", encoding="utf-8") as fh:
            data = fh.read()
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.debug:
        for tok in iter_keys(data):
            print(f"{tok.line}\t/{'/'.join(tok.path)}")
        return 0

    line = locate(data, args.path)
    if line is None:
        print("not found", file=sys.stderr)
        return 1
    print(line)
    return 0

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(_cli(sys.argv[1:]))
# viper1 out
