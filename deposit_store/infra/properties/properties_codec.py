# Copyright 2026 Dell Inc. or its subsidiaries. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Reader and writer for flat ``key = value`` property files.

Values are taken literally: there is no list splitting on commas and no
interpolation. Comment lines start with ``#`` or ``!``; a line ending in
an unescaped backslash continues on the next line.
"""

import os
import uuid
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping

_SEPARATORS = "=:"
_WHITESPACE = " \t\f"
_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPES = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


def _logical_lines(lines: Iterable[str]) -> Iterator[str]:
    """Join continuation lines and drop comments and blanks."""
    buffer: List[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        stripped = line.lstrip(_WHITESPACE)
        if not buffer and (not stripped or stripped[0] in "#!"):
            continue
        trailing = len(stripped) - len(stripped.rstrip("\\"))
        if trailing % 2 == 1:
            buffer.append(stripped[:-1])
            continue
        buffer.append(stripped)
        yield "".join(buffer)
        buffer = []
    if buffer:
        yield "".join(buffer)


def _unescape(text: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char != "\\" or i + 1 == len(text):
            out.append(char)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u" and i + 6 <= len(text):
            try:
                out.append(chr(int(text[i + 2:i + 6], 16)))
                i += 6
                continue
            except ValueError:
                pass
        out.append(_UNESCAPES.get(nxt, nxt))
        i += 2
    # rejoin surrogate pairs written as two \uXXXX escapes
    return "".join(out).encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def _split_entry(line: str) -> tuple:
    """Split a logical line into raw key and raw value."""
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\":
            i += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def parse_properties(lines: Iterable[str]) -> Dict[str, str]:
    """Parse property file lines into an ordered mapping.

    A key that occurs more than once keeps its last value.
    """
    properties: Dict[str, str] = {}
    for line in _logical_lines(lines):
        raw_key, raw_value = _split_entry(line)
        properties[_unescape(raw_key)] = _unescape(raw_value)
    return properties


def _escape(text: str, is_key: bool) -> str:
    out: List[str] = []
    for index, char in enumerate(text):
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif is_key and (char in _SEPARATORS or char in _WHITESPACE or char in "#!"):
            out.append("\\" + char)
        elif not is_key and index == 0 and char in _WHITESPACE:
            out.append("\\" + char)
        elif ord(char) > 0xFFFF:
            code = ord(char) - 0x10000
            out.append(f"\\u{0xD800 + (code >> 10):04x}\\u{0xDC00 + (code & 0x3FF):04x}")
        elif ord(char) > 0x7E or ord(char) < 0x20:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    return "".join(out)


def format_properties(properties: Mapping[str, str]) -> str:
    """Render a mapping as property file text, in mapping order."""
    return "".join(
        f"{_escape(key, True)} = {_escape(str(value), False)}\n"
        for key, value in properties.items()
    )


def read_properties(path: Path) -> Dict[str, str]:
    """Read a UTF-8 property file.

    Raises:
        OSError: If the file cannot be read.
    """
    with open(path, "r", encoding="utf-8") as properties_file:
        return parse_properties(properties_file)


def write_properties(
    path: Path, properties: Mapping[str, str], exclusive: bool = False
) -> None:
    """Write a property file, replacing any existing file atomically.

    The text goes to a temporary file in the same directory, which is
    then renamed over *path*. With *exclusive*, the temporary file is
    hard-linked into place instead, so the write fails if *path* appeared
    in the meantime.

    Raises:
        FileExistsError: If *exclusive* and *path* already exists.
        OSError: If the file cannot be written.
    """
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    existing_mode = path.stat().st_mode & 0o7777 if path.exists() else None
    # O_EXCL: never reuse a leftover temporary file
    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as tmp_file:
            tmp_file.write(format_properties(properties))
        if existing_mode is not None:
            os.chmod(tmp_path, existing_mode)
        if exclusive:
            os.link(tmp_path, path)
        else:
            os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
