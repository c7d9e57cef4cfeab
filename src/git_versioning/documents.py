"""
Format preserving XML document.

The document keeps the raw text of every token it parsed, so serializing an
unmodified document reproduces the input exactly. Only elements whose text is
replaced are re-rendered; comments, whitespace, attribute quoting, entity
spelling and the XML declaration are carried through untouched.
"""

import codecs
import html
import re
from pathlib import Path
from typing import Iterable
from xml.sax.saxutils import escape

from git_versioning.errors import DocumentError

_TOKEN = re.compile(
    r"""
      (?P<comment><!--.*?-->)
    | (?P<cdata><!\[CDATA\[(?P<cdata_text>.*?)\]\]>)
    | (?P<doctype><!DOCTYPE(?:[^\[>]|\[.*?\])*>)
    | (?P<pi><\?.*?\?>)
    | (?P<end></(?P<end_name>[^\s>]+)\s*>)
    | (?P<start><(?P<start_name>[^\s/>!?]+)
        (?:\s+[^\s=/>]+\s*=\s*(?:"[^"]*"|'[^']*'))*\s*(?P<empty>/)?>)
    | (?P<text>[^<]+)
    """,
    re.S | re.X,
)
_ENCODING = re.compile(rb"""^<\?xml[^>]*?encoding\s*=\s*["']([\w.\-]+)["']""")
_DEFAULT_ENCODING = "utf-8"


class Text:
    """Character data, either plain (entity escaped) or a CDATA section."""

    def __init__(self, raw: str, value: str | None = None):
        self.raw = raw
        self._value = value

    @property
    def value(self) -> str:
        return self._value if self._value is not None else html.unescape(self.raw)

    def __str__(self):
        return self.raw


class Markup:
    """Comment, processing instruction or doctype carried through verbatim."""

    def __init__(self, raw: str):
        self.raw = raw

    def __str__(self):
        return self.raw


class Element:
    def __init__(self, name: str, start: str, empty: bool = False):
        self.name = name
        self.start = start
        self.end: str | None = None
        self.empty = empty
        self.nodes: list[Element | Text | Markup] = []

    @property
    def local_name(self) -> str:
        return self.name.rsplit(":", 1)[-1]

    def children(self, name: str | None = None) -> list["Element"]:
        """Child elements in document order, optionally filtered by local name."""
        return [
            n
            for n in self.nodes
            if isinstance(n, Element) and (name is None or n.local_name == name)
        ]

    def child(self, name: str) -> "Element | None":
        return next(iter(self.children(name)), None)

    @property
    def text(self) -> str:
        return "".join(n.value for n in self.nodes if isinstance(n, Text))

    @text.setter
    def text(self, value: str):
        """Replace the element content with escaped character data."""
        self.nodes = [Text(escape(value), value)]
        if self.empty:
            self.start = self.start[: -len("/>")].rstrip() + ">"
            self.end = f"</{self.name}>"
            self.empty = False

    def __str__(self):
        if self.empty:
            return self.start
        return self.start + "".join(str(n) for n in self.nodes) + (self.end or "")


class Document:
    def __init__(
        self,
        nodes: list[Element | Text | Markup],
        encoding: str = _DEFAULT_ENCODING,
        bom: bytes = b"",
    ):
        self.nodes = nodes
        self.encoding = encoding
        self.bom = bom
        roots = [n for n in nodes if isinstance(n, Element)]
        if len(roots) != 1:
            raise DocumentError(f"document must have exactly one root element - count:{len(roots)}")
        self.root = roots[0]

    def __str__(self):
        return "".join(str(n) for n in self.nodes)

    def to_bytes(self) -> bytes:
        return self.bom + str(self).encode(self.encoding)


def read(file: Path) -> Document:
    return parse_bytes(Path(file).read_bytes())


def parse_bytes(data: bytes) -> Document:
    """Decode using the byte order mark or the declared encoding, then parse."""
    bom = b""
    encoding = _DEFAULT_ENCODING
    for candidate, name in (
        (codecs.BOM_UTF8, "utf-8"),
        (codecs.BOM_UTF16_LE, "utf-16-le"),
        (codecs.BOM_UTF16_BE, "utf-16-be"),
    ):
        if data.startswith(candidate):
            bom, encoding = candidate, name
            break
    else:
        if match := _ENCODING.match(data):
            encoding = match.group(1).decode("ascii")
    try:
        text = data[len(bom):].decode(encoding)
    except (LookupError, UnicodeDecodeError) as e:
        raise DocumentError(f"can not decode document - encoding:{encoding} error:{e}") from e
    return parse(text, encoding=encoding, bom=bom)


def parse(text: str, encoding: str = _DEFAULT_ENCODING, bom: bytes = b"") -> Document:
    nodes: list[Element | Text | Markup] = []
    stack: list[Element] = []
    for kind, match in _tokens(text):
        container = stack[-1].nodes if stack else nodes
        raw = match.group(0)
        if kind == "start":
            element = Element(match.group("start_name"), raw, empty=bool(match.group("empty")))
            container.append(element)
            if not element.empty:
                stack.append(element)
        elif kind == "end":
            name = match.group("end_name")
            if not stack or stack[-1].name != name:
                expected = stack[-1].name if stack else None
                raise DocumentError(
                    f"unexpected end tag - name:{name} expected:{expected} offset:{match.start()}"
                )
            stack.pop().end = raw
        elif kind == "text":
            container.append(Text(raw))
        elif kind == "cdata":
            container.append(Text(raw, match.group("cdata_text")))
        else:
            container.append(Markup(raw))
    if stack:
        raise DocumentError(f"unclosed element - name:{stack[-1].name}")
    return Document(nodes, encoding=encoding, bom=bom)


def _tokens(text: str) -> Iterable[tuple[str, re.Match]]:
    pos = 0
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise DocumentError(f"malformed markup - offset:{pos} text:{text[pos:pos + 40]!r}")
        yield _kind(match), match
        pos = match.end()


def _kind(match: re.Match) -> str:
    for kind in ("comment", "cdata", "doctype", "pi", "end", "start", "text"):
        if match.group(kind) is not None:
            return kind
    raise DocumentError(f"unknown token - text:{match.group(0)!r}")
