"""C language extractor (regex-only, no parser)."""

from __future__ import annotations

import re

from .base import LanguageExtractor, LanguageTag


# ── Masking ───────────────────────────────────────────────────────────

def _blank(chars: list[str], start: int, end: int) -> None:
    for k in range(start, min(end, len(chars))):
        if chars[k] != "\n":
            chars[k] = " "


def _word_before(text: str, i: int) -> str:
    j = i
    while j > 0 and (text[j - 1].isalnum() or text[j - 1] == "_"):
        j -= 1
    return text[j:i]


def _literal_end(text: str, i: int, quote: str) -> int:
    """Index of the quote closing the literal opened at *i* (or the newline/EOF)."""
    n = len(text)
    j = i + 1
    while j < n:
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == quote or c == "\n":
            return j
        j += 1
    return n


def _directive_end(text: str, i: int) -> int:
    n = len(text)
    j = i
    while j < n and text[j] != "\n":
        if text.startswith("\\\n", j):
            j += 2
            continue
        if text.startswith("\\\r\n", j):
            j += 3
            continue
        if text.startswith("/*", j):
            end = text.find("*/", j + 2)
            j = n if end < 0 else end + 2
            continue
        j += 1
    return j


_RE_IF0 = re.compile(r"#\s*if\s+0\b")

_RE_DIRECTIVE_LINE = re.compile(r"^[ \t]*#[ \t]*(\w+)", re.MULTILINE)


def _if0_end(text: str, i: int) -> int:
    """End of the code disabled by an ``#if 0`` whose line ends at *i*.

    That is the end of the matching ``#endif`` line, or the start of a
    matching ``#else`` or ``#elif`` line, whose branch stays live.
    """
    depth = 0
    for m in _RE_DIRECTIVE_LINE.finditer(text, i):
        word = m.group(1)
        if word in ("if", "ifdef", "ifndef"):
            depth += 1
        elif word == "endif":
            if depth == 0:
                return _directive_end(text, m.start())
            depth -= 1
        elif word in ("else", "elif") and depth == 0:
            return m.start()
    return len(text)


def mask_source(text: str, raw_strings: bool = False) -> str:
    """Blank out comments, literal contents and preprocessor directives.

    The result has the same length as *text* and keeps every newline, so
    offsets and line numbers found in the masked text are valid in the
    source. Quote characters are kept so literals stay recognisable.
    Code under ``#if 0`` is blanked as well.
    """
    chars = list(text)
    n = len(text)
    i = 0
    at_line_start = True
    while i < n:
        ch = text[i]
        if ch == "\n":
            at_line_start = True
            i += 1
            continue
        if ch in " \t\r\f\v":
            i += 1
            continue

        if ch == "#" and at_line_start:
            j = _directive_end(text, i)
            if _RE_IF0.match(text, i, j):
                j = _if0_end(text, j)
            _blank(chars, i, j)
            i = j
            continue
        at_line_start = False

        if text.startswith("//", i):
            j = text.find("\n", i)
            j = n if j < 0 else j
            _blank(chars, i, j)
            i = j
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            j = n if end < 0 else end + 2
            _blank(chars, i, j)
            i = j
            continue

        if ch == '"':
            if raw_strings and _word_before(text, i).endswith("R"):
                open_paren = text.find("(", i + 1)
                if open_paren >= 0:
                    delim = text[i + 1:open_paren]
                    end = text.find(")" + delim + '"', open_paren)
                    j = n if end < 0 else end + len(delim) + 1
                    _blank(chars, i + 1, j)
                    i = j + 1
                    continue
            j = _literal_end(text, i, '"')
            _blank(chars, i + 1, j)
            i = j + 1 if j < n and text[j] == '"' else j
            continue

        if ch == "'":
            word = _word_before(text, i)
            if word and word[0].isdigit():
                # digit separator, as in 1'000'000
                i += 1
                continue
            j = _literal_end(text, i, "'")
            _blank(chars, i + 1, j)
            i = j + 1 if j < n and text[j] == "'" else j
            continue

        i += 1
    return "".join(chars)


# ── Bracket helpers ───────────────────────────────────────────────────

def _match(text: str, i: int, open_ch: str, close_ch: str) -> int | None:
    """Index of the bracket closing the one at *i*, or None if unbalanced."""
    depth = 0
    for j in range(i, len(text)):
        c = text[j]
        if c == open_ch:
            depth += 1
        elif c == close_ch:
            depth -= 1
            if depth == 0:
                return j
    return None


def _split_top_level(text: str, sep: str = ","):
    """Yield (start, part) for the pieces of *text* split at top-level *sep*."""
    depth = 0
    angle = 0
    start = 0
    for j, c in enumerate(text):
        if c in "([{":
            depth += 1
        elif c in ")]}":
            depth -= 1
        elif depth == 0 and c == "<":
            angle += 1
        elif depth == 0 and c == ">" and angle > 0:
            angle -= 1
        elif c == sep and depth == 0 and angle == 0:
            yield start, text[start:j]
            start = j + 1
    yield start, text[start:]


def _base_clause_start(text: str) -> int:
    """Index of a single ``:`` (base list / underlying type), else len(text)."""
    j = 0
    while j < len(text):
        if text[j] == ":":
            if text.startswith("::", j):
                j += 2
                continue
            return j
        j += 1
    return len(text)


# ── Regex patterns ────────────────────────────────────────────────────

# Scanning decodes as latin-1, so bytes of UTF-8 identifiers appear as \x80-\xff.
_ID = r"[A-Za-z_\x80-\xff][\w\x80-\xff]*"

_RE_IDENT = re.compile(_ID)

_RE_ATTRIBUTE = re.compile(
    r"(?:__attribute__|__declspec|_Alignas|alignas)\s*\((?:[^()]|\((?:[^()]|\([^()]*\))*\))*\)"
    r"|\[\[.*?\]\]",
    re.DOTALL,
)

_RE_TYPEDEF = re.compile(r"\s*typedef\b")

_RE_EXTERN_BLOCK = re.compile(r'\s*extern\s*"\s*"\s*$')

_RE_FUNC_PTR = re.compile(
    r"\(\s*(?:" + _ID + r"\s*::\s*)*[*&^]+\s*(?:const\s+|volatile\s+)*(?P<name>" + _ID + r")\s*[)\[]"
)

# A header ending in a name or ``>`` right before ``{`` (``v{1}``, ``Base<T>{}``).
_RE_INIT_NAME_END = re.compile(r"[\w\x80-\xff>]\s*$")

_RE_ARRAY_SUFFIX = re.compile(r"(?:\s*\[[^\]]*\])+\s*$")

# Bare call sites: ``name (``.  Member calls match on the member name.
_RE_CALL = re.compile(r"(?<![\w\x80-\xff])(" + _ID + r")\s*\(")

_C_KEYWORDS = frozenset({
    "auto", "break", "case", "char", "const", "continue", "default", "do",
    "double", "else", "enum", "extern", "float", "for", "goto", "if",
    "inline", "int", "long", "register", "restrict", "return", "short",
    "signed", "sizeof", "static", "struct", "switch", "typedef", "union",
    "unsigned", "void", "volatile", "while",
    "_Alignof", "_Atomic", "_Bool", "_Complex", "_Generic", "_Imaginary",
    "_Noreturn", "_Static_assert", "_Thread_local",
    "alignof", "bool", "static_assert", "typeof", "__typeof__", "defined",
})

_ATTRIBUTE_WORDS = frozenset({
    "__attribute__", "__declspec", "__asm__", "__asm", "asm", "alignas",
    "_Alignas", "__extension__", "__inline", "__inline__",
})


class CExtractor(LanguageExtractor):
    """Regex-only extractor for C sources.

    The source is masked first (comments, literals and preprocessor lines
    blanked), then scanned at file scope. Headers ending in ``{`` are
    classified as a type body, a function body, or something else (an
    initializer), and the body is skipped. Statements ending in ``;`` are
    checked for typedefs.
    """

    raw_strings = False
    non_names = _C_KEYWORDS | _ATTRIBUTE_WORDS

    _re_type_head = re.compile(
        r"\s*(?P<typedef>typedef\s+)?(?:(?:static|extern|const|volatile|register|_Thread_local)\s+)*"
        r"(?P<kw>struct|union|enum)\b"
    )
    _re_function_name = re.compile(r"(?P<name>(?P<last>" + _ID + r"))\s*\(")

    @property
    def language_tag(self) -> LanguageTag:
        return LanguageTag.C

    @property
    def file_extensions(self) -> list[str]:
        return [".c", ".h"]

    def extract_symbols(self, source: bytes, file_path: str) -> list[dict]:
        symbols, _bodies, _masked, _newlines = self._scan(source)
        return symbols

    def extract_references(self, source: bytes, file_path: str) -> list[dict]:
        _symbols, bodies, masked, newlines = self._scan(source)
        refs: list[dict] = []
        for scope, open_at, close_at in bodies:
            body_start = open_at + 1
            for m in _RE_CALL.finditer(masked, body_start, close_at):
                name = m.group(1)
                if name in self.non_names:
                    continue
                offset = m.start(1)
                refs.append(self._make_reference(
                    target_name=_unlatin(name),
                    kind="call",
                    offset=offset,
                    line=self.line_of(newlines, offset),
                    source_name=scope,
                ))
        return refs

    # ---- hooks overridden by the C++ extractor ----

    def _prepare_header(self, header: str) -> str:
        """Blank attributes and similar noise, keeping offsets."""
        return _RE_ATTRIBUTE.sub(lambda m: " " * len(m.group()), header)

    def _scope_name(self, header: str) -> str | None:
        """Name of a transparent block (``extern "C"``), or None."""
        if _RE_EXTERN_BLOCK.match(header):
            return ""
        return None

    def _alias(self, stmt: str):
        return None

    def _normalize_name(self, name: str) -> str:
        return name

    # ---- scanning ----

    def _scan(self, source: bytes):
        """Scan *source* at file scope.

        Returns (symbols, bodies, masked, newlines) where bodies holds
        (qualified_name, open_brace, close_brace) for each function.
        """
        # latin-1 maps byte i to character i, so offsets are byte offsets
        text = source.decode("latin-1")
        masked = mask_source(text, raw_strings=self.raw_strings)
        newlines = self.line_index(masked)
        n = len(masked)

        symbols: list[dict] = []
        bodies: list[tuple[str, int, int]] = []
        scopes: list[str] = []
        trailing_typedef: set[str] | None = None

        i = 0
        stmt_start = 0
        while i < n:
            ch = masked[i]
            if ch == "(":
                close = _match(masked, i, "(", ")")
                i = close + 1 if close is not None else i + 1
                continue

            if ch == ";":
                if trailing_typedef is not None:
                    self._trailing_declarators(
                        masked, newlines, scopes, stmt_start, i,
                        trailing_typedef, symbols,
                    )
                    trailing_typedef = None
                else:
                    self._statement(masked, newlines, scopes, stmt_start, i, symbols)
                stmt_start = i + 1

            elif ch == "{":
                header = self._prepare_header(masked[stmt_start:i])
                scope = self._scope_name(header)
                if scope is not None:
                    scopes.append(scope)
                    stmt_start = i + 1
                    i += 1
                    continue
                close = _match(masked, i, "{", "}")
                end = close if close is not None else n - 1
                if trailing_typedef is None and self._in_initializer_list(header):
                    # member initializer such as ``v{1}``; the body follows
                    i = end + 1
                    continue
                if trailing_typedef is None:
                    kind, emitted = self._definition(
                        masked, newlines, scopes, stmt_start, header, i, end,
                        symbols, bodies,
                    )
                else:
                    kind, emitted = "other", None
                i = end + 1
                if kind == "type" and emitted is not None:
                    trailing_typedef = emitted
                if kind != "other" or "=" not in header:
                    stmt_start = i
                # initializers run on to their ';'
                continue

            elif ch == "}":
                if scopes:
                    scopes.pop()
                stmt_start = i + 1
                trailing_typedef = None

            i += 1

        return symbols, bodies, masked, newlines

    def _definition(self, masked, newlines, scopes, start, header, open_at,
                    close_at, symbols, bodies):
        """Classify a header followed by a body.

        Returns (kind, typedef_names) where kind is "type", "function" or
        "other"; typedef_names is the set of names already emitted when the
        type was introduced by ``typedef`` (None otherwise).
        """
        m = self._re_type_head.match(header)
        if m:
            rest = header[m.end():]
            if "(" not in rest and "=" not in rest:
                head = rest[:_base_clause_start(rest)]
                names = [
                    x for x in _RE_IDENT.finditer(head)
                    if x.group() not in self.non_names and x.group() != "final"
                ]
                emitted: set[str] = set()
                if names:
                    tag = names[-1]
                    offset = start + m.end() + tag.start()
                    symbols.append(self._emit(
                        newlines, scopes, tag.group(), tag.group(), offset,
                        "type", close_at, _collapse(header),
                    ))
                    emitted.add(_unlatin(tag.group()))
                return "type", (emitted if m.group("typedef") else None)

        found = self._function_name(header)
        if found is None:
            return "other", None
        fm, paren_close = found
        offset = start + fm.start("last")
        sym = self._emit(
            newlines, scopes, fm.group("name"), fm.group("last"), offset,
            "function", close_at, _collapse(header),
        )
        symbols.append(sym)
        bodies.append((sym["qualified_name"], open_at, close_at))
        return "function", None

    def _in_initializer_list(self, header: str) -> bool:
        """True when *header* stops at a braced member initializer."""
        if not _RE_INIT_NAME_END.search(header):
            return False
        found = self._function_name(header)
        if found is None:
            return False
        _m, close = found
        return header[close + 1:].lstrip().startswith(":")

    def _function_name(self, header: str):
        """Find the name of the function a definition header declares.

        Returns (match, index_of_closing_paren) or None.
        """
        for m in self._re_function_name.finditer(header):
            last = m.group("last")
            if last in self.non_names:
                continue
            if "=" in header[:m.start()]:
                return None
            close = _match(header, m.end() - 1, "(", ")")
            if close is None:
                return None
            trailer = header[close + 1:].strip()
            if "=" in trailer and not trailer.startswith(":"):
                return None
            return m, close
        return None

    def _statement(self, masked, newlines, scopes, start, end, symbols):
        stmt = self._prepare_header(masked[start:end])
        m = _RE_TYPEDEF.match(stmt)
        if m:
            base = start + m.end()
            for name, offset in _declarator_names(stmt[m.end():], base, self.non_names):
                symbols.append(self._emit(
                    newlines, scopes, name, name, offset, "type", end,
                    _collapse(stmt),
                ))
            return
        alias = self._alias(stmt)
        if alias is not None:
            offset = start + alias.start("name")
            symbols.append(self._emit(
                newlines, scopes, alias.group("name"), alias.group("name"),
                offset, "type", end, _collapse(stmt),
            ))

    def _trailing_declarators(self, masked, newlines, scopes, start, end,
                              already, symbols):
        """Names after ``typedef struct {...}``, up to the closing ``;``."""
        text = masked[start:end]
        for name, offset in _declarator_names(text, start, self.non_names):
            if _unlatin(name) in already:
                continue
            symbols.append(self._emit(
                newlines, scopes, name, name, offset, "type", end,
                f"typedef {_collapse(text)}",
            ))

    def _emit(self, newlines, scopes, written, last, offset, kind, end_offset,
              signature):
        last = _unlatin(self._normalize_name(last))
        written = _unlatin(self._normalize_name(written))
        qualified = "::".join([s for s in scopes if s] + [written])
        parent = qualified.rsplit("::", 1)[0] if "::" in qualified else None
        return self._make_symbol(
            name=last,
            kind=kind,
            offset=offset,
            line_start=self.line_of(newlines, offset),
            line_end=self.line_of(newlines, end_offset),
            qualified_name=qualified,
            signature=_unlatin(signature) if signature else None,
            parent_name=parent,
        )


def _declarator_names(text: str, base: int, skip) -> list[tuple[str, int]]:
    """(name, offset) of each declarator in a typedef's declarator list."""
    out: list[tuple[str, int]] = []
    for part_start, part in _split_top_level(text):
        fp = _RE_FUNC_PTR.search(part)
        if fp:
            out.append((fp.group("name"), base + part_start + fp.start("name")))
            continue
        paren = part.find("(")
        head = part if paren < 0 else part[:paren]
        arr = _RE_ARRAY_SUFFIX.search(head)
        if arr:
            head = head[:arr.start()]
        idents = [m for m in _RE_IDENT.finditer(head) if m.group() not in skip]
        if idents:
            last = idents[-1]
            out.append((last.group(), base + part_start + last.start()))
    return out


_RE_SPACES = re.compile(r"[ \t\r\n\f\v]+")


def _collapse(text: str) -> str:
    # ASCII whitespace only; \x85 and \xa0 may be UTF-8 continuation bytes
    return _RE_SPACES.sub(" ", text).strip(" ")


def _unlatin(name: str) -> str:
    """Undo the latin-1 decoding used for scanning."""
    return name.encode("latin-1").decode("utf-8", errors="replace")
