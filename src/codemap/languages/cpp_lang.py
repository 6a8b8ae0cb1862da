"""C++ language extractor (regex-only, no parser)."""

from __future__ import annotations

import re

from .base import LanguageTag
from .c_lang import (
    CExtractor, _C_KEYWORDS, _ATTRIBUTE_WORDS, _ID, _RE_EXTERN_BLOCK, _RE_SPACES, _unlatin,
)


_CPP_KEYWORDS = frozenset({
    "alignof", "and", "bool", "catch", "char8_t", "char16_t", "char32_t",
    "class", "co_await", "co_return", "co_yield", "concept", "const_cast",
    "consteval", "constexpr", "constinit", "decltype", "delete",
    "dynamic_cast", "explicit", "export", "false", "friend", "mutable",
    "namespace", "new", "noexcept", "not", "nullptr", "operator", "or",
    "private", "protected", "public", "reinterpret_cast", "requires",
    "static_cast", "template", "this", "throw", "true", "try", "typeid",
    "typename", "using", "virtual", "wchar_t",
})

_RE_NAMESPACE = re.compile(r"\s*(?:inline\s+)?namespace\b(?P<name>[\w\x80-\xff:\s]*)$")

_RE_USING_ALIAS = re.compile(r"\s*using\s+(?P<name>" + _ID + r")\s*=")


def _blank_template_prefix(header: str) -> str:
    """Blank every leading ``template <...>`` clause, keeping offsets."""
    while True:
        m = re.match(r"\s*template\s*<", header)
        if not m:
            return header
        depth = 0
        end = None
        for j in range(m.end() - 1, len(header)):
            c = header[j]
            if c == "<":
                depth += 1
            elif c == ">":
                depth -= 1
                if depth == 0:
                    end = j
                    break
        if end is None:
            return header
        header = " " * (end + 1) + header[end + 1:]


class CppExtractor(CExtractor):
    """Regex-only extractor for C++ sources.

    Extends the C scan with classes, namespaces (transparent, used to
    qualify names), out-of-line member definitions such as ``Foo::bar``,
    destructors, operator overloads, template headers and ``using`` aliases.
    """

    raw_strings = True
    non_names = _C_KEYWORDS | _CPP_KEYWORDS | _ATTRIBUTE_WORDS

    _re_type_head = re.compile(
        r"\s*(?P<typedef>typedef\s+)?"
        r"(?:(?:static|extern|const|volatile|inline|constexpr|export)\s+)*"
        r"(?P<kw>class|struct|union|enum(?:\s+(?:class|struct))?)\b"
    )
    _re_function_name = re.compile(
        r"(?P<name>(?:" + _ID + r"\s*(?:<[^<>;{}()]*>)?\s*::\s*)*"
        r"(?P<last>~\s*" + _ID
        + r"|operator\s*(?:\(\s*\)|\[\s*\]|(?:new|delete)\b(?:\s*\[\s*\])?"
        r"|[^\s\w()\x80-\xff]+|[A-Za-z_][\w:]*(?:\s*[*&]+)?)"
        r"|" + _ID + r"))\s*\("
    )

    @property
    def language_tag(self) -> LanguageTag:
        return LanguageTag.CPP

    @property
    def file_extensions(self) -> list[str]:
        return [".cpp", ".cc", ".cxx", ".c++", ".hpp", ".hh", ".hxx"]

    def _prepare_header(self, header: str) -> str:
        return _blank_template_prefix(super()._prepare_header(header))

    def _scope_name(self, header: str) -> str | None:
        if _RE_EXTERN_BLOCK.match(header):
            return ""
        m = _RE_NAMESPACE.match(header)
        if m:
            return _unlatin(_RE_SPACES.sub("", m.group("name")))
        return None

    def _alias(self, stmt: str):
        return _RE_USING_ALIAS.match(stmt)

    def _normalize_name(self, name: str) -> str:
        # "Foo :: ~ Foo" -> "Foo::~Foo", "operator ==" -> "operator=="
        name = _RE_SPACES.sub(" ", name).strip(" ")
        return re.sub(r" ?([^\w\x80-\xff ]) ?", r"\1", name)
