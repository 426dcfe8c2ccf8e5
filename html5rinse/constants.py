# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

from html5lib.constants import tokenTypes, voidElements as _html5libVoidElements

# Safe defaults, the same set ammonia ships with
allowedTags = frozenset([
    "a", "abbr", "acronym", "area", "article", "aside", "b", "bdi",
    "bdo", "blockquote", "br", "caption", "center", "cite", "code",
    "col", "colgroup", "data", "dd", "del", "details", "dfn", "div",
    "dl", "dt", "em", "figcaption", "figure", "footer", "h1", "h2",
    "h3", "h4", "h5", "h6", "header", "hgroup", "hr", "i", "img",
    "ins", "kbd", "li", "map", "mark", "nav", "ol", "p", "pre",
    "q", "rp", "rt", "rtc", "ruby", "s", "samp", "small", "span",
    "strike", "strong", "sub", "summary", "sup", "table", "tbody",
    "td", "th", "thead", "time", "tr", "tt", "u", "ul", "var", "wbr",
])

allowedGenericAttributes = frozenset(["lang", "title"])

allowedTagAttributes = {
    "a": frozenset(["href", "hreflang"]),
    "bdo": frozenset(["dir"]),
    "blockquote": frozenset(["cite"]),
    "col": frozenset(["align", "char", "charoff", "span"]),
    "colgroup": frozenset(["align", "char", "charoff", "span"]),
    "del": frozenset(["cite", "datetime"]),
    "hr": frozenset(["align", "size", "width"]),
    "img": frozenset(["align", "alt", "height", "src", "width"]),
    "ins": frozenset(["cite", "datetime"]),
    "ol": frozenset(["start"]),
    "q": frozenset(["cite"]),
    "table": frozenset(["align", "char", "charoff", "summary"]),
    "tbody": frozenset(["align", "char", "charoff"]),
    "td": frozenset(["align", "char", "charoff", "colspan", "headers", "rowspan"]),
    "tfoot": frozenset(["align", "char", "charoff"]),
    "th": frozenset(["align", "char", "charoff", "colspan", "headers", "rowspan",
                     "scope"]),
    "thead": frozenset(["align", "char", "charoff"]),
    "tr": frozenset(["align", "char", "charoff"]),
}

allowedUrlSchemes = frozenset([
    "bitcoin", "ftp", "ftps", "geo", "http", "https", "im", "irc", "ircs",
    "magnet", "mailto", "mms", "mx", "news", "nntp", "openpgp4fpr", "sip",
    "sms", "smsto", "ssh", "tel", "url", "webcal", "wtai", "xmpp",
])

urlAttributes = {
    "a": frozenset(["href"]),
    "img": frozenset(["src"]),
}

removeContentTags = frozenset(["script", "style"])

setTagAttributes = {
    "a": {"rel": "noopener noreferrer"},
}

# html5lib leaves out a couple of void elements we allow by default
voidElements = _html5libVoidElements | frozenset(["keygen", "wbr"])

# Elements after whose start tag the tokenizer has to leave the data state,
# mapped to the name of the HTMLTokenizer state method to switch to.
textModeElements = {
    "title": "rcdataState",
    "textarea": "rcdataState",
    "style": "rawtextState",
    "xmp": "rawtextState",
    "iframe": "rawtextState",
    "noembed": "rawtextState",
    "noframes": "rawtextState",
    "script": "scriptDataState",
    "plaintext": "plaintextState",
}

# Inside these the text mode of a child depends on tree construction
foreignElements = frozenset(["svg", "math"])
selectElements = frozenset(["select"])

textEscapes = {
    "<": "&lt;",
    ">": "&gt;",
    "\"": "&quot;",
    "'": "&apos;",
    "`": "&grave;",
    "/": "&#47;",
    "&": "&amp;",
    "=": "&#61;",
    "\u0000": "&#65533;",
}

attributeEscapes = {
    "&": "&amp;",
    "\"": "&quot;",
    "<": "&lt;",
    ">": "&gt;",
    "\u0000": "&#65533;",
}

StartTag = tokenTypes["StartTag"]
EndTag = tokenTypes["EndTag"]
Characters = tokenTypes["Characters"]
SpaceCharacters = tokenTypes["SpaceCharacters"]
Comment = tokenTypes["Comment"]
Doctype = tokenTypes["Doctype"]
ParseError = tokenTypes["ParseError"]


class SanitizerError(Exception):
    """Base class for every error that aborts a sanitize call.

    The output produced before the error must be thrown away; a partially
    sanitized document is not safe to render.
    """
    pass


class ConfigurationError(SanitizerError):
    pass


class ResourceExceededError(SanitizerError):
    pass


class AmbiguousParseError(SanitizerError):
    pass


class SinkError(SanitizerError):
    pass
