# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

import re

from .constants import textEscapes, attributeEscapes

_textEscapeRe = re.compile("[%s]" % re.escape("".join(textEscapes)))
_attributeEscapeRe = re.compile("[%s]" % re.escape("".join(attributeEscapes)))


def escape_text(data):
    """Escape a run of text so it can never be read back as markup.

    The table is context independent: the same replacement is used inside
    and outside of elements, which is what keeps the output stable when it
    is sanitized again.
    """
    return _textEscapeRe.sub(lambda match: textEscapes[match.group()], data)


def escape_attribute(value):
    return _attributeEscapeRe.sub(lambda match: attributeEscapes[match.group()], value)


def serialize_start_tag(name, attributes, self_closing=False):
    parts = ["<", name]
    for attribute_name, value in attributes.items():
        parts.append(" %s=\"%s\"" % (attribute_name, escape_attribute(value)))
    parts.append(" />" if self_closing else ">")
    return "".join(parts)


def serialize_end_tag(name):
    return "</%s>" % name


def literal_start_tag(name, attributes, self_closing=False):
    """Rebuild a start tag as it was written, values unescaped.

    Used to show a rejected tag as text; the result still has to go through
    :func:`escape_text`.
    """
    parts = ["<", name]
    for attribute_name, value in attributes.items():
        parts.append(" %s=\"%s\"" % (attribute_name, value))
    parts.append(" />" if self_closing else ">")
    return "".join(parts)
