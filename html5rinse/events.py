# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

"""Events handed to rewriter handlers.

Each event is only valid for the duration of the handler call that receives
it; handlers mutate the event to decide what ends up in the output.
"""

import re

from .constants import ConfigurationError
from .serializer import escape_text

_attributeNameRe = re.compile(r"^[^\s\"'<>/=\x00-\x1f\x7f]+$")


def _content(content, as_text):
    if as_text:
        return escape_text(content)
    return content


class ElementStart(object):
    """A start tag.

    ``attributes`` keeps the source order; duplicate attributes have already
    been collapsed by the tokenizer, first one winning.
    """

    def __init__(self, name, attributes, self_closing=False, can_have_content=True):
        self.name = name
        self.attributes = dict(attributes)
        self.self_closing = self_closing
        self.can_have_content = can_have_content and not self_closing
        self.replacement = None
        self.removed = False
        self.keep_content = False
        self._end_tag_handlers = [] if self.can_have_content else None

    @property
    def end_tag_handlers(self):
        """Callbacks run with the :class:`ElementEnd` of this element.

        ``None`` when the element never gets an end tag.
        """
        return self._end_tag_handlers

    def get_attribute(self, name):
        return self.attributes.get(name)

    def has_attribute(self, name):
        return name in self.attributes

    def remove_attribute(self, name):
        self.attributes.pop(name, None)

    def set_attribute(self, name, value):
        if not _attributeNameRe.match(name):
            raise ConfigurationError("%r is not a valid attribute name" % name)
        self.attributes[name] = value

    def replace(self, content, as_text=False):
        """Output ``content`` instead of the start tag."""
        self.replacement = _content(content, as_text)

    def remove_and_keep_content(self):
        self.removed = True
        self.keep_content = True

    def remove(self):
        self.removed = True
        self.keep_content = False

    def __repr__(self):
        return "<ElementStart %s>" % self.name


class ElementEnd(object):
    def __init__(self, name):
        self.name = name
        self.replacement = None
        self.removed = False

    def replace(self, content, as_text=False):
        self.replacement = _content(content, as_text)

    def remove(self):
        self.removed = True

    def __repr__(self):
        return "<ElementEnd %s>" % self.name


class TextChunk(object):
    """A run of text, entities already decoded."""

    def __init__(self, data):
        self.data = data
        self.replacement = None
        self.removed = False

    def replace(self, content, as_text=False):
        self.replacement = _content(content, as_text)

    def remove(self):
        self.removed = True


class Comment(object):
    def __init__(self, data):
        self.data = data
        self.replacement = None
        self.removed = False

    def replace(self, content, as_text=False):
        self.replacement = _content(content, as_text)

    def remove(self):
        self.removed = True


class DocumentEnd(object):
    def __init__(self):
        self.appended = []

    def append(self, content, as_text=False):
        self.appended.append(_content(content, as_text))
