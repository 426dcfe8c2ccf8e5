# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

"""Streaming rewriter on top of the html5lib tokenizer.

The tokenizer's tokens are turned into :mod:`~html5rinse.events` and handed
to the handlers, whose decisions are serialized straight into the sink. No
tree is built: the only structure kept is the stack of open elements, used
to pair end tags with their start tags.
"""

import logging
from itertools import islice

from html5lib._tokenizer import HTMLTokenizer

from . import constants
from .constants import AmbiguousParseError, SinkError
from .events import Comment, DocumentEnd, ElementEnd, ElementStart, TextChunk
from .memory import MemoryLimiter
from .serializer import escape_text, serialize_end_tag, serialize_start_tag

log = logging.getLogger(__name__)


class EntityTrackingTokenizer(HTMLTokenizer):
    """HTMLTokenizer that marks the ``<`` produced by character references.

    Tokens holding such ``<`` get a ``decodedBrackets`` count; those never
    appeared as ``<`` in the source.
    """

    def consumeEntity(self, allowedChar=None, fromAttribute=False):
        if fromAttribute:
            token = self.currentToken
            before = token["data"][-1][1].count("<")
            HTMLTokenizer.consumeEntity(self, allowedChar, fromAttribute)
            decoded = token["data"][-1][1].count("<") - before
            if decoded:
                token["decodedBrackets"] = token.get("decodedBrackets", 0) + decoded
        else:
            queued = len(self.tokenQueue)
            HTMLTokenizer.consumeEntity(self, allowedChar, fromAttribute)
            for token in islice(self.tokenQueue, queued, None):
                decoded = token["data"].count("<")
                if decoded:
                    token["decodedBrackets"] = decoded


class OpenElement(object):
    __slots__ = ("name", "end_tag_handlers", "removed")

    def __init__(self, name, end_tag_handlers=None, removed=False):
        self.name = name
        self.end_tag_handlers = end_tag_handlers
        self.removed = removed


class Rewriter(object):
    """Run handlers over a token stream and write the result to ``sink``.

    Handlers are plain callables taking one event:

    element_handler
      :class:`~html5rinse.events.ElementStart` for every start tag outside
      of a removed element.
    text_handler
      :class:`~html5rinse.events.TextChunk`
    comment_handler
      :class:`~html5rinse.events.Comment`
    end_handler
      :class:`~html5rinse.events.DocumentEnd`, once, after the last token.
    stray_end_tag_handler
      :class:`~html5rinse.events.ElementEnd` for end tags that do not close
      any open element. Without a handler those are dropped.

    End tags that do close an open element go to the callbacks registered
    on the element's ``end_tag_handlers``. An end tag closing an element
    further down the stack implicitly closes everything above it; the
    callbacks of those elements never run.
    """

    def __init__(self, sink, element_handler=None, text_handler=None,
                 comment_handler=None, end_handler=None,
                 stray_end_tag_handler=None, memory=None, counter=None,
                 buffer_size=None):
        self.sink = sink
        self.element_handler = element_handler
        self.text_handler = text_handler
        self.comment_handler = comment_handler
        self.end_handler = end_handler
        self.stray_end_tag_handler = stray_end_tag_handler
        self.memory = memory if memory is not None else MemoryLimiter()
        self.counter = counter
        self.buffer_size = buffer_size

        self.tokenizer = None
        self.open_elements = []
        self._open_names = {}
        self._removing_at = None
        self._select_depth = 0
        self._foreign_depth = 0

    def tokenize(self, source):
        """Consume every token html5lib produces from ``source``."""
        tokenizer = EntityTrackingTokenizer(source)
        if self.buffer_size is not None:
            tokenizer.stream._defaultChunkSize = self.buffer_size
        self.tokenizer = tokenizer

        for token in tokenizer:
            type = token["type"]
            self._unsettle(token.get("decodedBrackets", 0))
            if type == constants.StartTag:
                self._settle(token["name"])
                self.start_tag(token["name"], token["data"], token["selfClosing"])
            elif type == constants.EndTag:
                self._settle(token["name"])
                self._settle_attributes(token["data"])
                self.end_tag(token["name"])
            elif type in (constants.Characters, constants.SpaceCharacters):
                self.text(token["data"])
            elif type == constants.Comment:
                self.comment(token["data"])
            elif type == constants.Doctype:
                for key in ("name", "publicId", "systemId"):
                    if token[key] is not None:
                        self._settle(token[key])
                log.debug("dropping doctype %r", token["name"])
            elif type == constants.ParseError:
                log.debug("parse error: %s", token["data"])

    def start_tag(self, name, attributes, self_closing=False):
        self._settle_attributes(attributes)
        can_have_content = not self_closing and name not in constants.voidElements
        text_state = self._text_state(name, can_have_content)

        if self._removing_at is not None:
            if can_have_content:
                self._push(OpenElement(name, removed=True))
            self._switch_text_state(text_state)
            return

        size = len(name) + sum(len(k) + len(v) for k, v in attributes.items())
        self.memory.increase(size)
        try:
            element = ElementStart(name, attributes, self_closing, can_have_content)
            if self.element_handler is not None:
                self.element_handler(element)

            if element.removed and not element.keep_content:
                log.debug("removing <%s> with its content", name)
                if can_have_content:
                    self._push(OpenElement(name, removed=True))
                    self._removing_at = len(self.open_elements) - 1
            else:
                if element.removed:
                    log.debug("removing <%s>, keeping its content", name)
                elif element.replacement is not None:
                    self._write(element.replacement)
                else:
                    self._write(serialize_start_tag(name, element.attributes,
                                                    self_closing))
                if can_have_content:
                    self._push(OpenElement(name, element.end_tag_handlers,
                                           removed=element.removed))
        finally:
            self.memory.decrease(size)

        self._switch_text_state(text_state)

    def end_tag(self, name):
        index = self._find_open(name)
        if index is None:
            if self._removing_at is None:
                self._stray_end_tag(name)
            return

        removing_at = self._removing_at
        open_element = self.open_elements[index]
        self._pop_to(index)
        if removing_at is not None:
            if index >= removing_at:
                if index == removing_at:
                    self._removing_at = None
                return
            # the removed element was closed implicitly
            self._removing_at = None

        end = ElementEnd(name)
        for handler in open_element.end_tag_handlers or ():
            handler(end)
        if end.removed:
            return
        if end.replacement is not None:
            self._write(end.replacement)
        elif not open_element.removed:
            self._write(serialize_end_tag(name))

    def text(self, data):
        self._settle(data)
        if self._removing_at is not None:
            return

        self.memory.increase(len(data))
        try:
            chunk = TextChunk(data)
            if self.text_handler is not None:
                self.text_handler(chunk)
            if chunk.removed:
                return
            if chunk.replacement is not None:
                self._write(chunk.replacement)
            else:
                self._write(escape_text(data))
        finally:
            self.memory.decrease(len(data))

    def comment(self, data):
        self._settle(data)
        if self._removing_at is not None:
            return

        comment = Comment(data)
        if self.comment_handler is not None:
            self.comment_handler(comment)
        if comment.removed:
            return
        if comment.replacement is not None:
            self._write(comment.replacement)
        else:
            self._write("<!--%s-->" % data)

    def end_document(self):
        end = DocumentEnd()
        if self.end_handler is not None:
            self.end_handler(end)
        for content in end.appended:
            self._write(content)

    def _stray_end_tag(self, name):
        if self.stray_end_tag_handler is None:
            return
        end = ElementEnd(name)
        self.stray_end_tag_handler(end)
        if end.removed:
            return
        if end.replacement is not None:
            self._write(end.replacement)
        else:
            self._write(serialize_end_tag(name))

    def _text_state(self, name, can_have_content):
        state = constants.textModeElements.get(name)
        if state is None or not can_have_content or self._foreign_depth:
            return None
        if self._select_depth and name != "script":
            raise AmbiguousParseError(
                "<%s> inside <select> makes the tokenizer state ambiguous" % name)
        return state

    def _switch_text_state(self, state):
        if state is not None:
            self.tokenizer.state = getattr(self.tokenizer, state)

    def _push(self, open_element):
        name = open_element.name
        self.memory.increase(len(name))
        self.open_elements.append(open_element)
        self._open_names[name] = self._open_names.get(name, 0) + 1
        if name in constants.selectElements:
            self._select_depth += 1
        elif name in constants.foreignElements:
            self._foreign_depth += 1

    def _pop_to(self, index):
        for open_element in self.open_elements[index:]:
            name = open_element.name
            self.memory.decrease(len(name))
            self._open_names[name] -= 1
            if name in constants.selectElements:
                self._select_depth -= 1
            elif name in constants.foreignElements:
                self._foreign_depth -= 1
        del self.open_elements[index:]

    def _find_open(self, name):
        if not self._open_names.get(name):
            return None
        for index in range(len(self.open_elements) - 1, -1, -1):
            if self.open_elements[index].name == name:
                return index
        return None

    def _settle(self, data):
        if self.counter is not None:
            self.counter.settle(data)

    def _unsettle(self, decoded):
        if decoded and self.counter is not None:
            self.counter.settled -= decoded

    def _settle_attributes(self, attributes):
        if self.counter is None or not attributes:
            return
        if isinstance(attributes, dict):
            attributes = attributes.items()
        for name, value in attributes:
            self.counter.settle(name)
            self.counter.settle(value)

    def _write(self, data):
        if not data:
            return
        try:
            self.sink(data)
        except Exception as exc:
            raise SinkError("the output sink failed: %s" % exc) from exc
