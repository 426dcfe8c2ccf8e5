# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

"""Allow-list HTML sanitizer.

Sanitize the html, removing every element not in ``allowed_tags`` (or
escaping it when ``preserve_escaped`` is set), stripping out every attribute
not allowed for its tag, and dropping URL attributes whose scheme is not in
``allowed_url_schemes``. Elements left open are closed at the end.

  clean('<script>do_nasty_stuff()</script><b>hi')
   => <b>hi</b>
  clean('<a href="javascript:sucker();">Click here for $100</a>')
   => <a rel="noopener noreferrer">Click here for $100</a>
"""

import logging
from functools import partial

import webencodings

from .balancer import TagBalancer
from .constants import ConfigurationError, SinkError
from .memory import MemoryLimiter
from .policy import DEFAULT_POLICY
from .rewriter import Rewriter
from .serializer import escape_text, literal_start_tag, serialize_end_tag
from .streaming import ChunkCoordinator

log = logging.getLogger(__name__)


def _escape_end_tag(end):
    end.replace(serialize_end_tag(end.name), as_text=True)


class Sanitizer(object):
    """Sanitizes documents according to one :class:`~html5rinse.policy.Policy`.

    The sanitizer itself holds no per-document state, so one instance can
    be used from several threads at once.
    """

    def __init__(self, policy=DEFAULT_POLICY):
        self.policy = policy

    def clean(self, content):
        """Sanitize ``content`` (``str`` or ``bytes``) and return the result.

        Nothing is returned when an error is raised: the document as a whole
        has to be treated as unsafe.
        """
        output = []
        self.clean_streaming([content], output.append)
        return "".join(output)

    def clean_streaming(self, chunks, sink, encoding=None, input_encoding="utf-8"):
        """Sanitize an iterable of chunks, pushing the output into ``sink``.

        ``sink`` is called with ``str`` pieces, or with ``bytes`` encoded as
        ``encoding`` when one is given. When an error is raised, whatever the
        sink received so far must be discarded.
        """
        if encoding is None:
            SanitizeCall(self.policy, sink, input_encoding).run(chunks)
            return
        encoding_sink = EncodingSink(sink, encoding)
        SanitizeCall(self.policy, encoding_sink, input_encoding).run(chunks)
        encoding_sink.close()


class EncodingSink(object):
    """Encodes output pieces before passing them on to ``sink``.

    Stateful encodings only return to their initial shift state on
    :meth:`close`.
    """

    def __init__(self, sink, encoding):
        if webencodings.lookup(encoding) is None:
            raise ConfigurationError("unknown output encoding %r" % encoding)
        self.sink = sink
        self.encoder = webencodings.IncrementalEncoder(encoding, "xmlcharrefreplace")

    def __call__(self, data):
        self.sink(self.encoder.encode(data))

    def close(self):
        tail = self.encoder.encode("", final=True)
        if not tail:
            return
        try:
            self.sink(tail)
        except Exception as exc:
            raise SinkError("the output sink failed: %s" % exc) from exc


class SanitizeCall(object):
    """State of a single sanitize call.

    Everything mutable (open tag registry, bracket counter, memory usage)
    lives here and dies with the call.
    """

    def __init__(self, policy, sink, input_encoding="utf-8"):
        self.policy = policy
        self.sink = sink
        self.input_encoding = input_encoding

        settings = policy.memory_settings
        self.memory = MemoryLimiter(settings.max_allowed_memory_usage)
        self.balancer = TagBalancer(self.memory)

    def run(self, chunks):
        settings = self.policy.memory_settings
        self.memory.preallocate(settings.preallocated_parsing_buffer_size)

        coordinator = ChunkCoordinator(chunks, self.input_encoding, self.memory)
        rewriter = Rewriter(self.sink,
                            element_handler=self.element_handler,
                            text_handler=self.text_handler,
                            comment_handler=self.comment_handler,
                            end_handler=self.end_handler,
                            stray_end_tag_handler=self.stray_end_tag_handler,
                            memory=self.memory,
                            counter=coordinator.counter,
                            buffer_size=settings.preallocated_parsing_buffer_size)
        coordinator.drive(rewriter)

    def element_handler(self, element):
        policy = self.policy
        tag_name = element.name

        if tag_name in policy.remove_content_tags:
            element.remove()
            return

        if tag_name not in policy.allowed_tags:
            self.delete_element(element)
            return

        self.clean_attributes(element)

        for attribute_name in policy.url_attributes.get(tag_name, ()):
            self.clean_link(element, attribute_name)

        for attribute_name, value in policy.set_tag_attributes.get(tag_name, {}).items():
            element.set_attribute(attribute_name, value)

        # Manually balance the tag if it is going to get an end tag
        if element.end_tag_handlers is not None:
            handle = self.balancer.open(tag_name)
            element.end_tag_handlers.append(partial(self.close_tag, handle))

    def clean_attributes(self, element):
        allowed = self.policy.allowed_attributes(element.name)
        for attribute_name in list(element.attributes):
            if attribute_name not in allowed:
                log.debug("stripping %s from <%s>", attribute_name, element.name)
                element.remove_attribute(attribute_name)

    def clean_link(self, element, attribute_name):
        raw_url = element.get_attribute(attribute_name)
        if raw_url is None:
            return

        scheme, separator, _ = raw_url.partition("://")
        if not separator or scheme not in self.policy.allowed_url_schemes:
            log.debug("dropping %s=%r from <%s>", attribute_name, raw_url, element.name)
            element.remove_attribute(attribute_name)

    def delete_element(self, element):
        if not self.policy.preserve_escaped:
            element.remove_and_keep_content()
            return

        element.replace(literal_start_tag(element.name, element.attributes,
                                          element.self_closing), as_text=True)
        if element.end_tag_handlers is not None:
            element.end_tag_handlers.append(_escape_end_tag)

    def close_tag(self, handle, end):
        self.balancer.close(handle)

    def stray_end_tag_handler(self, end):
        policy = self.policy
        if (policy.preserve_escaped and end.name not in policy.allowed_tags and
                end.name not in policy.remove_content_tags):
            _escape_end_tag(end)
        else:
            end.remove()

    def text_handler(self, chunk):
        chunk.replace(escape_text(chunk.data))

    def comment_handler(self, comment):
        comment.remove()

    def end_handler(self, document_end):
        document_end.append(self.balancer.closing_tags())


def clean(content, policy=DEFAULT_POLICY):
    """Sanitize ``content`` with ``policy``, returning the cleaned html.

    :arg content: a ``str``, or ``bytes`` in UTF-8 (a BOM overrides that)
    :arg policy: the :class:`~html5rinse.policy.Policy` to enforce

    :raises ResourceExceededError: the policy's memory limit was hit
    :raises AmbiguousParseError: the input cannot be tokenized reliably;
      discard it rather than trying to fix it
    :raises ConfigurationError: an attribute set by the policy has an
      invalid name
    """
    return Sanitizer(policy).clean(content)


def clean_streaming(chunks, sink, policy=DEFAULT_POLICY, encoding=None,
                    input_encoding="utf-8"):
    """Sanitize ``chunks`` piece by piece, pushing the output into ``sink``.

    Splitting the input differently never changes the output. Besides the
    errors of :func:`clean` this raises :class:`SinkError` when ``sink``
    itself fails.
    """
    Sanitizer(policy).clean_streaming(chunks, sink, encoding=encoding,
                                      input_encoding=input_encoding)
