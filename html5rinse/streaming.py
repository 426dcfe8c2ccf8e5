# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

"""Feeding caller chunks to the html5lib tokenizer.

html5lib pulls its input through ``read()``, so the coordinator is a file
like object over the caller's chunks. It decodes them, keeps count of the
angle brackets that may still be waiting for their ``>``, and once the
chunks run out appends enough ``>`` for the tokenizer to emit a tag it
would otherwise drop at end of file.
"""

import logging
import re

import webencodings

from .constants import ConfigurationError

log = logging.getLogger(__name__)

IDLE = "idle"
STREAMING = "streaming"
DRAINING = "draining"
FINALIZING = "finalizing"
DONE = "done"

_bracketRe = re.compile("[<>]")


def _needs_lookahead(char):
    # html5lib holds a trailing CR or high surrogate back until the next
    # read, so a piece must not end on one while more input may follow
    return char == "\r" or "\ud800" <= char <= "\udbff"


class BracketCounter(object):
    """Pending angle-bracket count for one call.

    ``pending`` follows the raw input: one up for every ``<``, one down
    (never below zero) for every ``>``. ``settled`` counts the ``<`` found
    inside tokens the tokenizer has already closed (text, comments,
    attributes); those are not waiting for anything.
    """

    def __init__(self):
        self.pending = 0
        self.settled = 0

    def feed(self, data):
        pending = self.pending
        if ">" not in data:
            pending += data.count("<")
        else:
            for bracket in _bracketRe.findall(data):
                if bracket == "<":
                    pending += 1
                elif pending:
                    pending -= 1
        self.pending = pending

    def settle(self, data):
        self.settled += data.count("<")

    def padding(self):
        return max(0, self.pending - self.settled)


class ChunkCoordinator(object):
    """Drives a :class:`~html5rinse.rewriter.Rewriter` over an iterable of chunks.

    Chunks may be ``bytes`` (decoded with ``input_encoding``, a BOM wins) or
    ``str``. A coordinator goes through ``idle``, ``streaming``,
    ``draining``, ``finalizing`` and ``done`` exactly once.
    """

    def __init__(self, chunks, input_encoding="utf-8", memory=None):
        if webencodings.lookup(input_encoding) is None:
            raise ConfigurationError("unknown input encoding %r" % input_encoding)
        self.input_encoding = input_encoding
        self.counter = BracketCounter()
        self.state = IDLE
        self._chunks = iter(chunks)
        self._decoder = None
        self._buffer = ""
        self._offset = 0
        self._memory = memory

    def drive(self, rewriter):
        if self.state != IDLE:
            raise RuntimeError("a ChunkCoordinator can only be driven once")
        self.state = STREAMING
        rewriter.tokenize(self)
        self.state = FINALIZING
        rewriter.end_document()
        self.state = DONE

    def read(self, size=-1):
        if size == 0:
            return ""
        while self.state == STREAMING:
            remaining = len(self._buffer) - self._offset
            if remaining > 1 or (remaining == 1 and
                                 not _needs_lookahead(self._buffer[-1])):
                break
            self._pull()

        start = self._offset
        end = len(self._buffer) if size < 0 else min(start + size, len(self._buffer))
        if (end - start > 1 and _needs_lookahead(self._buffer[end - 1]) and
                (end < len(self._buffer) or self.state == STREAMING)):
            end -= 1
        piece = self._buffer[start:end]
        self._offset = end
        if self._memory is not None:
            self._memory.decrease(len(piece))
        return piece

    def _pull(self):
        try:
            chunk = next(self._chunks)
        except StopIteration:
            self._drain()
            return

        if isinstance(chunk, (bytes, bytearray, memoryview)):
            if self._decoder is None:
                self._decoder = webencodings.IncrementalDecoder(self.input_encoding)
            text = self._decoder.decode(bytes(chunk))
        elif isinstance(chunk, str):
            text = chunk
        else:
            raise TypeError("chunks must be bytes or str, not %s" %
                            type(chunk).__name__)
        self.counter.feed(text)
        self._append(text)

    def _drain(self):
        if self._decoder is not None:
            tail = self._decoder.decode(b"", final=True)
            self.counter.feed(tail)
            self._append(tail)
        padding = self.counter.padding()
        if padding:
            log.debug("input ended inside %d tag(s), appending '>' to flush them",
                      padding)
            self._append(">" * padding)
        self.state = DRAINING

    def _append(self, text):
        if not text:
            return
        if self._memory is not None:
            self._memory.increase(len(text))
        self._buffer = self._buffer[self._offset:] + text
        self._offset = 0
