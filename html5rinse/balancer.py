# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

import logging

from .serializer import serialize_end_tag

log = logging.getLogger(__name__)


class UnclosedTagRegistry(object):
    """Dense slot map from small integer handles to tag names.

    Removing an entry leaves a vacant slot that the next insert reuses, so
    handles stay small no matter how many tags are opened and closed.
    Iteration goes by ascending handle.
    """

    def __init__(self, memory=None):
        self._entries = []
        self._vacant = []
        self._length = 0
        self._memory = memory

    def insert(self, tag_name):
        if self._memory is not None:
            self._memory.increase(len(tag_name))
        if self._vacant:
            handle = self._vacant.pop()
            self._entries[handle] = tag_name
        else:
            handle = len(self._entries)
            self._entries.append(tag_name)
        self._length += 1
        return handle

    def remove(self, handle):
        tag_name = self._entries[handle]
        if tag_name is None:
            raise KeyError(handle)
        self._entries[handle] = None
        self._vacant.append(handle)
        self._length -= 1
        if self._memory is not None:
            self._memory.decrease(len(tag_name))
        return tag_name

    def __contains__(self, handle):
        return 0 <= handle < len(self._entries) and self._entries[handle] is not None

    def __getitem__(self, handle):
        tag_name = self._entries[handle]
        if tag_name is None:
            raise KeyError(handle)
        return tag_name

    def __len__(self):
        return self._length

    def __iter__(self):
        for handle, tag_name in enumerate(self._entries):
            if tag_name is not None:
                yield handle, tag_name


class TagBalancer(object):
    """Keeps track of accepted open tags and closes whatever is left open."""

    def __init__(self, memory=None):
        self.registry = UnclosedTagRegistry(memory)

    def open(self, tag_name):
        return self.registry.insert(tag_name)

    def close(self, handle):
        self.registry.remove(handle)

    def closing_tags(self):
        if self.registry:
            log.debug("closing %d unbalanced tag(s)", len(self.registry))
        return "".join(serialize_end_tag(tag_name) for _, tag_name in self.registry)
