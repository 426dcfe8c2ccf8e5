# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

import logging

from .constants import ResourceExceededError

log = logging.getLogger(__name__)


class MemoryLimiter(object):
    """Per-call accounting of the memory held by a sanitize call.

    Usage is counted in characters. Every holder of data increases the
    usage while it keeps the data and decreases it when it lets go; going
    over the maximum raises :class:`ResourceExceededError`.
    """

    def __init__(self, max_allowed_memory_usage=None):
        self.max_allowed_memory_usage = max_allowed_memory_usage
        self.current_usage = 0

    def preallocate(self, amount):
        self.increase(amount)

    def increase(self, amount):
        usage = self.current_usage + amount
        limit = self.max_allowed_memory_usage
        if limit is not None and usage > limit:
            log.debug("memory limit of %d exceeded (requested %d)", limit, usage)
            raise ResourceExceededError(
                "The memory limit of %d has been exceeded" % limit)
        self.current_usage = usage

    def decrease(self, amount):
        self.current_usage = max(0, self.current_usage - amount)
