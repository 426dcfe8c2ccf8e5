# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

"""
Streaming, allow-list based HTML sanitizer built on the html5lib tokenizer.

Untrusted HTML fragments are cleaned against a :class:`Policy`: tags and
attributes that are not allowed are removed (or escaped), ``script`` and
``style`` disappear with their content, URLs with unsafe schemes are
dropped, and every element left open is closed at the end.

Example usage::

    import html5rinse
    html5rinse.clean('a <a href="http://www.example.com">good</a> example')

Large or incrementally available input can be fed in chunks::

    output = []
    html5rinse.clean_streaming(response.iter_content(), output.append)

For convenience, this module re-exports the following names:

* :func:`~.sanitizer.clean`
* :func:`~.sanitizer.clean_streaming`
* :class:`~.sanitizer.Sanitizer`
* :class:`~.policy.Policy`, :class:`~.policy.MemorySettings` and
  :data:`~.policy.DEFAULT_POLICY`
* the exceptions from :mod:`~.constants`
"""

from .constants import (SanitizerError, ConfigurationError, ResourceExceededError,
                        AmbiguousParseError, SinkError)
from .policy import Policy, MemorySettings, DEFAULT_POLICY
from .sanitizer import Sanitizer, clean, clean_streaming

__all__ = ["clean", "clean_streaming", "Sanitizer", "Policy", "MemorySettings",
           "DEFAULT_POLICY", "SanitizerError", "ConfigurationError",
           "ResourceExceededError", "AmbiguousParseError", "SinkError"]

# this has to be at the top level, see how setup.py parses this
#: Distribution version number.
__version__ = "0.1.4"
