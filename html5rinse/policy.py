# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

"""Allow-list policies.

A :class:`Policy` is built once and then only read. It is safe to share one
instance between any number of concurrent sanitize calls, and the module
level :data:`DEFAULT_POLICY` is exactly that.

Example usage::

    from html5rinse import Policy, clean

    policy = Policy(preserve_escaped=True)
    clean("<font>big</font>", policy=policy)

"""

from types import MappingProxyType

from . import constants


class MemorySettings(object):
    """Memory limits for a single sanitize call.

    preallocated_parsing_buffer_size
      Number of characters handed to the tokenizer per read. The buffer of
      that size is charged against the limit up front.
    max_allowed_memory_usage
      Upper bound, in characters, of everything a call holds at once (read
      buffers, open elements, the token being processed). ``None`` means
      unbounded.
    """

    __slots__ = ("preallocated_parsing_buffer_size", "max_allowed_memory_usage")

    def __init__(self, preallocated_parsing_buffer_size=1024,
                 max_allowed_memory_usage=None):
        if preallocated_parsing_buffer_size < 1:
            raise ValueError("preallocated_parsing_buffer_size must be positive")
        if (max_allowed_memory_usage is not None and
                max_allowed_memory_usage < preallocated_parsing_buffer_size):
            raise ValueError("max_allowed_memory_usage is smaller than the "
                             "preallocated parsing buffer")
        object.__setattr__(self, "preallocated_parsing_buffer_size",
                           preallocated_parsing_buffer_size)
        object.__setattr__(self, "max_allowed_memory_usage",
                           max_allowed_memory_usage)

    def __setattr__(self, name, value):
        raise AttributeError("MemorySettings is immutable")

    def __eq__(self, other):
        if not isinstance(other, MemorySettings):
            return NotImplemented
        return (self.preallocated_parsing_buffer_size ==
                other.preallocated_parsing_buffer_size and
                self.max_allowed_memory_usage == other.max_allowed_memory_usage)

    def __hash__(self):
        return hash((self.preallocated_parsing_buffer_size,
                     self.max_allowed_memory_usage))

    def __repr__(self):
        return "MemorySettings(preallocated_parsing_buffer_size=%r, max_allowed_memory_usage=%r)" % (
            self.preallocated_parsing_buffer_size, self.max_allowed_memory_usage)


def _names(value):
    if isinstance(value, str):
        raise TypeError("expected a collection of names, got the string %r" % value)
    return frozenset(value)


def _names_by_tag(value):
    return MappingProxyType({tag: _names(names) for tag, names in value.items()})


def _values_by_tag(value):
    return MappingProxyType({tag: MappingProxyType(dict(attributes))
                             for tag, attributes in value.items()})


class Policy(object):
    """Allow-list describing what survives sanitization.

    Keyword options (defaults are the safe preset in :mod:`html5rinse.constants`):

    allowed_tags
      Tags that are kept.
    allowed_generic_attributes
      Attributes kept on every allowed tag.
    allowed_tag_attributes
      Mapping of tag name to the extra attributes kept on that tag.
    allowed_url_schemes
      Schemes accepted in URL attributes. Only absolute ``scheme://`` URLs
      pass; everything else is dropped.
    url_attributes
      Mapping of tag name to the attributes whose value is a URL.
    set_tag_attributes
      Mapping of tag name to ``{attribute: value}`` forced onto that tag.
    remove_content_tags
      Tags removed together with everything inside them. Keep ``script`` and
      ``style`` in here.
    preserve_escaped=False|True
      What to do with a tag that is not allowed: drop the tag and keep its
      content, or output the tag itself as escaped text.
    memory_settings
      A :class:`MemorySettings`.
    """

    options = ("allowed_tags", "allowed_generic_attributes",
               "allowed_tag_attributes", "allowed_url_schemes",
               "url_attributes", "set_tag_attributes", "remove_content_tags",
               "preserve_escaped", "memory_settings")

    __slots__ = options

    _converters = {
        "allowed_tags": _names,
        "allowed_generic_attributes": _names,
        "allowed_tag_attributes": _names_by_tag,
        "allowed_url_schemes": _names,
        "url_attributes": _names_by_tag,
        "set_tag_attributes": _values_by_tag,
        "remove_content_tags": _names,
        "preserve_escaped": bool,
        "memory_settings": lambda settings: settings,
    }

    def __init__(self, **kwargs):
        unexpected_args = frozenset(kwargs) - frozenset(self.options)
        if len(unexpected_args) > 0:
            raise TypeError("__init__() got an unexpected keyword argument '%s'" %
                            next(iter(unexpected_args)))

        defaults = {
            "allowed_tags": constants.allowedTags,
            "allowed_generic_attributes": constants.allowedGenericAttributes,
            "allowed_tag_attributes": constants.allowedTagAttributes,
            "allowed_url_schemes": constants.allowedUrlSchemes,
            "url_attributes": constants.urlAttributes,
            "set_tag_attributes": constants.setTagAttributes,
            "remove_content_tags": constants.removeContentTags,
            "preserve_escaped": False,
            "memory_settings": MemorySettings(),
        }
        for attr in self.options:
            value = kwargs.get(attr, defaults[attr])
            object.__setattr__(self, attr, self._converters[attr](value))

        if not isinstance(self.memory_settings, MemorySettings):
            raise TypeError("memory_settings must be a MemorySettings instance")

    def __setattr__(self, name, value):
        raise AttributeError("Policy is immutable; use Policy.replace()")

    def replace(self, **kwargs):
        """Return a new policy with the given options changed."""
        values = {attr: getattr(self, attr) for attr in self.options}
        values.update(kwargs)
        return Policy(**values)

    def allowed_attributes(self, tag_name):
        per_tag = self.allowed_tag_attributes.get(tag_name)
        if per_tag is None:
            return self.allowed_generic_attributes
        return self.allowed_generic_attributes | per_tag

    def __repr__(self):
        return "<Policy %d tags, preserve_escaped=%r>" % (len(self.allowed_tags),
                                                          self.preserve_escaped)


#: Shared default policy, built once at import time
DEFAULT_POLICY = Policy()
