"""
Route patterns and the segment-wise matcher.

A route pattern such as ``/item/{id=\\d+}/{path=*}`` is compiled once
into a tuple of typed segments, which are then matched against the
segments of a requested path.
"""

import logging
from enum import Enum
from urllib.parse import unquote

import regex
from uritemplate import URITemplate

logger = logging.getLogger(__name__)

WILDCARD = '*'

# names must also be valid uritemplate variable names.
check_name = regex.compile(r'[A-Za-z0-9_]+').fullmatch


def normalize_path(path):
    """
    All routes are expressed from the root of the application, so the
    path must always have a leading '/'.
    """

    if not path.startswith('/'):
        return '/' + path
    return path


def split_path(path):
    """
    Split a path into its segments, with leading and trailing '/'
    removed such that 'a/b' and '/a/b/' produce the same segments.  The
    root path produces a single empty segment.
    """

    return path.strip('/').split('/')


class MismatchKind(Enum):
    # segment count or literal segment mismatch
    STRUCTURAL = 'structural'
    # right shape, but a placeholder constraint rejected the value
    CONSTRAINT = 'constraint'


class PatternMatch(object):
    """
    A successful match, with the params captured from the path.
    """

    def __init__(self, params):
        self.params = params

    def __bool__(self):
        return True

    def __eq__(self, other):
        return (
            type(self) is type(other) and
            list(self.params.items()) == list(other.params.items())
        )

    def __repr__(self):
        return '<PatternMatch %r>' % (self.params,)


class PatternMismatch(object):

    def __init__(self, kind):
        self.kind = kind

    def __bool__(self):
        return False

    def __eq__(self, other):
        return type(self) is type(other) and self.kind is other.kind

    def __repr__(self):
        return '<PatternMismatch %s>' % (self.kind.value,)


STRUCTURAL_MISMATCH = PatternMismatch(MismatchKind.STRUCTURAL)
CONSTRAINT_MISMATCH = PatternMismatch(MismatchKind.CONSTRAINT)


class LiteralSegment(object):

    def __init__(self, text):
        self.text = text

    @property
    def raw(self):
        return self.text

    @property
    def fragment(self):
        return self.text

    def match(self, value):
        return value == self.text

    def __eq__(self, other):
        return type(self) is type(other) and self.text == other.text

    def __repr__(self):
        return '<LiteralSegment %r>' % (self.text,)


class PlaceholderSegment(object):
    """
    A named segment, optionally constrained by a regular expression
    which must match the entire value.
    """

    def __init__(self, name, constraint=None):
        self.name = name
        self.constraint = constraint
        if constraint is None:
            self.regex_pattern = None
        else:
            try:
                self.regex_pattern = regex.compile(constraint)
            except regex.error as e:
                raise ValueError(
                    "unsupported route segment: invalid constraint %r for "
                    "placeholder '%s': %s" % (constraint, name, e)
                ) from None

    @property
    def raw(self):
        if self.constraint is None:
            return '{%s}' % self.name
        return '{%s=%s}' % (self.name, self.constraint)

    @property
    def fragment(self):
        """
        The uritemplate expression for this segment.
        """

        return '{%s}' % self.name

    def match(self, value):
        if self.regex_pattern is None:
            return True
        return self.regex_pattern.fullmatch(value) is not None

    def __eq__(self, other):
        return (
            type(self) is type(other) and
            self.name == other.name and
            self.constraint == other.constraint
        )

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__, self.raw)


class WildcardSegment(PlaceholderSegment):
    """
    A terminal segment that captures the remainder of the path.
    """

    def __init__(self, name):
        super().__init__(name)

    @property
    def raw(self):
        return '{%s=%s}' % (self.name, WILDCARD)

    @property
    def fragment(self):
        # reserved expansion keeps '/' and the other reserved characters
        # as is; anything else, such as spaces, is still percent-encoded.
        return '{+%s}' % self.name


def parse_segment(raw):
    """
    Parse a single raw segment of a route pattern into one of the
    segment types.  Any segment with a '{' is treated as a placeholder.
    """

    if '{' not in raw:
        return LiteralSegment(raw)

    if not (raw.startswith('{') and raw.endswith('}')):
        raise ValueError(
            "unsupported route segment %r: a placeholder must span the "
            "entire segment" % raw
        )

    name, sep, constraint = raw[1:-1].partition('=')
    if not check_name(name):
        raise ValueError(
            "unsupported route segment %r: invalid placeholder name" % raw)

    if not sep:
        return PlaceholderSegment(name)
    if constraint == WILDCARD:
        return WildcardSegment(name)
    if not constraint:
        raise ValueError(
            "unsupported route segment %r: empty constraint" % raw)
    return PlaceholderSegment(name, constraint)


def check_pattern_wildcard_terminal(segments):
    for segment in segments[:-1]:
        if isinstance(segment, WildcardSegment):
            raise ValueError(
                "unsupported route pattern: wildcard placeholder '%s' must "
                "be the final segment" % segment.name
            )


def check_pattern_no_name_reuse(segments):
    seen = set()
    for segment in segments:
        if not isinstance(segment, PlaceholderSegment):
            continue
        if segment.name in seen:
            raise ValueError(
                "unsupported route pattern: placeholder name '%s' has been "
                "reused" % segment.name
            )
        seen.add(segment.name)


default_pattern_validators = [
    check_pattern_wildcard_terminal,
    check_pattern_no_name_reuse,
]


class RoutePattern(object):
    """
    The compiled form of a route pattern string.
    """

    def __init__(self, raw, pattern_validators=default_pattern_validators):
        """
        Arguments:

        raw
            The route pattern string, i.e. '/literal/{param}/{p2=regex}'
        pattern_validators
            A list of callables that will be called with the compiled
            segments, which should raise ValueError for unsupported
            patterns.
        """

        self.raw = raw
        self.segments = tuple(parse_segment(s) for s in split_path(raw))
        for validator in pattern_validators:
            validator(self.segments)

        self.names = tuple(
            segment.name for segment in self.segments
            if isinstance(segment, PlaceholderSegment)
        )
        self.has_wildcard = isinstance(self.segments[-1], WildcardSegment)
        self.template = URITemplate(
            '/' + '/'.join(segment.fragment for segment in self.segments))

    def __eq__(self, other):
        return type(self) is type(other) and self.segments == other.segments

    def __hash__(self):
        return hash(self.raw)

    def __repr__(self):
        return '<RoutePattern %r>' % (self.raw,)

    def fill(self, params):
        """
        Substitute the params into the pattern verbatim, without any
        encoding and without the leading '/'.  Placeholders without a
        value are left as is.
        """

        return '/'.join(
            str(params.get(segment.name, segment.raw))
            if isinstance(segment, PlaceholderSegment) else segment.raw
            for segment in self.segments
        )

    def match(self, path_segments):
        """
        Match the segments of a requested path against this pattern.

        Returns a PatternMatch with the captured params, or a
        PatternMismatch noting whether the failure was due to the shape
        of the path or due to a placeholder constraint.
        """

        if not self.has_wildcard and len(path_segments) != len(self.segments):
            return STRUCTURAL_MISMATCH

        params = {}
        for idx, segment in enumerate(self.segments):
            if idx >= len(path_segments):
                # only wildcard patterns may get here.
                return STRUCTURAL_MISMATCH

            value = path_segments[idx]
            if isinstance(segment, LiteralSegment):
                if not segment.match(value):
                    return STRUCTURAL_MISMATCH
                continue

            if not value:
                # empty values never satisfy a placeholder, and this is
                # not treated as a constraint failure.
                return STRUCTURAL_MISMATCH

            if isinstance(segment, WildcardSegment):
                params[segment.name] = unquote('/'.join(path_segments[idx:]))
                return PatternMatch(params)

            # values are captured decoded, as urls are built encoded.
            value = unquote(value)
            if not segment.match(value):
                logger.debug(
                    "value %r rejected by constraint %r of placeholder '%s'",
                    value, segment.constraint, segment.name,
                )
                return CONSTRAINT_MISMATCH

            params[segment.name] = value

        return PatternMatch(params)


def match(pattern, path_segments, __cache={}):
    """
    Match path segments against a pattern, which may be provided as a
    string which will be compiled and cached.
    """

    if not isinstance(pattern, RoutePattern):
        if pattern not in __cache:
            __cache[pattern] = RoutePattern(pattern)
        pattern = __cache[pattern]
    return pattern.match(path_segments)
