import json
import logging
from http import HTTPStatus
from mimetypes import MimeTypes
from pathlib import Path

mimetypes = MimeTypes()
logger = logging.getLogger(__name__)


class Response(object):
    """
    Generic response object.
    """

    def __init__(self, content, headers=None, status=HTTPStatus.OK):
        self.content = content
        # TODO ensure headers have case-insensitive keys to match HTTP
        self.headers = {} if headers is None else headers
        self.status = HTTPStatus(status)

    @property
    def content(self):
        return vars(self)['content']

    @content.setter
    def content(self, value):
        if isinstance(value, bytes):
            vars(self)['content'] = value
        else:
            vars(self)['content'] = bytes(value, encoding='utf8')

    @property
    def text(self):
        return self.content.decode('utf8')

    def __repr__(self):
        return '<Response %d %d bytes>' % (self.status, len(self.content))


def to_response(result):
    """
    Reprocess the result produced by a handler into an instance of
    Response, if the handler has not already done so.
    """

    if result is None:
        return Response(b'')

    elif isinstance(result, Response):
        return result

    elif isinstance(result, bytes):
        return Response(result, {'content-type': 'application/octet-stream'})

    elif isinstance(result, str):
        # handlers typically return rendered page fragments.
        return Response(result, {'content-type': 'text/html; charset=utf-8'})

    elif isinstance(result, dict):
        # Assuming dicts are JSON objects.
        return Response(
            json.dumps(result),
            {'content-type': 'application/json'},
        )

    raise ValueError('unsupported handler result')


def serve_file(path):
    """
    Produce a response with the contents of the file at path.  Any
    error raised while reading the file is propagated.
    """

    path = Path(path)
    payload = path.read_bytes()
    mimetype, encoding = mimetypes.guess_type(path.name)
    if mimetype is None:
        mimetype = 'application/octet-stream'
    headers = {'content-type': mimetype}
    if encoding:
        headers['content-encoding'] = encoding
    logger.debug("serving %d bytes from '%s'", len(payload), path)
    return Response(payload, headers)


def redirect(location, status=HTTPStatus.SEE_OTHER):
    return Response(b'', {'location': location}, status=status)


class ErrorPages(object):
    """
    Renders the error pages for the soft routing outcomes.  Host
    applications may provide their own subclass to render these in
    their own templates.
    """

    def render(self, status, message):
        return Response(
            '<h1>%d %s</h1><p>%s</p>' % (status, status.phrase, message),
            {'content-type': 'text/html; charset=utf-8'},
            status=status,
        )

    def not_found(self):
        return self.render(
            HTTPStatus.NOT_FOUND,
            'The requested page could not be found.',
        )

    def bad_request(self):
        return self.render(
            HTTPStatus.BAD_REQUEST,
            'The request could not be understood.',
        )

    def access_denied(self):
        return self.render(
            HTTPStatus.FORBIDDEN,
            'You do not have permission to access this page.',
        )

    def for_status(self, status):
        """
        Return the error page for one of the routing outcome statuses.
        """

        return {
            HTTPStatus.NOT_FOUND: self.not_found,
            HTTPStatus.BAD_REQUEST: self.bad_request,
            HTTPStatus.FORBIDDEN: self.access_denied,
        }[HTTPStatus(status)]()
