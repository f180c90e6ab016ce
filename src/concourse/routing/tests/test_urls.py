import unittest

from concourse.routing.exceptions import (
    AliasNotFoundError,
    UnresolvedPlaceholderError,
)
from concourse.routing.pattern import split_path
from concourse.routing.routing import Route, RouteTable
from concourse.routing.urls import (
    URLBuilder,
    build_url,
    resolve_host,
)


def make_table():
    return RouteTable([
        Route('index', '/'),
        Route('indexTwo', '/indexTwo/{id}'),
        Route('indexTwoKey', '/indexTwo/{id}/{key}'),
        Route('item', r'/item/{id=\d+}', breadcrumbs=[
            {'alias': 'index', 'text': 'Home'},
            {'alias': {'indexTwo': {'id': 1}}, 'text': 'One'},
            {'url': 'https://example.com/', 'text': 'Elsewhere'},
        ]),
        Route('files', '/files/{path=*}'),
    ])


class ResolveHostTestCase(unittest.TestCase):

    def test_default(self):
        self.assertEqual('gustavus.edu', resolve_host())
        self.assertEqual('gustavus.edu', resolve_host({}))
        self.assertEqual(
            'example.com', resolve_host({}, default_host='example.com'))

    def test_priority(self):
        self.assertEqual('server.example.com', resolve_host({
            'SERVER_NAME': 'server.example.com',
        }))
        self.assertEqual('host.example.com', resolve_host({
            'HTTP_HOST': 'host.example.com',
            'SERVER_NAME': 'server.example.com',
        }))
        self.assertEqual('proxy.example.com', resolve_host({
            'HTTP_X_FORWARDED_HOST': 'proxy.example.com, inner.example.com',
            'HTTP_HOST': 'host.example.com',
            'SERVER_NAME': 'server.example.com',
        }))

    def test_empty_values_skipped(self):
        self.assertEqual('server.example.com', resolve_host({
            'HTTP_HOST': '',
            'SERVER_NAME': 'server.example.com',
        }))

    def test_custom_keys(self):
        self.assertEqual('custom.example.com', resolve_host(
            {'CUSTOM': 'custom.example.com', 'HTTP_HOST': 'host.example.com'},
            host_keys=['CUSTOM'],
        ))


class URLBuilderTestCase(unittest.TestCase):

    def setUp(self):
        self.table = make_table()
        self.builder = URLBuilder(self.table)

    def test_build_root(self):
        self.assertEqual('/', self.builder.build('index'))

    def test_build_param(self):
        self.assertEqual(
            '/indexTwo/2', self.builder.build('indexTwo', {'id': 2}))

    def test_build_params(self):
        self.assertEqual(
            '/indexTwo/2/hello',
            self.builder.build('indexTwoKey', {'id': 2, 'key': 'hello'}),
        )

    def test_build_extra_params_ignored(self):
        self.assertEqual(
            '/indexTwo/2', self.builder.build('indexTwo', {'id': 2, 'x': 1}))

    def test_build_constrained(self):
        self.assertEqual('/item/7', self.builder.build('item', {'id': '7'}))

    def test_build_encoded(self):
        self.assertEqual(
            '/indexTwo/a%20b%2Fc', self.builder.build('indexTwo', {'id': 'a b/c'}))

    def test_build_wildcard(self):
        self.assertEqual(
            '/files/a/b/c.txt',
            self.builder.build('files', {'path': 'a/b/c.txt'}),
        )

    def test_build_base_dir(self):
        self.assertEqual(
            '/arst/indexTwo/2',
            self.builder.build('indexTwo', {'id': 2}, '/arst'),
        )
        self.assertEqual(
            '/arst/indexTwo/2',
            self.builder.build('indexTwo', {'id': 2}, '/arst/'),
        )
        self.assertEqual('/arst/', self.builder.build('index', base_dir='/arst'))

    def test_build_default_base_dir(self):
        builder = URLBuilder(self.table, base_dir='/app/')
        self.assertEqual('/app/indexTwo/2', builder.build('indexTwo', {'id': 2}))
        self.assertEqual(
            '/other/indexTwo/2',
            builder.build('indexTwo', {'id': 2}, base_dir='/other'),
        )

    def test_build_full_url(self):
        self.assertEqual(
            'https://gustavus.edu/indexTwo/2',
            self.builder.build('indexTwo', {'id': 2}, full_url=True),
        )
        self.assertEqual(
            'https://example.com/arst/indexTwo/2',
            self.builder.build(
                'indexTwo', {'id': 2}, '/arst', full_url=True,
                environ={'HTTP_HOST': 'example.com'},
            ),
        )

    def test_build_full_url_builder_environ(self):
        builder = URLBuilder(self.table, environ={'SERVER_NAME': 'a.example'})
        self.assertEqual(
            'https://a.example/indexTwo/2',
            builder.build('indexTwo', {'id': 2}, full_url=True),
        )

    def test_build_alias_not_found(self):
        with self.assertRaises(AliasNotFoundError) as e:
            self.builder.build('indexT', {'id': 2})
        self.assertEqual('indexT', e.exception.alias)
        self.assertEqual(
            "alias 'indexT' not found in routing configuration",
            str(e.exception),
        )
        # also a KeyError
        with self.assertRaises(KeyError):
            self.builder.build('indexT')

    def test_build_unresolved(self):
        with self.assertRaises(UnresolvedPlaceholderError) as e:
            self.builder.build('indexTwoKey', {'id': 2})
        self.assertEqual('indexTwoKey', e.exception.alias)
        self.assertEqual(('key',), e.exception.names)

        with self.assertRaises(UnresolvedPlaceholderError):
            self.builder.build('indexTwo', {'id': ''})

    def test_round_trip(self):
        params = {'id': '23', 'key': 'arst'}
        url = self.builder.build('indexTwoKey', params, base_dir='/base')
        result = self.table.find(url[len('/base'):])
        self.assertEqual(('indexTwoKey', params), tuple(result))

        route = self.table['indexTwoKey']
        self.assertEqual(
            params,
            route.pattern.match(split_path(self.builder.build(
                'indexTwoKey', params))).params,
        )

    def test_round_trip_encoded(self):
        for params in ({'id': 'a b'}, {'id': 'a/b'}, {'id': '50%'}):
            url = self.builder.build('indexTwo', params)
            self.assertEqual(
                ('indexTwo', params), tuple(self.table.find(url)))

        params = {'path': 'a b/c.txt'}
        url = self.builder.build('files', params)
        self.assertEqual('/files/a%20b/c.txt', url)
        self.assertEqual(('files', params), tuple(self.table.find(url)))

    def test_urlify(self):
        self.assertEqual([
            {'text': 'Home', 'url': '/'},
            {'text': 'Some Url', 'url': 'Some Url'},
            {'text': 'Two', 'url': '/indexTwo/2'},
        ], self.builder.urlify([
            {'text': 'Home', 'alias': 'index'},
            {'text': 'Some Url', 'url': 'Some Url'},
            {'text': 'Two', 'alias': {'indexTwo': {'id': 2}}},
        ]))

    def test_breadcrumbs(self):
        self.assertEqual([
            {'text': 'Home', 'url': '/'},
            {'text': 'One', 'url': '/indexTwo/1'},
            {'text': 'Elsewhere', 'url': 'https://example.com/'},
        ], self.builder.breadcrumbs('item'))
        self.assertEqual([], self.builder.breadcrumbs('index'))

        with self.assertRaises(AliasNotFoundError):
            self.builder.breadcrumbs('nowhere')


class BuildUrlTestCase(unittest.TestCase):

    def test_build_url(self):
        table = make_table()
        self.assertEqual('/indexTwo/2', build_url(table, 'indexTwo', {'id': 2}))
        self.assertEqual(
            '/arst/indexTwo/2', build_url(table, 'indexTwo', {'id': 2}, '/arst'))
        self.assertEqual(
            'https://gustavus.edu/indexTwo/2',
            build_url(table, 'indexTwo', {'id': 2}, full_url=True),
        )
        self.assertEqual(
            'https://example.com/indexTwo/2',
            build_url(
                table, 'indexTwo', {'id': 2}, full_url=True,
                default_host='example.com',
            ),
        )
