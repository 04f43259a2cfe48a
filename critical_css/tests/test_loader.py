"""Tests for stylesheet loading."""

import asyncio
import logging
import pytest
from .conftest import FakeResolver
from ..core.loader import StylesheetLoader, StylesheetReference
from ..utils.concurrency import gather_ordered
from ..utils.config import Options

@pytest.fixture
def loader_factory(root):
    """Create a loader over a FakeResolver."""
    def factory(assets=None, delays=None, responses=None, **options):
        resolver = FakeResolver(root, assets, delays, responses)
        return StylesheetLoader(Options(path=root, **options), resolver), resolver
    return factory

def external(index, href):
    return StylesheetReference('external', index, href=href)

class TestStylesheetLoader:
    """Tests for StylesheetLoader."""

    def test_order_independent_of_latency(self, loader_factory, run):
        """Test slow stylesheets do not delay others or reorder results."""
        loader, resolver = loader_factory(
            assets={'red.css': '.red{}', 'blue.css': '.blue{}', 'green.css': '.green{}'},
            delays={'red.css': 0.05, 'blue.css': 0.01, 'green.css': 0.03},
        )
        refs = [external(0, '/red.css'), external(1, '/blue.css'), external(2, '/green.css')]
        result = run(loader.load_all(refs))
        assert [ref.text for ref in result] == ['.red{}', '.blue{}', '.green{}']
        assert resolver.requested == ['red.css', 'blue.css', 'green.css']
        assert resolver.completed == ['blue.css', 'green.css', 'red.css']

    def test_empty(self, loader_factory, run):
        """Test loading nothing."""
        loader, _ = loader_factory()
        assert run(loader.load_all([])) == []

    def test_local(self, loader_factory, run, root):
        """Test local hrefs are read below the root."""
        loader, _ = loader_factory(assets={'css/site.css': 'a{}'})
        ref = run(loader.load(external(0, '/css/site.css')))
        assert ref.resolved
        assert ref.text == 'a{}'
        assert ref.asset_name == 'css/site.css'
        assert ref.source_path.endswith('site.css')
        assert ref.can_prune

    def test_query_string_ignored(self, loader_factory, run):
        """Test query strings and fragments do not affect the file read."""
        loader, resolver = loader_factory(assets={'a.css': 'a{}'})
        ref = run(loader.load(external(0, '/a.css?v=123#top')))
        assert ref.text == 'a{}'
        assert resolver.requested == ['a.css']

    def test_public_path(self, loader_factory, run):
        """Test the public path prefix is removed."""
        loader, _ = loader_factory(assets={'app.css': 'a{}'}, public_path='/static/')
        assert run(loader.load(external(0, '/static/app.css'))).text == 'a{}'

    def test_path_escape(self, loader_factory, run, caplog):
        """Test hrefs leaving the root are refused without reading."""
        loader, resolver = loader_factory(assets={'../secret.css': 'a{}'})
        with caplog.at_level(logging.WARNING):
            ref = run(loader.load(external(0, '/../secret.css')))
        assert not ref.resolved
        assert ref.text is None
        assert resolver.requested == []
        assert 'outside of base path' in caplog.text

    def test_missing(self, loader_factory, run, caplog):
        """Test missing stylesheets are reported and left unresolved."""
        loader, _ = loader_factory()
        with caplog.at_level(logging.WARNING):
            ref = run(loader.load(external(0, '/missing.css')))
        assert not ref.resolved
        assert 'Unable to locate stylesheet /missing.css' in caplog.text

    def test_data_url(self, loader_factory, run):
        """Test data URLs are skipped."""
        loader, resolver = loader_factory()
        ref = run(loader.load(external(0, 'data:text/css,a{}')))
        assert not ref.resolved
        assert resolver.requested == [] and resolver.fetched == []

    def test_inline_untouched(self, loader_factory, run):
        """Test inline references need no loading."""
        loader, resolver = loader_factory()
        ref = StylesheetReference('inline', 0, text='a{}')
        assert run(loader.load(ref)) is ref
        assert resolver.requested == []
        assert not ref.can_prune

    def test_additional(self, loader_factory, run):
        """Test additional stylesheets are read by asset name."""
        loader, _ = loader_factory(assets={'extra.css': 'b{}'})
        ref = run(loader.load(StylesheetReference('additional', 0, asset_name='extra.css')))
        assert ref.text == 'b{}'
        assert ref.can_prune

    def test_unexpected_error(self, loader_factory, run, caplog, monkeypatch):
        """Test any resolver error leaves only that reference unresolved."""
        loader, resolver = loader_factory(assets={'a.css': 'a{}', 'b.css': 'b{}'})
        read = resolver.read

        async def flaky_read(path):
            if path.endswith('a.css'):
                raise RuntimeError('resolver exploded')
            return await read(path)

        monkeypatch.setattr(resolver, 'read', flaky_read)
        with caplog.at_level(logging.WARNING):
            refs = run(loader.load_all([external(0, '/a.css'), external(1, '/b.css')]))
        assert not refs[0].resolved
        assert refs[1].text == 'b{}'
        assert 'Unexpected error loading stylesheet /a.css' in caplog.text


class TestRemoteStylesheets:
    """Tests for remote stylesheet handling."""

    URL = 'https://cdn.example.com/a.css'

    def test_disabled_by_default(self, loader_factory, run):
        """Test remote stylesheets are ignored unless enabled."""
        loader, resolver = loader_factory(responses={self.URL: 'a{}'})
        ref = run(loader.load(external(0, self.URL)))
        assert not ref.resolved
        assert resolver.fetched == []

    def test_enabled(self, loader_factory, run):
        """Test remote stylesheets are fetched when enabled."""
        loader, resolver = loader_factory(responses={self.URL: 'a{}'}, remote=True)
        ref = run(loader.load(external(0, self.URL)))
        assert ref.resolved and ref.remote
        assert ref.text == 'a{}'
        assert resolver.fetched == [self.URL]

    def test_protocol_relative(self, loader_factory, run):
        """Test protocol-relative URLs are fetched over https."""
        loader, resolver = loader_factory(responses={self.URL: 'a{}'}, remote=True)
        ref = run(loader.load(external(0, '//cdn.example.com/a.css')))
        assert ref.text == 'a{}'
        assert resolver.fetched == [self.URL]

    def test_not_found(self, loader_factory, run, caplog):
        """Test failed requests are reported and left unresolved."""
        loader, _ = loader_factory(remote=True)
        with caplog.at_level(logging.WARNING):
            ref = run(loader.load(external(0, self.URL)))
        assert not ref.resolved
        assert 'HTTP 404' in caplog.text


class TestGatherOrdered:
    """Tests for gather_ordered."""

    def test_failure_cancels_remaining(self, run):
        """Test a failing call cancels the calls still running."""
        cancelled = []

        async def work(item):
            if item == 'bad':
                raise RuntimeError('failed')
            try:
                await asyncio.sleep(1)
            except asyncio.CancelledError:
                cancelled.append(item)
                raise
            return item

        async def main():
            with pytest.raises(RuntimeError):
                await gather_ordered(work, ['slow', 'bad'])
            return list(cancelled)

        assert run(main()) == ['slow']
