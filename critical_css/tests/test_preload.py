"""Tests for deferred stylesheet loading."""

import pytest
from ..core.preload import JS_LOADER, PreloadTransformer
from ..utils.error import ConfigurationError
from ..utils.html import parse_html, serialize_html

LINK = '<link rel="stylesheet" href="/style.css">'

def transform(mode, html=LINK, **kwargs):
    document = parse_html(f'<head>{html}</head>')
    PreloadTransformer(mode, **kwargs).apply(document.find('link'), document)
    return serialize_html(document)[len('<head>'):-len('</head>')]

class TestPreloadModes:
    """Tests for each preload mode."""

    def test_media(self):
        """Test the print media swap with a noscript fallback."""
        assert transform('media') == (
            '<link rel="stylesheet" href="/style.css" media="print" onload="this.media=\'all\'">'
            '<noscript><link rel="stylesheet" href="/style.css"></noscript>'
        )

    def test_media_keeps_original_query(self):
        """Test the original media query is restored on load."""
        html = '<link rel="stylesheet" href="/style.css" media="screen and (min-width: 640px)">'
        assert transform('media', html) == (
            '<link rel="stylesheet" href="/style.css" media="print" '
            'onload="this.media=\'screen and (min-width: 640px)\'">'
            '<noscript><link rel="stylesheet" href="/style.css" media="screen and (min-width: 640px)">'
            '</noscript>'
        )

    def test_swap(self):
        """Test rel=preload swapped to stylesheet on load."""
        assert transform('swap') == (
            '<link rel="preload" href="/style.css" onload="this.rel=\'stylesheet\'" as="style">'
            '<noscript><link rel="stylesheet" href="/style.css"></noscript>'
        )

    def test_swap_low(self):
        """Test the alternate stylesheet swap."""
        assert transform('swap-low') == (
            '<link rel="alternate stylesheet" href="/style.css" title="styles" '
            'onload="this.title=\'\';this.rel=\'stylesheet\'">'
            '<noscript><link rel="stylesheet" href="/style.css"></noscript>'
        )

    def test_swap_high(self):
        """Test the alternate stylesheet swap with a preload hint."""
        assert transform('swap-high') == (
            '<link rel="alternate stylesheet preload" href="/style.css" title="styles" as="style" '
            'onload="this.title=\'\';this.rel=\'stylesheet\'">'
            '<noscript><link rel="stylesheet" href="/style.css"></noscript>'
        )

    def test_js(self):
        """Test the script loader reads its arguments from data attributes."""
        assert transform('js') == (
            '<link rel="preload" href="/style.css" as="style">'
            f'<script data-href="/style.css" data-media="all">{JS_LOADER}</script>'
        )

    def test_disabled(self):
        """Test links are left alone when preloading is off."""
        assert transform(False) == LINK

    def test_without_noscript(self):
        """Test the noscript fallback can be turned off."""
        assert '<noscript>' not in transform('swap', noscript_fallback=False)

    def test_invalid_mode(self):
        """Test unknown modes are rejected."""
        with pytest.raises(ConfigurationError):
            PreloadTransformer('eager')


class TestPreloadSafety:
    """Tests for links carrying hostile attribute values."""

    def test_unsafe_media_dropped(self):
        """Test unsafe media is neither echoed into onload nor into the fallback."""
        html = '<link rel="stylesheet" href="/style.css" media="all\' onload=\'alert(1)">'
        result = transform('media', html)
        assert 'alert' not in result
        assert result == (
            '<link rel="stylesheet" href="/style.css" media="print" onload="this.media=\'all\'">'
            '<noscript><link rel="stylesheet" href="/style.css"></noscript>'
        )

    def test_unsafe_media_js(self):
        """Test unsafe media never reaches the script data attributes."""
        html = '<link rel="stylesheet" href="/style.css" media="</script><script>alert(1)//">'
        result = transform('js', html)
        assert '<script>alert' not in result
        assert 'data-media="all"' in result

    def test_href_is_escaped(self):
        """Test a hostile href stays inside its attribute."""
        html = '<link rel="stylesheet" href="/x.css?a=&quot;&gt;&lt;/script&gt;">'
        result = transform('js', html)
        assert '</script><' not in result.replace(f'{JS_LOADER}</script>', '')

    def test_already_deferred(self):
        """Test links that already defer themselves are not rewritten."""
        html = '<link rel="stylesheet" href="/style.css" media="print" onload="this.media=\'all\'">'
        assert transform('swap', html) == html

    def test_is_deferred(self):
        """Test detection of the print media trick."""
        document = parse_html('<link rel="stylesheet" href="/a.css" media="print">')
        assert not PreloadTransformer.is_deferred(document.find('link'))
