"""Tests for markup injection through stylesheets and attributes."""

from bs4 import BeautifulSoup

EVIL_CSS = "* { background: url('</style><script>alert(1)</script>') }"

def has_evil_script(html):
    """Check if a browser-like parse of html finds an injected script."""
    soup = BeautifulSoup(html, 'html.parser')
    return any(script.get_text().strip() == 'alert(1)' for script in soup.find_all('script'))


class TestInjection:
    """Tests for content escaping the elements it is written into."""

    def test_entities_not_decoded(self, make_inliner, run):
        """Test escaped markup is not turned into elements."""
        html = run(make_inliner().process(
            '<html><body>&lt;script&gt;alert(1)&lt;/script&gt;</body></html>'
        ))
        assert not has_evil_script(html)
        assert '&lt;script&gt;alert(1)&lt;/script&gt;' in html

    def test_linked_stylesheet(self, make_inliner, run):
        """Test a linked stylesheet cannot close its style element."""
        inliner = make_inliner(assets={'file.css': EVIL_CSS})
        html = run(inliner.process('<html><head><link rel=stylesheet href=/file.css></head><body></body></html>'))
        assert not has_evil_script(html)
        assert '</style><script>' not in html

    def test_linked_stylesheet_inlined_whole(self, make_inliner, run):
        """Test whole-sheet inlining goes through the same checks."""
        inliner = make_inliner(assets={'file.css': EVIL_CSS}, inline_threshold=10000)
        html = run(inliner.process('<html><head><link rel=stylesheet href=/file.css></head><body></body></html>'))
        assert not has_evil_script(html)

    def test_additional_stylesheet(self, make_inliner, run):
        """Test an additional stylesheet cannot close its style element."""
        inliner = make_inliner(assets={'style.css': EVIL_CSS}, additional_stylesheets=['/style.css'])
        html = run(inliner.process('<html><head></head><body></body></html>'))
        assert not has_evil_script(html)

    def test_inline_style_comment(self, make_inliner, run):
        """Test comments kept by uncompressed output are checked as well."""
        inliner = make_inliner(assets={'file.css': '/* </STYLE><script>alert(1)</script> */ h1 { color: red }'},
                               compress=False)
        html = run(inliner.process(
            '<html><head><link rel="stylesheet" href="/file.css"></head><body><h1>Hi</h1></body></html>'
        ))
        assert not has_evil_script(html)
        assert 'color: red;' in html

    def test_href_closing_script(self, make_inliner, run):
        """Test an href cannot close the loader script in js mode."""
        href = '/abc/</script><script>alert(1)</script>/style.css'
        inliner = make_inliner(assets={href.lstrip('/'): '* { background: red }'}, preload='js')
        html = run(inliner.process(
            f'<html><head><link rel=stylesheet href="{href}"></head><body></body></html>'
        ))
        assert not has_evil_script(html)
        assert '<style>*{background:red}</style>' in html

    def test_media_attribute(self, make_inliner, run):
        """Test media text is only echoed when it is a plain media query."""
        inliner = make_inliner(assets={'a.css': 'h1 { color: red }', 'b.css': 'h1 { margin: 0 }'})
        html = run(inliner.process(
            '<html><head>'
            '<link rel="stylesheet" href="a.css" media="screen and (min-width: 480px)">'
            '<link rel="stylesheet" href="b.css" media="all\' onload=\'alert(1)">'
            '</head><body><h1>Hi</h1></body></html>'
        ))
        assert (
            '<noscript><link rel="stylesheet" href="a.css" media="screen and (min-width: 480px)"></noscript>'
        ) in html
        assert 'alert(1)' not in html
        assert '<noscript><link rel="stylesheet" href="b.css"></noscript>' in html
