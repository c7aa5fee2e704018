from pathlib import Path

from readeasy import sanitize_html
from readeasy.sanitizer import is_absolute_url, rewrite_srcset

FIXTURES = Path(__file__).parent / 'fixtures'


def test_script_removed_text_kept():
    out = sanitize_html('<p>Hi<script>alert(1)</script> there</p>')
    assert '<script' not in out
    assert 'Hi' in out and 'there' in out


def test_event_handlers_removed_element_kept():
    out = sanitize_html('<img src="https://a.test/x.png" onerror="x()" onClick="y()"><p onmouseover="z()">t</p>')
    assert 'onerror' not in out and 'onclick' not in out.lower() and 'onmouseover' not in out
    assert '<img' in out and '<p>t</p>' in out


def test_blocked_elements_removed():
    html = (
        '<p>keep</p><iframe src="https://x.test"></iframe><object data="a"></object>'
        '<embed src="b"><form><input name="q"><button>Go</button></form>'
    )
    out = sanitize_html(html)
    for tag in ('iframe', 'object', 'embed', 'form', 'input', 'button'):
        assert f'<{tag}' not in out
    assert '<p>keep</p>' in out


def test_style_and_javascript_urls_removed():
    out = sanitize_html('<a href=" JavaScript:alert(1)" style="color:red">x</a><img src="javascript:void(0)">')
    assert 'javascript' not in out.lower()
    assert 'style=' not in out
    assert '<a>x</a>' in out


def test_relative_href_resolved():
    out = sanitize_html('<a href="images/a.png">a</a>', 'https://example.com/articles/x')
    assert 'href="https://example.com/articles/images/a.png"' in out


def test_absolute_and_protocol_relative_unchanged():
    html = '<img src="https://cdn.example.com/a.png"><img src="//cdn.example.com/b.png"><a href="mailto:a@b.c">m</a>'
    out = sanitize_html(html, 'https://example.com/articles/x')
    assert 'src="https://cdn.example.com/a.png"' in out
    assert 'src="//cdn.example.com/b.png"' in out
    assert 'href="mailto:a@b.c"' in out


def test_relative_kept_without_source_url():
    out = sanitize_html('<a href="../about.html">a</a>')
    assert 'href="../about.html"' in out


def test_srcset_resolved():
    out = sanitize_html('<img srcset="a.png 1x, b.png 2x">', 'https://example.com/dir/')
    assert 'srcset="https://example.com/dir/a.png 1x, https://example.com/dir/b.png 2x"' in out


def test_srcset_entry_without_descriptor_and_absolute_entry():
    got = rewrite_srcset('small.png, https://cdn.test/big.png 800w', 'https://example.com/p/')
    assert got == 'https://example.com/p/small.png, https://cdn.test/big.png 800w'


def test_unresolvable_base_leaves_href_and_drops_srcset():
    out = sanitize_html('<a href="x.html">x</a><img srcset="a.png 1x">', 'not a url')
    assert 'href="x.html"' in out
    assert 'srcset' not in out


def test_is_absolute_url():
    assert is_absolute_url('https://a.test/')
    assert is_absolute_url('data:image/png;base64,AAA')
    assert is_absolute_url('//cdn.test/a')
    assert not is_absolute_url('images/a.png')
    assert not is_absolute_url('/root.png')


def test_malformed_html_does_not_raise():
    out = sanitize_html('<div><p>unclosed <b>bold</i></div></span><<>')
    assert 'bold' in out


def test_empty_input():
    assert sanitize_html('') == ''


def test_sanitize_is_idempotent():
    html = (FIXTURES / 'article.html').read_text(encoding='utf-8')
    once = sanitize_html(html, 'https://example.com/articles/rivers')
    twice = sanitize_html(once, 'https://example.com/articles/rivers')
    assert once == twice


def test_fixture_article():
    html = (FIXTURES / 'article.html').read_text(encoding='utf-8')
    out = sanitize_html(html, 'https://example.com/articles/rivers')
    assert '<script' not in out and '<iframe' not in out and '<form' not in out
    assert 'href="https://example.com/about.html"' in out
    assert 'src="https://example.com/articles/images/river.jpg"' in out
    assert 'https://example.com/articles/images/river@2x.jpg 2x' in out
    assert 'Rivers of the North' in out


def test_minimal_profile_only_strips_scripts_and_handlers():
    out = sanitize_html('<p onclick="x()" style="color:red">a</p><script>b()</script><iframe src="f"></iframe>', profile='minimal')
    assert '<script' not in out and 'onclick' not in out
    assert 'style=' in out and '<iframe' in out
