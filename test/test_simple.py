from sprat.core import Asset
from sprat.simple import AutoReloadTransformer, ReplaceTransformer


def test_replace_in_order():
    asset = Asset('/a.txt', 'one two three')
    ReplaceTransformer([('one', 'two'), ('two', '2')])(asset)
    assert asset.text == '2 2 three'


def test_replace_mapping():
    asset = Asset('/a.txt', '{{NAME}} says {{NAME}}')
    ReplaceTransformer({'{{NAME}}': 'Sprat'})(asset)
    assert asset.text == 'Sprat says Sprat'


def test_autoreload_defaults():
    asset = Asset('/index.html', '<html><body><p>x</p></body></html>')
    AutoReloadTransformer()(asset)
    assert asset.text == (
        '<html><body><p>x</p>'
        '<script>new WebSocket("ws://"+location.host+"/ws")'
        '.onclose=()=>setTimeout(()=>location.reload(!0),1000)</script>'
        '</body></html>'
    )


def test_autoreload_custom():
    asset = Asset('/index.html', '<body></body><body></body>')
    AutoReloadTransformer('/reload', 250)(asset)
    assert asset.text.count('<script>') == 1
    assert asset.text.startswith('<body><script>')
    assert '"/reload"' in asset.text
    assert ',250)' in asset.text


def test_autoreload_skips():
    no_body = Asset('/fragment.html', '<p>x</p>')
    AutoReloadTransformer()(no_body)
    assert no_body.text == '<p>x</p>'

    not_html = Asset('/style.css', '</body>')
    AutoReloadTransformer()(not_html)
    assert not_html.text == '</body>'
