import pytest

from sprat.core import Asset
from sprat.jinja import TemplateError, TemplateTransformer, WrapperTemplate


def test_renders_meta_and_globals():
    asset = Asset('/index.html', '<h1>{{ Title }}</h1><p>{{ Asset.Title }} on {{ Global.Site }}</p>', {'Title': 'Home'})
    TemplateTransformer(global_data={'Site': 'Example'})(asset)
    assert asset.text == '<h1>Home</h1><p>Home on Example</p>'


def test_unset_meta_renders():
    asset = Asset('/index.html', 'Hello {{ Global.Name }}')
    TemplateTransformer(global_data={'Name': 'World'})(asset)
    assert asset.text == 'Hello World'
    assert asset.meta is None


def test_components_by_extension():
    components = {
        'header': Asset('/_components/header.html', '<header>{{ Title }}</header>'),
        'styles': Asset('/_components/styles.css', 'body {}'),
    }
    transformer = TemplateTransformer(components=components)

    page = Asset('/page.html', '{% include "header" %}<main></main>', {'Title': 'Page'})
    transformer(page)
    assert page.text == '<header>Page</header><main></main>'

    other = Asset('/page.txt', '{% include "header" %}')
    with pytest.raises(TemplateError):
        transformer(other)


def test_wrapper():
    layout = Asset(
        '/_layout.html',
        '<html><title>{{ Title }} - {{ Layout }}</title><body>{% include "content" %}</body></html>',
        {'Layout': 'Default', 'Title': 'Fallback'},
    )
    page = Asset('/page.html', '<p>{{ Title }} via {{ WrapperTemplate.Layout }}</p>', {'Title': 'Page'})

    TemplateTransformer(wrapper=WrapperTemplate(layout))(page)
    assert page.text == '<html><title>Page - Default</title><body><p>Page via Default</p></body></html>'


def test_wrapper_meta_inherited():
    layout = Asset('/_layout.html', '{% include "content" %}', {'Layout': 'Default', 'Title': 'Fallback'})
    page = Asset('/page.html', 'x', {'Title': 'Page'})
    unset = Asset('/unset.html', 'y')

    transformer = TemplateTransformer(wrapper=WrapperTemplate(layout))
    transformer(page)
    transformer(unset)

    assert page.meta == {'Layout': 'Default', 'Title': 'Page'}
    assert unset.meta is None
    assert layout.meta == {'Layout': 'Default', 'Title': 'Fallback'}


def test_wrapper_custom_block_name():
    layout = Asset('/_layout.html', '[{% include "body" %}]')
    page = Asset('/page.html', 'inner')
    TemplateTransformer(wrapper=WrapperTemplate(layout, 'body'))(page)
    assert page.text == '[inner]'


def test_missing_wrapper_template():
    page = Asset('/page.html', 'inner')
    with pytest.raises(TemplateError, match='wrapper template is required'):
        TemplateTransformer(wrapper=WrapperTemplate(None))(page)


def test_reserved_global_key():
    page = Asset('/page.html', '{{ Global }}', {'Global': 'mine'})
    with pytest.raises(TemplateError, match='reserved key'):
        TemplateTransformer()(page)


def test_malformed_component_fails_even_if_unused():
    components = {'broken': Asset('/_components/broken.html', '{% if %}')}
    page = Asset('/page.html', 'no includes here')
    with pytest.raises(TemplateError) as exc_info:
        TemplateTransformer(components=components)(page)
    assert exc_info.value.path == '/page.html'


def test_malformed_template():
    with pytest.raises(TemplateError):
        TemplateTransformer()(Asset('/page.html', '{% for %}'))


def test_autoescape():
    page = Asset('/page.html', '{{ Body }}', {'Body': '<b>'})
    TemplateTransformer(autoescape=True)(page)
    assert page.text == '&lt;b&gt;'


def test_custom_environment_filters():
    import jinja2
    env = jinja2.Environment()
    env.filters['shout'] = lambda value: value.upper() + '!'
    page = Asset('/page.html', '{{ Title | shout }}', {'Title': 'hi'})
    TemplateTransformer(env=env)(page)
    assert page.text == 'HI!'


def test_undecodable_asset():
    with pytest.raises(TemplateError) as exc_info:
        TemplateTransformer()(Asset('/logo.png', b'\xff\xfe'))
    assert exc_info.value.path == '/logo.png'


def test_undecodable_wrapper():
    layout = Asset('/_layout.html', b'\xff{% include "content" %}')
    with pytest.raises(TemplateError, match='UTF-8') as exc_info:
        TemplateTransformer(wrapper=WrapperTemplate(layout))(Asset('/page.html', 'x'))
    assert exc_info.value.path == '/page.html'
