import datetime

import pytest

from sprat.components.md_frontmatter import split_frontmatter
from sprat.core import Asset
from sprat.frontmatter import FrontmatterError, FrontmatterTransformer


@pytest.fixture
def transformer():
    return FrontmatterTransformer()


def test_yaml(transformer: FrontmatterTransformer):
    asset = Asset('/post.md', '---\nTitle: Hello\nDate: 2024-01-02\nTags: [a, b]\n---\n# Body\n', {'Title': 'Old'})
    transformer(asset)

    assert asset.meta == {'Title': 'Hello', 'Date': datetime.date(2024, 1, 2), 'Tags': ['a', 'b']}
    assert asset.text == '# Body\n'


def test_toml(transformer: FrontmatterTransformer):
    asset = Asset('/post.md', '+++\ntitle = "Hello"\nweight = 3\n+++\nBody')
    transformer(asset)

    assert asset.meta == {'title': 'Hello', 'weight': 3}
    assert asset.text == 'Body'


def test_json(transformer: FrontmatterTransformer):
    asset = Asset('/post.md', ';;;\n{"title": "Hello", "draft": true}\n;;;\nBody')
    transformer(asset)

    assert asset.meta == {'title': 'Hello', 'draft': True}
    assert asset.text == 'Body'


def test_no_frontmatter_initializes_meta(transformer: FrontmatterTransformer):
    asset = Asset('/plain.md', '# Just text\n---\n')
    transformer(asset)

    assert asset.meta == {}
    assert asset.text == '# Just text\n---\n'


def test_empty_frontmatter(transformer: FrontmatterTransformer):
    asset = Asset('/empty.md', '---\n---\nBody', {'Keep': 1})
    transformer(asset)

    assert asset.meta == {'Keep': 1}
    assert asset.text == 'Body'


@pytest.mark.parametrize('content', [
    '---\nTitle: [unclosed\n---\nBody',
    '---\nTitle: Hello\nBody without a closing line',
    '+++\ntitle = \n+++\n',
    ';;;\n{"title": }\n;;;\n',
    '---\n- just\n- a list\n---\n',
])
def test_malformed(transformer: FrontmatterTransformer, content: str):
    asset = Asset('/bad.md', content)
    with pytest.raises(FrontmatterError) as exc_info:
        transformer(asset)
    assert exc_info.value.path == '/bad.md'


def test_binary_payload_untouched(transformer: FrontmatterTransformer):
    data = b'\x89PNG\r\n\x1a\n\x00\x00\xff\xfe'
    asset = Asset('/image.png', data)
    transformer(asset)

    assert asset.data == data
    assert asset.meta == {}


def test_undecodable_frontmatter(transformer: FrontmatterTransformer):
    with pytest.raises(FrontmatterError) as exc_info:
        transformer(Asset('/bad.md', b'---\nTitle: \xff\n---\nBody'))
    assert exc_info.value.path == '/bad.md'


def test_custom_parser():
    transformer = FrontmatterTransformer({'json': lambda raw: {'raw': raw}})
    asset = Asset('/post.md', ';;;\nanything\n;;;\nBody')
    transformer(asset)
    assert asset.meta == {'raw': 'anything'}


def test_split_frontmatter_crlf():
    assert split_frontmatter('---\r\nA: 1\r\n---\r\nBody') == ('yaml', 'A: 1\r', 'Body')
    assert split_frontmatter('No frontmatter') is None
