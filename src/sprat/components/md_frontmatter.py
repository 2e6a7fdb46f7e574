import json
import sys
import typing as t


FrontMatterParser = t.Callable[[str], t.Any]
FrontMatterParserName = t.Literal['yaml', 'toml', 'json']


def get_yaml_frontmatter_parser() -> FrontMatterParser:
    from ruamel.yaml import YAML
    from ruamel.yaml.error import YAMLError
    loader = YAML(typ='safe')

    def parse(content: str):
        try:
            return loader.load(content)
        except YAMLError as e:
            raise ValueError(str(e)) from e

    return parse


def get_toml_frontmatter_parser() -> FrontMatterParser:
    if sys.version_info < (3, 11):
        import tomli as tomllib
    else:
        import tomllib
    return tomllib.loads


def get_json_frontmatter_parser() -> FrontMatterParser:
    return json.loads


FRONTMATTER_PARSER_FACTORIES: dict[FrontMatterParserName, t.Callable[[], FrontMatterParser]] = {
    'yaml': get_yaml_frontmatter_parser,
    'toml': get_toml_frontmatter_parser,
    'json': get_json_frontmatter_parser,
}

# Opening/closing line for each supported format.
FRONTMATTER_DELIMITERS: dict[str, FrontMatterParserName] = {
    '---': 'yaml',
    '+++': 'toml',
    ';;;': 'json',
}


def get_frontmatter_parser(parser: FrontMatterParserName | FrontMatterParser) -> FrontMatterParser:
    if callable(parser):
        return parser
    return FRONTMATTER_PARSER_FACTORIES[parser]()


def split_frontmatter(content: str) -> tuple[FrontMatterParserName, str, str] | None:
    """
    Split @content into its frontmatter format, raw frontmatter, and the
    remaining body. Returns None if @content does not open with a known
    delimiter. Raises ValueError if the frontmatter block is never closed.
    """
    first, sep, rest = content.partition('\n')
    delimiter = first.rstrip('\r').strip()
    if delimiter not in FRONTMATTER_DELIMITERS:
        return None
    if not sep:
        raise ValueError(f'unclosed {delimiter} frontmatter block')

    lines = rest.split('\n')
    for idx, line in enumerate(lines):
        if line.rstrip('\r').strip() == delimiter:
            return (
                FRONTMATTER_DELIMITERS[delimiter],
                '\n'.join(lines[:idx]),
                '\n'.join(lines[idx + 1:]),
            )

    raise ValueError(f'unclosed {delimiter} frontmatter block')
