import posixpath
from pathlib import Path

from sprat import (
    Build,
    EncryptionTransformer,
    FrontmatterTransformer,
    InputBuildSettings,
    MarkdownTransformer,
    TemplateTransformer,
    WrapperTemplate,
    with_extensions,
    with_meta,
    with_parent_dir,
    with_path,
)


class BasicSiteBuild(Build):
    def process(self):
        # Layouts and components are inputs to templating, not pages.
        layout = self.assets.pop(with_path('/_layout.html'))[0]
        password_page = self.assets.pop(with_path('/_password.html'))[0]
        components = {
            posixpath.splitext(posixpath.basename(c.path))[0]: c
            for c in self.assets.pop(with_parent_dir('/_components'))
        }

        super().process()

        self.assets.filter(with_extensions('.html')).transform(
            TemplateTransformer(
                components=components,
                global_data={'SiteName': 'Sprat Example'},
                wrapper=WrapperTemplate(layout, 'content'),
            )
        )

        drafts = self.assets.filter(with_meta('IsDraft'))
        drafts.add_to_meta('SitemapExclude', True)
        drafts.transform(EncryptionTransformer(password_page, 'sprat', iterations=1000))


# Optional, and can be overridden with CLI arguments.
SETTINGS = InputBuildSettings(
    input_dir=Path(__file__).parent / 'basic_site',
    output_dir=Path('output/basic_site'),
    base_url='https://example.com',
    robots=['Allow: /', 'Sitemap: https://example.com/sitemap.xml'],
)
TRANSFORMERS = [
    FrontmatterTransformer(),
    MarkdownTransformer(),
]
BUILD_CLASS = BasicSiteBuild
