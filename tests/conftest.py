from pathlib import Path

import pytest

from blogbuild.config import Site

HOMEPAGE = """<!DOCTYPE html>
<html lang="ja">
<body>
    <main>
        <div class="container">
            <!-- 最新記事セクション -->
            <section>
                <h2 class="section-title">old latest block</h2>
            </section>

            <!-- カテゴリーセクション -->
            <section class="categories">keep me</section>
        </div>
    </main>
</body>
</html>
"""


def write_article(content_dir: Path, name: str, body: str = "# Hello", **meta: str) -> Path:
    content_dir.mkdir(parents=True, exist_ok=True)
    header = "\n".join(f'{key}: "{value}"' for key, value in meta.items())
    path = content_dir / name
    path.write_text(f"---\n{header}\n---\n{body}\n", encoding="utf-8")
    return path


@pytest.fixture
def site(tmp_path: Path) -> Site:
    return Site(root=tmp_path, site_url="https://blog.example.com/")


@pytest.fixture
def homepage(site: Site) -> Path:
    site.homepage.write_text(HOMEPAGE, encoding="utf-8")
    return site.homepage
