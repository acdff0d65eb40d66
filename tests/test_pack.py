import asyncio
import os
import re

import pytest

from conftest import ARROW_SVG, CHECK_SVG, INKSCAPE_SVG, make_icon
from errors import CompileError, DirectoryUnavailable
from pack import SvgSpriter, collect
from utils import SpriteConfig


def compile_icons(icons, config=None):
    return asyncio.run(SvgSpriter().compile(icons, config or SpriteConfig()))


class TestCollect:
    def test_reads_every_file(self, icon_dir):
        icons = collect(icon_dir)
        assert sorted(i.name for i in icons) == ["arrow.svg", "check.svg"]
        by_name = {i.name: i for i in icons}
        assert by_name["arrow.svg"].contents == ARROW_SVG
        assert by_name["arrow.svg"].base == icon_dir
        assert by_name["arrow.svg"].path.is_absolute()

    def test_keeps_file_system_order(self, icon_dir):
        assert [i.name for i in collect(icon_dir)] == os.listdir(icon_dir)

    def test_is_not_recursive(self, icon_dir):
        nested = icon_dir / "nested"
        nested.mkdir()
        (nested / "deep.svg").write_bytes(CHECK_SVG)
        assert sorted(i.name for i in collect(icon_dir)) == ["arrow.svg", "check.svg"]

    def test_empty_directory(self, tmp_path):
        assert collect(tmp_path) == []

    def test_missing_directory(self, tmp_path):
        with pytest.raises(DirectoryUnavailable) as exc:
            collect(tmp_path / "missing")
        assert exc.value.path == tmp_path / "missing"

    def test_file_instead_of_directory(self, tmp_path):
        f = tmp_path / "icons.svg"
        f.write_bytes(ARROW_SVG)
        with pytest.raises(DirectoryUnavailable):
            collect(f)


class TestSvgSpriter:
    def test_one_symbol_per_icon(self, tmp_path):
        icons = [
            make_icon("arrow.svg", ARROW_SVG, tmp_path),
            make_icon("check.svg", CHECK_SVG, tmp_path),
        ]
        markup = compile_icons(icons)
        assert markup.count('id="icon-arrow"') == 1
        assert markup.count('id="icon-check"') == 1
        assert len(re.findall(r'<symbol id="icon-[^"]+"', markup)) == 2

    def test_ids_independent_of_order(self, tmp_path):
        arrow = make_icon("arrow.svg", ARROW_SVG, tmp_path)
        check = make_icon("check.svg", CHECK_SVG, tmp_path)
        for icons in ([arrow, check], [check, arrow]):
            markup = compile_icons(icons)
            assert markup.count('id="icon-arrow"') == 1
            assert markup.count('id="icon-check"') == 1

    def test_deterministic(self, tmp_path):
        icons = [
            make_icon("arrow.svg", ARROW_SVG, tmp_path),
            make_icon("inkscape.svg", INKSCAPE_SVG, tmp_path),
        ]
        assert compile_icons(icons) == compile_icons(icons)

    def test_many_icons(self, tmp_path):
        icons = [make_icon(f"i{n}.svg", CHECK_SVG, tmp_path) for n in range(25)]
        markup = compile_icons(icons)
        assert len(re.findall(r'id="icon-i\d+"', markup)) == 25

    def test_empty_sprite(self):
        markup = compile_icons([])
        assert markup.startswith("<svg")
        assert "<symbol" not in markup

    def test_symbol_markup(self, tmp_path):
        markup = compile_icons([make_icon("check.svg", CHECK_SVG, tmp_path)])
        assert markup.startswith("<svg ")
        assert 'xmlns="http://www.w3.org/2000/svg"' in markup.split(">")[0]
        assert 'width="0" height="0" style="position:absolute"' in markup
        assert '<symbol id="icon-check" viewBox="0 0 16 16">' in markup
        assert '<path d="M2 8l4 4 8-8"/>' in markup
        assert "<?xml" not in markup

    def test_cleanup_transform(self, tmp_path):
        markup = compile_icons([make_icon("ink.svg", INKSCAPE_SVG, tmp_path)])
        assert "inkscape" not in markup
        assert "sodipodi" not in markup
        assert "metadata" not in markup
        assert "translate" not in markup
        assert '<symbol id="icon-ink" viewBox="2 3 10 10">' in markup
        assert 'style="fill:#000"' in markup

    def test_without_transforms(self, tmp_path):
        config = SpriteConfig(transforms=())
        markup = compile_icons([make_icon("ink.svg", INKSCAPE_SVG, tmp_path)], config)
        assert "translate(-2, -3)" in markup

    def test_comments_stripped(self, tmp_path):
        svg = b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 1 1"><!-- x --><path d="M0 0"/></svg>'
        markup = compile_icons([make_icon("c.svg", svg, tmp_path)])
        assert "<!--" not in markup

    def test_icon_without_namespace(self, tmp_path):
        svg = b'<svg viewBox="0 0 4 4"><circle r="2"/></svg>'
        markup = compile_icons([make_icon("dot.svg", svg, tmp_path)])
        assert '<symbol id="icon-dot" viewBox="0 0 4 4"><circle r="2"/></symbol>' in markup

    def test_xlink_href_survives_cleanup(self, tmp_path):
        svg = (
            b'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink"'
            b' viewBox="0 0 1 1"><path id="p" d="M0 0"/><use xlink:href="#p"/></svg>'
        )
        markup = compile_icons([make_icon("use.svg", svg, tmp_path)])
        assert 'xlink:href="#p"' in markup

    def test_custom_id_pattern(self, tmp_path):
        config = SpriteConfig(id_generator="sprite-%s-glyph")
        markup = compile_icons([make_icon("check.svg", CHECK_SVG, tmp_path)], config)
        assert 'id="sprite-check-glyph"' in markup

    def test_whitespace_in_name(self, tmp_path):
        markup = compile_icons([make_icon("left arrow.svg", ARROW_SVG, tmp_path)])
        assert 'id="icon-left_arrow"' in markup

    def test_not_inline_adds_declaration(self, tmp_path):
        config = SpriteConfig(inline=False)
        markup = compile_icons([make_icon("check.svg", CHECK_SVG, tmp_path)], config)
        assert markup.startswith("<?xml")

    def test_symbol_mode_required(self, tmp_path):
        with pytest.raises(CompileError):
            compile_icons([], SpriteConfig(symbol=False))

    def test_invalid_svg(self, tmp_path):
        with pytest.raises(CompileError) as exc:
            compile_icons([make_icon("broken.svg", b"<svg><path></svg>", tmp_path)])
        assert "broken.svg" in str(exc.value)

    def test_not_an_svg(self, tmp_path):
        with pytest.raises(CompileError, match="not <svg>"):
            compile_icons([make_icon("page.svg", b"<html/>", tmp_path)])

    @pytest.mark.parametrize("name", ["a\x01.svg", "bad\udcff.svg"])
    def test_name_not_usable_as_id(self, tmp_path, name):
        with pytest.raises(CompileError):
            compile_icons([make_icon(name, CHECK_SVG, tmp_path)])

    def test_duplicate_ids(self, tmp_path):
        icons = [
            make_icon("check.svg", CHECK_SVG, tmp_path),
            make_icon("check.xml", CHECK_SVG, tmp_path),
        ]
        with pytest.raises(CompileError, match="Duplicate symbol id"):
            compile_icons(icons)
