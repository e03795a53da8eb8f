"""Tests for loading templates and partials from files."""

import pytest

from mustache import (
    DictLoader,
    FileSystemLoader,
    MalformedTemplate,
    TemplateNotFound,
    parse_file,
    parse_text,
    render_template,
)
from mustache.nodes import PartialNode


@pytest.fixture
def tpl_dir(tmp_path):
    (tmp_path / "page.html").write_text("{{>header}}body {{name}}\n{{>footer}}", encoding="utf-8")
    (tmp_path / "header.mustache").write_text("Hi {{name}}\n", encoding="utf-8")
    (tmp_path / "footer.mustache").write_text("{{>sign}}-{{>sign}}", encoding="utf-8")
    (tmp_path / "sign.mustache").write_text("(c)", encoding="utf-8")
    return tmp_path


class TestParseFile:
    def test_partials_loaded_next_to_template(self, tpl_dir) -> None:
        template = parse_file(tpl_dir / "page.html")
        assert sorted(template.partials) == ["footer", "header", "sign"]
        assert render_template(template, {"name": "Ann"}) == "Hi Ann\nbody Ann\n(c)-(c)"

    def test_mustache_file_is_its_own_partial(self, tpl_dir) -> None:
        template = parse_file(str(tpl_dir / "header.mustache"))
        assert template.tokens == [PartialNode("header")]
        assert list(template.partials) == ["header"]
        assert render_template(template, {"name": "Bo"}) == "Hi Bo\n"

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(TemplateNotFound) as exc_info:
            parse_file(tmp_path / "nope.html")
        assert exc_info.value.path.endswith("nope.html")

    def test_missing_partial(self, tmp_path) -> None:
        (tmp_path / "page.html").write_text("a{{>gone}}b", encoding="utf-8")
        with pytest.raises(TemplateNotFound) as exc_info:
            parse_file(tmp_path / "page.html")
        assert exc_info.value.path.endswith("gone.mustache")

    def test_missing_mustache_file(self, tmp_path) -> None:
        with pytest.raises(TemplateNotFound):
            parse_file(tmp_path / "absent.mustache")


class TestParseText:
    def test_partials_from_dirname(self) -> None:
        loader = DictLoader({"tpl/p.mustache": "P{{>q}}", "tpl/q.mustache": "Q"})
        template = parse_text("[{{>p}}]", loader=loader, dirname="tpl")
        assert render_template(template, {}) == "[PQ]"

    def test_each_partial_loaded_once(self) -> None:
        calls = []

        class CountingLoader(DictLoader):
            def load(self, path):
                calls.append(str(path))
                return super().load(path)

        loader = CountingLoader({"p.mustache": "p{{>q}}", "q.mustache": "q{{>p}}"})
        template = parse_text("{{>p}}{{>q}}{{>p}}", loader=loader)
        assert sorted(template.partials) == ["p", "q"]
        assert sorted(calls) == ["p.mustache", "q.mustache"]

    def test_standalone_partial_is_not_reindented(self) -> None:
        loader = DictLoader({"p.mustache": "P\n"})
        template = parse_text("  {{>p}}\nend", loader=loader)
        assert render_template(template, {}) == "P\nend"

    def test_no_partials_needs_no_files(self) -> None:
        template = parse_text("{{a}}", loader=DictLoader({}))
        assert template.partials == {}


class TestFileSystemLoader:
    def test_reads_text(self, tmp_path) -> None:
        path = tmp_path / "t.mustache"
        path.write_text("héllo", encoding="utf-8")
        assert FileSystemLoader().load(path) == "héllo"

    def test_not_found(self, tmp_path) -> None:
        with pytest.raises(TemplateNotFound):
            FileSystemLoader().load(tmp_path / "missing.mustache")

    def test_undecodable_partial(self, tmp_path) -> None:
        (tmp_path / "page.html").write_text("{{>bad}}", encoding="utf-8")
        (tmp_path / "bad.mustache").write_bytes(b"\xff\xfe{{x}}")
        with pytest.raises(MalformedTemplate) as exc_info:
            parse_file(tmp_path / "page.html")
        assert exc_info.value.reason == "undecodable_template"
        assert exc_info.value.tag.endswith("bad.mustache")
