from __future__ import annotations

import unittest

from expohtml.assets import AssetCollector, AssetDeclaration, parse_index, target_extension
from expohtml.constants import LAST_INDEX


class TestHelpers(unittest.TestCase):
    def test_target_extension(self) -> None:
        assert target_extension("css/app.css") == "css"
        assert target_extension("APP.JS") == "js"
        assert target_extension("app.js?v=3") == "js"
        assert target_extension("app.css#top") == "css"
        assert target_extension("v1.2/bundle") == ""
        assert target_extension("noext") == ""

    def test_parse_index(self) -> None:
        assert parse_index(None) == LAST_INDEX
        assert parse_index("3") == 3
        assert parse_index(" 12 ") == 12
        assert parse_index("-1") == -1
        assert parse_index("2nd") == 2
        assert parse_index("first") == 0
        assert parse_index(True) == 1


class TestAssetDeclaration(unittest.TestCase):
    def test_stylesheet_html(self) -> None:
        declaration = AssetDeclaration("css", "a.css", media="screen")
        assert declaration.to_html() == '<link rel="stylesheet" href="a.css" media="screen">'

    def test_script_html(self) -> None:
        assert AssetDeclaration("js", "a.js").to_html() == '<script src="a.js"></script>'

    def test_values_are_escaped(self) -> None:
        declaration = AssetDeclaration("css", 'a".css', media="<x>")
        assert declaration.to_html() == '<link rel="stylesheet" href="a&quot;.css" media="&lt;x&gt;">'


class TestAssetCollector(unittest.TestCase):
    def test_unknown_kind(self) -> None:
        with self.assertRaises(ValueError):
            AssetCollector().add("img", "a.png")

    def test_ordering_by_index_then_declaration(self) -> None:
        collector = AssetCollector()
        collector.add("css", "c.css")
        collector.add("css", "b.css", order_index=5)
        collector.add("css", "a.css", order_index=5)
        collector.add("css", "first.css", order_index=1)
        assert [d.target for d in collector.stylesheets()] == ["first.css", "b.css", "a.css", "c.css"]

    def test_scripts_by_slot(self) -> None:
        collector = AssetCollector()
        collector.add("js", "h.js")
        collector.add("js", "b.js", slot="body")
        assert [d.target for d in collector.scripts("head")] == ["h.js"]
        assert [d.target for d in collector.scripts("body")] == ["b.js"]
        assert len(collector) == 2

    def test_inject_without_declarations_is_identity(self) -> None:
        assert AssetCollector().inject("<head></head>") == "<head></head>"

    def test_inject_only_before_first_marker(self) -> None:
        collector = AssetCollector()
        collector.add("css", "a.css")
        output = collector.inject("<head></head><template></head></template>")
        assert output == '<head><link rel="stylesheet" href="a.css" media="all">\n</head><template></head></template>'

    def test_markers_are_case_insensitive(self) -> None:
        collector = AssetCollector()
        collector.add("js", "a.js", slot="body")
        assert collector.inject("<BODY></BODY >") == '<BODY><script src="a.js"></script>\n</BODY >'

    def test_longer_tag_names_are_not_markers(self) -> None:
        collector = AssetCollector()
        collector.add("css", "a.css")
        collector.add("js", "b.js", slot="body")
        with self.assertLogs("expohtml.assets", level="WARNING"):
            output = collector.inject("<header>x</header><bodyx></bodyx>")
        assert output == "<header>x</header><bodyx></bodyx>"

    def test_marker_after_lookalike_is_used(self) -> None:
        collector = AssetCollector()
        collector.add("css", "a.css")
        output = collector.inject("<header></header></head>")
        assert output == '<header></header><link rel="stylesheet" href="a.css" media="all">\n</head>'

    def test_missing_marker_drops_declarations(self) -> None:
        collector = AssetCollector()
        collector.add("css", "a.css")
        collector.add("js", "b.js", slot="body")
        with self.assertLogs("expohtml.assets", level="WARNING") as logs:
            output = collector.inject("<body></body>")
        assert output == '<body><script src="b.js"></script>\n</body>'
        assert "dropped 1 asset declaration(s)" in logs.output[0]


if __name__ == "__main__":
    unittest.main()
