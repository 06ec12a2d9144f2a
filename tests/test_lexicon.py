import pytest

from fcamap.lexicon import local_name, normalize, normalized_names, tokens


class TestLexicon:
    @pytest.mark.parametrize(
        "uri, expected",
        [
            ("http://example.org/conf#hasAuthor", "hasAuthor"),
            ("http://example.org/conf/Paper", "Paper"),
            ("http://example.org/conf/Paper/", "Paper"),
            ("Paper", "Paper"),
        ],
    )
    def test_local_name(self, uri, expected):
        assert local_name(uri) == expected

    @pytest.mark.parametrize(
        "text",
        ["ConferencePaper", "conference_paper", "Conference paper", "  conference-PAPER "],
    )
    def test_normalize_variants_agree(self, text):
        assert normalize(text) == "conference paper"

    def test_normalize_acronyms(self):
        assert normalize("HTTPServer") == "http server"
        assert normalize("paper1") == "paper1"

    def test_tokens(self):
        assert tokens("hasAuthor") == {"has", "author"}
        assert tokens("") == set()

    def test_normalized_names_drop_empty(self):
        assert normalized_names(["", "--", "A_b", "aB"]) == {"a b"}
