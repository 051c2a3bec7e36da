"""Tests for unknown-message suggestions."""

from whatsorder.conversation.suggestions import DEFAULT_SUGGESTIONS, generate_suggestions


class TestGenerateSuggestions:
    def test_mentioned_dish_is_suggested(self, catalog):
        assert generate_suggestions("any lassi today?", catalog) == ["Try: 'order 1 Mango Lassi'"]

    def test_all_matching_dishes_in_catalog_order(self, catalog):
        assert generate_suggestions("naan", catalog) == [
            "Try: 'order 1 Naan'",
            "Try: 'order 1 Garlic Naan'",
        ]

    def test_limit(self, catalog):
        assert len(generate_suggestions("chicken naan", catalog)) == 3
        assert len(generate_suggestions("chicken naan", catalog, limit=1)) == 1

    def test_unavailable_dish_not_suggested(self, catalog):
        assert generate_suggestions("gulab jamun", catalog) == DEFAULT_SUGGESTIONS

    def test_short_words_ignored(self, catalog):
        assert generate_suggestions("a an of", catalog) == DEFAULT_SUGGESTIONS

    def test_defaults_are_a_copy(self, catalog):
        generate_suggestions("xyz", catalog).append("extra")
        assert len(DEFAULT_SUGGESTIONS) == 2
