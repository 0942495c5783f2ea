"""Tests for the path and verb checks."""

import pytest

from apigw_cli.exceptions import UsageError
from apigw_cli.validation import (
    API_VERBS,
    check_arg_count,
    check_rel_path,
    check_verb,
    has_leading_slash,
    is_valid_verb,
)


class TestHasLeadingSlash:
    """Tests for has_leading_slash."""

    @pytest.mark.parametrize("path", ["/", "/hello", "//double", "/a/b/c", "/ spaced"])
    def test_slash_prefixed(self, path):
        assert has_leading_slash(path) is True

    @pytest.mark.parametrize("path", ["hello", "a/b", " /lead", "\\path", "greeting-api"])
    def test_not_slash_prefixed(self, path):
        assert has_leading_slash(path) is False

    def test_empty(self):
        assert has_leading_slash("") is False


class TestIsValidVerb:
    """Tests for is_valid_verb."""

    @pytest.mark.parametrize("verb", ["get", "GET", "Get", "pUt", "post", "POST", "delete", "DeLeTe"])
    def test_accepted_in_any_case(self, verb):
        assert is_valid_verb(verb) is True

    @pytest.mark.parametrize("verb", ["patch", "HEAD", "options", "", "gets", " get"])
    def test_rejected(self, verb):
        assert is_valid_verb(verb) is False


class TestChecks:
    """Tests for the raising check helpers."""

    def test_check_rel_path_returns_path(self):
        assert check_rel_path("/World") == "/World"

    def test_check_rel_path_names_value(self):
        with pytest.raises(UsageError) as exc_info:
            check_rel_path("world")
        assert "'world' must begin with '/'." in str(exc_info.value)
        assert exc_info.value.display_usage is True

    def test_check_verb_uppercases(self):
        assert check_verb("post") == "POST"

    def test_check_verb_lists_valid_values(self):
        with pytest.raises(UsageError) as exc_info:
            check_verb("patch")
        message = str(exc_info.value)
        assert "'patch' is not a valid API verb" in message
        for verb in API_VERBS:
            assert verb in message

    def test_arg_count_in_range(self):
        check_arg_count(["/a", "/b"], 1, 3, "Api delete", "hint")

    def test_arg_count_too_few(self):
        with pytest.raises(UsageError, match="Invalid argument"):
            check_arg_count([], 1, 3, "Api delete", "An API base path or API name is required.")

    def test_arg_count_too_many(self):
        with pytest.raises(UsageError) as exc_info:
            check_arg_count(["/a", "/b", "get", "extra"], 1, 3, "Api delete", "hint")
        assert "extra" in str(exc_info.value)
