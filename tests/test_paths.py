"""Tests for URL path helpers."""

import pytest
from liveserve.paths import strip_leading_slash, to_url_path, url_join


class TestUrlJoin:
    """Tests for url_join()."""

    @pytest.mark.parametrize(
        ("parts", "expected"),
        [
            (("docs/", "index.html"), "docs/index.html"),
            (("docs", "/index.html"), "docs/index.html"),
            (("/", "index.html"), "index.html"),
            (("/app/page.html/",), "/app/page.html"),
            (("a//", "//b//", "c"), "a/b/c"),
            (("", "x"), "x"),
        ],
    )
    def test__segments__joined_with_single_slashes(
        self, parts: tuple[str, ...], expected: str
    ) -> None:
        assert url_join(*parts) == expected

    def test__first_segment__keeps_leading_slash(self) -> None:
        assert url_join("/app", "page.html") == "/app/page.html"


class TestToUrlPath:
    """Tests for to_url_path()."""

    def test__file_under_root__becomes_root_relative(self) -> None:
        assert to_url_path("/srv/site/app/page.html", "/srv/site") == "/app/page.html"

    def test__root_with_trailing_slash__is_stripped(self) -> None:
        assert to_url_path("/srv/site/app/page.html", "/srv/site/") == "/app/page.html"

    def test__windows_separators__are_normalized(self) -> None:
        assert to_url_path("C:\\site\\app\\page.html", "C:\\site") == "/app/page.html"

    def test__file_outside_root__is_left_alone(self) -> None:
        assert to_url_path("/elsewhere/page.html", "/srv/site") == "/elsewhere/page.html"

    def test__sibling_with_common_prefix__is_not_stripped(self) -> None:
        assert to_url_path("/srv/site2/page.html", "/srv/site") == "/srv/site2/page.html"


def test__strip_leading_slash__removes_only_one() -> None:
    assert strip_leading_slash("//a") == "/a"
    assert strip_leading_slash("a") == "a"
