from seo_reports.utils.text import ELLIPSIS, pdf_safe, slugify, split_lines, truncate


def test_truncate_short_text_is_unchanged() -> None:
    assert truncate("Short title", 40) == "Short title"
    assert truncate("x" * 40, 40) == "x" * 40
    assert truncate("", 10) == ""
    assert truncate(None, 10) == ""


def test_truncate_long_text_is_bounded() -> None:
    text = "How to pick the right running shoes for trail marathons in winter"
    out = truncate(text, 40)
    assert out == text[:40] + ELLIPSIS
    assert len(out) <= 40 + len(ELLIPSIS)


def test_truncate_is_idempotent() -> None:
    for budget in (1, 5, 22, 40, 48):
        for text in ("", "abc", "a" * 47, "keyword one, keyword two, keyword three, keyword four"):
            once = truncate(text, budget)
            assert truncate(once, budget) == once
            assert len(once) <= budget + len(ELLIPSIS)


def test_split_lines_respects_width() -> None:
    text = "Working through these items in order should lift the site score noticeably"
    lines = split_lines(text, 20)
    assert all(len(line) <= 20 for line in lines)
    assert " ".join(lines) == text


def test_split_lines_hard_splits_long_words() -> None:
    lines = split_lines("tiny " + "x" * 25, 10)
    assert lines == ["tiny", "x" * 10, "x" * 10, "x" * 5]
    assert split_lines("", 10) == []


def test_pdf_safe_drops_controls_and_transliterates() -> None:
    assert pdf_safe("a\x00b\u200bc") == "abc"
    assert pdf_safe("Café – đường") == "Café - duong"
    assert pdf_safe("中") == "?"


def test_pdf_safe_keeps_unicode_with_ttf_fonts() -> None:
    assert pdf_safe("đường 中", unicode_font=True) == "đường 中"


def test_slugify() -> None:
    assert slugify("www.Example.com") == "www-example-com"
    assert slugify("Bánh mì recipes!") == "banh-mi-recipes"
    assert slugify("???") == "report"
