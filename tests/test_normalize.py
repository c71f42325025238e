"""Tests for OCR response normalization into renderable markup."""

from ocr_desk.normalize import (
    IMG_STYLE,
    image_tag,
    normalize,
    placeholder_pattern,
)


def _img(image_id: str, data: str = "data:image/png;base64,AAA") -> dict:
    return {"id": image_id, "image_base64": data}


def _paged(*pages: dict) -> dict:
    return {"pages": list(pages)}


def _chat(content: str) -> dict:
    return {"choices": [{"message": {"content": content}}]}


# ── Placeholder substitution ─────────────────────────────────────────


def test_placeholder_replaced_with_inline_image() -> None:
    raw = _paged({"markdown": "See ![figure](img1) here", "images": [_img("img1")]})

    out = normalize(raw)

    assert out == (
        'See <img src="data:image/png;base64,AAA" alt="figure" '
        f'style="{IMG_STYLE}" /> here'
    )
    assert "![figure](img1)" not in out


def test_empty_alt_text_falls_back_to_id() -> None:
    out = normalize(_paged({"markdown": "![](img-7.jpeg)", "images": [_img("img-7.jpeg")]}))

    assert 'alt="img-7.jpeg"' in out


def test_every_occurrence_is_replaced_with_first_alt() -> None:
    raw = _paged(
        {
            "markdown": "![one](img1) and ![two](img1)",
            "images": [_img("img1")],
        }
    )

    out = normalize(raw)

    assert out.count("<img ") == 2
    assert out.count('alt="one"') == 2
    assert "](img1)" not in out


def test_id_is_matched_literally() -> None:
    raw = _paged(
        {
            "markdown": "![a](img.1(x)) ![b](imgX1(x))",
            "images": [_img("img.1(x)")],
        }
    )

    out = normalize(raw)

    assert out.count("<img ") == 1
    assert 'alt="a"' in out
    assert "![b](imgX1(x))" in out


def test_unmatched_image_is_dropped() -> None:
    raw = _paged({"markdown": "Just text.\nMore.", "images": [_img("img9")]})

    assert normalize(raw) == "Just text.<br>More."


def test_unresolved_placeholder_is_preserved() -> None:
    raw = _paged(
        {
            "markdown": "![known](img1) ![unknown](img2)",
            "images": [_img("img1")],
        }
    )

    out = normalize(raw)

    assert "![unknown](img2)" in out
    assert "![known](img1)" not in out


def test_image_without_data_is_not_substituted() -> None:
    raw = _paged({"markdown": "![x](img1)", "images": [{"id": "img1"}]})

    assert normalize(raw) == "![x](img1)"


def test_images_only_apply_to_their_own_page() -> None:
    raw = _paged(
        {"markdown": "![p1](img1)", "images": []},
        {"markdown": "![p2](img1)", "images": [_img("img1")]},
    )

    first, second = normalize(raw).split("<br><br>")

    assert first == "![p1](img1)"
    assert second.startswith("<img ")


def test_backslashes_in_data_are_kept_verbatim() -> None:
    raw = _paged({"markdown": "![x](i)", "images": [_img("i", data=r"data:\1\g<0>")]})

    assert 'src="data:\\1\\g<0>"' in normalize(raw)


def test_alt_text_is_not_escaped_by_default() -> None:
    raw = _paged({"markdown": '![a"b<c](img1)', "images": [_img("img1")]})

    assert 'alt="a"b<c"' in normalize(raw)


def test_escape_alt_escapes_markup() -> None:
    raw = _paged({"markdown": '![a"b<c](img1)', "images": [_img("img1")]})

    assert 'alt="a&quot;b&lt;c"' in normalize(raw, escape_alt=True)


def test_placeholder_pattern_requires_image_syntax() -> None:
    pattern = placeholder_pattern("img1")

    assert pattern.search("![alt](img1)")
    assert not pattern.search("[alt](img1)")
    assert not pattern.search("![alt](img10)")
    assert not pattern.search("![al]t](img1)")


def test_image_tag_shape() -> None:
    assert image_tag("s", "a") == f'<img src="s" alt="a" style="{IMG_STYLE}" />'


# ── Pages and breaks ─────────────────────────────────────────────────


def test_pages_are_separated_by_double_break() -> None:
    out = normalize(_paged({"markdown": "A"}, {"markdown": "B"}))

    assert out == "A<br><br>B"
    assert not out.endswith("<br>")


def test_empty_last_page_leaves_no_trailing_breaks() -> None:
    assert normalize(_paged({"markdown": "A"}, {"markdown": ""})) == "A"
    assert normalize(_paged({"markdown": "A"}, {"images": []})) == "A"
    assert normalize(_paged({"markdown": "A"}, {}, {"markdown": " \n"})) == "A"


def test_final_newline_of_last_page_is_trimmed() -> None:
    out = normalize(_paged({"markdown": "A"}, {"markdown": "B\n\n"}))

    assert out == "A<br><br>B"


def test_newlines_inside_last_page_are_kept() -> None:
    assert normalize(_paged({"markdown": "B\nC\n"})) == "B<br>C"


def test_newlines_become_breaks() -> None:
    assert normalize(_paged({"markdown": "line 1\nline 2\n\nline 3"})) == (
        "line 1<br>line 2<br><br>line 3"
    )


def test_missing_markdown_counts_as_empty_page() -> None:
    out = normalize(_paged({"images": []}, {"markdown": "B"}))

    assert out == "<br><br>B"


def test_pages_without_text_normalize_to_empty() -> None:
    assert normalize(_paged({"markdown": ""}, {})) == ""
    assert normalize({"pages": []}) == ""


def test_surrounding_whitespace_is_trimmed() -> None:
    assert normalize(_paged({"markdown": "  text  "})) == "text"


# ── Chat-completion and unrecognized shapes ──────────────────────────


def test_chat_content_only_gets_breaks() -> None:
    out = normalize(_chat("Hello\n![x](img1)"))

    assert out == "Hello<br>![x](img1)"


def test_unrecognized_shapes_normalize_to_empty() -> None:
    assert normalize({}) == ""
    assert normalize(None) == ""
    assert normalize({"choices": []}) == ""
    assert normalize({"choices": [{"message": {"content": ""}}]}) == ""
    assert normalize({"pages": "not a list"}) == ""


def test_normalizing_reserialized_result_keeps_substitutions() -> None:
    raw = _paged(
        {"markdown": "Title\n![figure](img1)", "images": [_img("img1")]},
        {"markdown": "Second page"},
    )
    first = normalize(raw)

    again = normalize(_chat(first))

    assert again == first
    assert again.count("<img ") == 1
