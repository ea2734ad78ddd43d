import pytest

from labdoc.pdf.quality import ClassificationThresholds, score_pages, should_stop_early
from labdoc.pdf.types import PageExtractionResult, PDFExtractionResult

DEFAULTS = ClassificationThresholds()


def page(n: int, chars: int = 0, images: bool = False) -> PageExtractionResult:
    return PageExtractionResult(page_number=n, text="x" * chars, has_images=images)


def test_has_text_threshold_is_fifty_characters():
    assert page(1, 49).has_text is False
    assert page(1, 50).has_text is True
    # whitespace counts the same as anything else
    assert PageExtractionResult(page_number=1, text=" " * 50, has_images=False).has_text is True


def test_full_text_joins_pages_with_blank_lines():
    result = PDFExtractionResult(
        total_pages=3,
        pages=(
            PageExtractionResult(1, "alpha", False),
            PageExtractionResult(2, "", False),
            PageExtractionResult(3, "gamma", False),
        ),
        is_scanned=False,
        text_confidence=0.0,
    )
    assert result.full_text == "alpha\n\n\n\ngamma"


def test_image_only_pages_are_scanned_with_zero_confidence():
    verdict = score_pages([page(1, images=True), page(2, images=True)], 2, DEFAULTS)
    assert verdict.is_scanned is True
    assert verdict.text_confidence == 0.0


def test_no_images_means_not_scanned_even_without_text():
    verdict = score_pages([page(1), page(2)], 2, DEFAULTS)
    assert verdict.is_scanned is False


def test_enough_total_text_means_not_scanned():
    # only 1 of 3 pages has text, but it carries more than 3 * 50 characters
    pages = [page(1, 400, images=True), page(2, images=True), page(3, images=True)]
    verdict = score_pages(pages, 3, DEFAULTS)
    assert verdict.is_scanned is False


def test_long_text_gets_bonus_but_is_capped():
    verdict = score_pages([page(1, 600)], 1, DEFAULTS)
    assert verdict.text_confidence == 1.0

    half = score_pages([page(1, 300), page(2, 300, images=True)], 2, DEFAULTS)
    assert half.text_confidence == 1.0

    mixed = score_pages([page(1, 300), page(2, 0, images=True)], 2, DEFAULTS)
    assert mixed.text_confidence == pytest.approx(0.5)

    mixed_long = score_pages([page(1, 501), page(2, 0, images=True)], 2, DEFAULTS)
    assert mixed_long.text_confidence == pytest.approx(0.7)


@pytest.mark.parametrize("n_pages,chars", [(1, 0), (5, 10_000), (40, 60), (0, 0)])
def test_confidence_always_within_unit_interval(n_pages, chars):
    pages = [page(i + 1, chars, images=bool(i % 2)) for i in range(n_pages)]
    verdict = score_pages(pages, max(n_pages, 1), DEFAULTS)
    assert 0.0 <= verdict.text_confidence <= 1.0


def test_empty_page_list_scores_zero():
    verdict = score_pages([], 4, DEFAULTS)
    assert verdict.text_confidence == 0.0
    assert verdict.is_scanned is False


def test_early_exit_needs_three_pages():
    assert should_stop_early([page(1), page(2)], DEFAULTS) is False
    assert should_stop_early([page(1), page(2), page(3)], DEFAULTS) is True


def test_early_exit_bands():
    all_text = [page(i, 80) for i in range(1, 4)]
    assert should_stop_early(all_text, DEFAULTS) is True

    # 2 of 3 -> 0.67, inside the undecided band
    mixed = [page(1, 80), page(2, 80), page(3)]
    assert should_stop_early(mixed, DEFAULTS) is False

    # 4 of 5 -> exactly 0.8 is not "> 0.8"
    four_of_five = [page(i, 80) for i in range(1, 5)] + [page(5)]
    assert should_stop_early(four_of_five, DEFAULTS) is False

    # 1 of 5 -> exactly 0.2 is not "< 0.2"
    one_of_five = [page(1, 80)] + [page(i) for i in range(2, 6)]
    assert should_stop_early(one_of_five, DEFAULTS) is False


def test_thresholds_are_tunable():
    strict = ClassificationThresholds(min_text_chars_per_page=10)
    p = PageExtractionResult(page_number=1, text="x" * 12, has_images=True, min_text_chars=strict.min_text_chars_per_page)
    assert p.has_text is True
    assert score_pages([p], 1, strict).text_confidence == 1.0
