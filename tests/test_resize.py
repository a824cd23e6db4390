import pytest

from safethrough.resize import Direction, Rect, hit_test, resize_rect

RECT = Rect(100, 100, 200, 100)


def test_rect_edges():
    assert RECT.right == RECT.left + RECT.width - 1
    assert RECT.bottom == RECT.top + RECT.height - 1


@pytest.mark.parametrize("strict", [False, True])
def test_top_left_corner(strict):
    assert hit_test((RECT.left, RECT.top), RECT, 5, strict) is Direction.LEFT_TOP


@pytest.mark.parametrize("strict", [False, True])
def test_centre_is_unknown(strict):
    centre = (RECT.left + RECT.width // 2, RECT.top + RECT.height // 2)
    assert hit_test(centre, RECT, 5, strict) is Direction.UNKNOWN


@pytest.mark.parametrize(
    "point, expected",
    [
        ((102, 199), Direction.LEFT_DOWN),
        ((102, 150), Direction.LEFT),
        ((299, 100), Direction.RIGHT_TOP),
        ((297, 198), Direction.RIGHT_DOWN),
        ((298, 150), Direction.RIGHT),
        ((200, 102), Direction.UP),
        ((200, 197), Direction.DOWN),
    ],
)
def test_edges_and_corners(point, expected):
    assert hit_test(point, RECT) is expected


def test_strict_band_reaches_outside():
    outside_left = (RECT.left - 3, 150)
    outside_right = (RECT.right + 3, 150)
    assert hit_test(outside_left, RECT, 5, False) is Direction.UNKNOWN
    assert hit_test(outside_left, RECT, 5, True) is Direction.LEFT
    assert hit_test(outside_right, RECT, 5, False) is Direction.UNKNOWN
    assert hit_test(outside_right, RECT, 5, True) is Direction.RIGHT


def test_strict_side_needs_vertical_range():
    above = (RECT.left + 2, RECT.top - 50)
    assert hit_test(above, RECT, 5, False) is Direction.LEFT
    assert hit_test(above, RECT, 5, True) is Direction.UNKNOWN


def test_resize_unknown_is_identity():
    assert resize_rect(RECT, Direction.UNKNOWN, (10, 10)) == RECT


def test_resize_left_keeps_right_edge():
    result = resize_rect(RECT, Direction.LEFT, (80, 500))
    assert result.left == 80
    assert result.right == RECT.right
    assert (result.top, result.height) == (RECT.top, RECT.height)


def test_resize_right_keeps_left_edge():
    result = resize_rect(RECT, Direction.RIGHT, (350, 500))
    assert result.left == RECT.left
    assert result.width == 350 - RECT.left
    assert result.height == RECT.height


def test_resize_up_keeps_bottom_edge():
    result = resize_rect(RECT, Direction.UP, (0, 70))
    assert result.top == 70
    assert result.bottom == RECT.bottom
    assert (result.left, result.width) == (RECT.left, RECT.width)


def test_resize_down_keeps_top_edge():
    result = resize_rect(RECT, Direction.DOWN, (0, 260))
    assert result.top == RECT.top
    assert result.height == 260 - RECT.top


def test_resize_left_top_moves_both_edges():
    result = resize_rect(RECT, Direction.LEFT_TOP, (90, 80))
    assert (result.left, result.top) == (90, 80)
    assert (result.right, result.bottom) == (RECT.right, RECT.bottom)


def test_resize_right_down_changes_size_only():
    result = resize_rect(RECT, Direction.RIGHT_DOWN, (400, 300))
    assert (result.left, result.top) == (RECT.left, RECT.top)
    assert result.width == 400 - RECT.left
    assert result.height == 300 - RECT.top


def test_resize_right_top_and_left_down():
    rt = resize_rect(RECT, Direction.RIGHT_TOP, (400, 80))
    assert rt.top == 80 and rt.bottom == RECT.bottom
    assert rt.width == 400 - RECT.left
    ld = resize_rect(RECT, Direction.LEFT_DOWN, (90, 300))
    assert ld.left == 90 and ld.right == RECT.right
    assert ld.height == 300 - RECT.top