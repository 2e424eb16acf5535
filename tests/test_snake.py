"""Tests for the Snake module."""

import pytest

from arcade_snake.snake import Direction, Snake, same_axis


class TestDirection:
    def test_vectors(self):
        assert Direction.RIGHT.value == (1, 0)
        assert Direction.LEFT.value == (-1, 0)
        assert Direction.DOWN.value == (0, 1)
        assert Direction.UP.value == (0, -1)

    def test_from_name_case_insensitive(self):
        assert Direction.from_name("up") is Direction.UP
        assert Direction.from_name(" Left ") is Direction.LEFT

    def test_from_name_unknown(self):
        with pytest.raises(ValueError, match="Unknown direction"):
            Direction.from_name("sideways")

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            (Direction.RIGHT, Direction.LEFT, True),
            (Direction.RIGHT, Direction.RIGHT, True),
            (Direction.UP, Direction.DOWN, True),
            (Direction.RIGHT, Direction.UP, False),
            (Direction.DOWN, Direction.LEFT, False),
        ],
    )
    def test_same_axis(self, a, b, expected):
        assert same_axis(a, b) is expected


class TestSnakeInit:
    def test_single_cell(self):
        snake = Snake((5, 5))
        assert snake.head == (5, 5)
        assert len(snake) == 1
        assert snake.alive
        assert snake.direction == Direction.RIGHT


class TestSnakeMovement:
    def test_next_head(self):
        assert Snake((5, 5), Direction.RIGHT).next_head() == (6, 5)
        assert Snake((5, 5), Direction.UP).next_head() == (5, 4)

    def test_next_head_is_unwrapped(self):
        assert Snake((0, 0), Direction.LEFT).next_head() == (-1, 0)

    def test_grow_then_drop_keeps_length(self):
        snake = Snake((5, 5))
        snake.grow_to((6, 5))
        assert list(snake.body) == [(6, 5), (5, 5)]
        assert snake.drop_tail() == (5, 5)
        assert list(snake.body) == [(6, 5)]

    def test_occupies(self):
        snake = Snake((5, 5))
        snake.grow_to((6, 5))
        assert snake.occupies((5, 5))
        assert snake.occupies((6, 5))
        assert not snake.occupies((0, 0))

