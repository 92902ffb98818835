import unittest
from collections import Counter
from typing import Dict, List, Set, Tuple

import numpy as np

from brick_mosaic.catalog import PLATE_1X1, STANDARD_CATALOG, find_piece
from brick_mosaic.chunks import build_chunks
from brick_mosaic.core_types import Brick, Image, Palette, PaletteColor, RawColor
from brick_mosaic.errors import MosaicError, NotUnitBrickError, PointerTooSmallError
from brick_mosaic.image_io import ArrayImage
from brick_mosaic.mosaic import Mosaic
from brick_mosaic.palette import EuclideanDistancePalette

UNIT = Brick("unit")
UNIT_2 = Brick("unit 2")
LENGTH_TWO = Brick("length two", length=2)
WIDTH_TWO = Brick("width two", width=2)
HEIGHT_TWO = Brick("height two", height=2)

COLOR1 = RawColor(235, 64, 52, 255)
COLOR2 = RawColor(235, 232, 52, 255)
COLOR3 = RawColor(52, 235, 55, 255)
COLOR4 = RawColor(52, 147, 235, 255)

# HEIGHTS[w][l]
HEIGHTS = [
    [5, 2, 1, 1],
    [5, 5, 2, 2],
    [1, 0, 3, 2],
    [4, 3, 1, 2],
    [3, 1, 1, 4],
]


def make_test_img() -> Tuple[ArrayImage, EuclideanDistancePalette]:
    """4x5 image with four flat colour regions (five connected areas)."""
    rows = [
        [COLOR1, COLOR1, COLOR1, COLOR4],
        [COLOR1, COLOR4, COLOR4, COLOR4],
        [COLOR4, COLOR4, COLOR4, COLOR2],
        [COLOR3, COLOR3, COLOR3, COLOR3],
        [COLOR4, COLOR3, COLOR3, COLOR3],
    ]
    rgba = np.array([[list(c) for c in row] for row in rows], dtype=np.uint8)
    palette = EuclideanDistancePalette([COLOR1, COLOR2, COLOR3, COLOR4])
    return ArrayImage(rgba), palette


def varied_height(l: int, w: int, _color) -> int:
    return HEIGHTS[w][l]


def unit_brick(_l: int, _w: int, _h: int, _color) -> Brick:
    return UNIT


def expected_voxels() -> Set[Tuple[int, int, int]]:
    return {
        (l, w, h)
        for w, row in enumerate(HEIGHTS)
        for l, height in enumerate(row)
        for h in range(height)
    }


def placed_voxels(mosaic: Mosaic) -> Counter:
    counts: Counter = Counter()
    for placed in mosaic.iter():
        counts.update(placed.voxels())
    return counts


class TestFromImage(unittest.TestCase):
    def assert_colors_match_img(self, img: ArrayImage, mosaic: Mosaic) -> None:
        for section, chunk in mosaic.chunks():
            for l, w in chunk.columns():
                raw = img.pixel(section.l + chunk.l + l, section.w + chunk.w + w)
                self.assertEqual(raw, chunk.color.rgba)

    def test_empty_mosaic(self) -> None:
        _, palette = make_test_img()
        empty = ArrayImage(np.zeros((0, 0, 4), dtype=np.uint8))

        mosaic = Mosaic.from_image(empty, palette, lambda l, w, c: 1, unit_brick)

        self.assertEqual(len(mosaic.sections), 0)
        self.assertEqual(len(list(mosaic.iter())), 0)

    def test_height_all_zeroes(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(img, palette, lambda l, w, c: 0, unit_brick)

        self.assertEqual(len(mosaic.sections), 0)
        self.assertEqual(len(list(mosaic.iter())), 0)
        self.assertIsNone(mosaic.max_height())

    def test_height_all_ones(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(img, palette, lambda l, w, c: 1, unit_brick)

        self.assertEqual(len(mosaic.sections), 1)
        section = mosaic.sections[0]
        self.assertEqual((section.l, section.w, section.h), (0, 0, 0))
        # one chunk per maximal same-colour region
        self.assertEqual(len(section.chunks), 5)
        for chunk in section.chunks:
            self.assertEqual(chunk.height, 1)
            for brick in chunk.bricks:
                self.assertTrue(brick.brick.is_unit)
                self.assertEqual(brick.h, 0)
        self.assert_colors_match_img(img, mosaic)

        placed = list(mosaic.iter())
        self.assertEqual(len(placed), 4 * 5)
        self.assertTrue(all(p.h == 0 for p in placed))

    def test_height_all_twos(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(img, palette, lambda l, w, c: 2, unit_brick)

        self.assertEqual(len(mosaic.sections), 1)
        self.assertEqual(len(mosaic.sections[0].chunks), 5)
        for _, chunk in mosaic.chunks():
            self.assertEqual(chunk.height, 2)
            self.assertTrue(all(b.h in (0, 1) for b in chunk.bricks))
        self.assertEqual(mosaic.brick_count(), 4 * 5 * 2)
        self.assertEqual(len(list(mosaic)), 4 * 5 * 2)
        self.assertEqual(mosaic.max_height(), 2)

    def test_height_varied(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(img, palette, varied_height, unit_brick)

        total = sum(sum(row) for row in HEIGHTS)
        self.assertEqual(mosaic.brick_count(), total)
        self.assertEqual(mosaic.volume(), total)
        self.assert_colors_match_img(img, mosaic)

        counts = placed_voxels(mosaic)
        self.assertEqual(set(counts), expected_voxels())
        self.assertTrue(all(n == 1 for n in counts.values()))

    def test_chunks_have_constant_footprint(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(img, palette, varied_height, unit_brick)

        for _, chunk in mosaic.chunks():
            for l, w in chunk.columns():
                for h in range(chunk.height):
                    self.assertGreater(
                        HEIGHTS[chunk.w + w][chunk.l + l], chunk.h + h
                    )
            by_level: Dict[int, Set[Tuple[int, int]]] = {}
            for brick in chunk.bricks:
                by_level.setdefault(brick.h, set()).add((brick.l, brick.w))
            self.assertEqual(len({frozenset(v) for v in by_level.values()}), 1)

    def test_bricks_and_height_varied(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(
            img,
            palette,
            varied_height,
            lambda l, w, h, c: UNIT_2 if w % 2 == 0 else UNIT,
        )

        even = sum(sum(row) for i, row in enumerate(HEIGHTS) if i % 2 == 0)
        odd = sum(sum(row) for i, row in enumerate(HEIGHTS) if i % 2 == 1)
        by_unit: Counter = Counter()
        for _, chunk in mosaic.chunks():
            self.assertTrue(all(b.brick == chunk.unit_brick for b in chunk.bricks))
            by_unit[chunk.unit_brick] += len(chunk.bricks)
        self.assertEqual(by_unit[UNIT_2], even)
        self.assertEqual(by_unit[UNIT], odd)
        self.assertEqual(mosaic.brick_count(), even + odd)

    def test_empty_palette(self) -> None:
        img, _ = make_test_img()

        mosaic = Mosaic.from_image(
            img, EuclideanDistancePalette([]), lambda l, w, c: 1, unit_brick
        )

        self.assertEqual(len(mosaic.sections), 1)
        self.assertEqual(len(mosaic.sections[0].chunks), 1)
        chunk = mosaic.sections[0].chunks[0]
        self.assertEqual(chunk.color, PaletteColor())
        self.assertEqual(chunk.color.rgba, RawColor(0, 0, 0, 0))
        self.assertEqual(len(chunk.bricks), 4 * 5)

    def test_custom_default_color(self) -> None:
        img, _ = make_test_img()

        mosaic = Mosaic.from_image(
            img,
            EuclideanDistancePalette([]),
            lambda l, w, c: 1,
            unit_brick,
            default_color="none",
        )

        self.assertEqual({p.color for p in mosaic.iter()}, {"none"})

    def test_unit_brick_bad_length(self) -> None:
        img, palette = make_test_img()
        with self.assertRaises(NotUnitBrickError) as cm:
            Mosaic.from_image(img, palette, lambda l, w, c: 1, lambda *a: LENGTH_TWO)
        self.assertEqual(cm.exception.brick, LENGTH_TWO)
        self.assertIsInstance(cm.exception, MosaicError)
        self.assertIn("length two", str(cm.exception))

    def test_unit_brick_bad_width(self) -> None:
        img, palette = make_test_img()
        with self.assertRaises(NotUnitBrickError) as cm:
            Mosaic.from_image(img, palette, lambda l, w, c: 1, lambda *a: WIDTH_TWO)
        self.assertEqual(cm.exception.brick, WIDTH_TWO)

    def test_unit_brick_bad_height(self) -> None:
        img, palette = make_test_img()
        with self.assertRaises(NotUnitBrickError) as cm:
            Mosaic.from_image(img, palette, lambda l, w, c: 1, lambda *a: HEIGHT_TWO)
        self.assertEqual(cm.exception.brick, HEIGHT_TWO)

    def test_one_bad_voxel_fails_whole_build(self) -> None:
        img, palette = make_test_img()
        with self.assertRaises(NotUnitBrickError):
            Mosaic.from_image(
                img,
                palette,
                varied_height,
                lambda l, w, h, c: LENGTH_TWO if (l, w, h) == (3, 4, 3) else UNIT,
            )


class TestCallbacks(unittest.TestCase):
    def test_callbacks_run_once_per_coordinate(self) -> None:
        img, palette = make_test_img()
        pixel_calls: Counter = Counter()
        height_calls: Counter = Counter()
        brick_calls: Counter = Counter()

        class CountingImage(ArrayImage):
            def pixel(self, l, w):
                pixel_calls[(l, w)] += 1
                return super().pixel(l, w)

        def height_fn(l, w, color):
            height_calls[(l, w)] += 1
            return HEIGHTS[w][l]

        def brick_fn(l, w, h, color):
            brick_calls[(l, w, h)] += 1
            return UNIT

        Mosaic.from_image(CountingImage(img.rgba), palette, height_fn, brick_fn)

        self.assertEqual(len(pixel_calls), 4 * 5)
        self.assertTrue(all(n == 1 for n in pixel_calls.values()))
        self.assertEqual(len(height_calls), 4 * 5)
        self.assertTrue(all(n == 1 for n in height_calls.values()))
        self.assertEqual(set(brick_calls), expected_voxels())
        self.assertTrue(all(n == 1 for n in brick_calls.values()))

    def test_palette_runs_once_per_pixel(self) -> None:
        img, palette = make_test_img()
        calls: List[RawColor] = []

        class CountingPalette:
            def nearest(self, color):
                calls.append(color)
                return palette.nearest(color)

        Mosaic.from_image(img, CountingPalette(), lambda l, w, c: 3, unit_brick)

        self.assertEqual(len(calls), 4 * 5)

    def test_accepts_duck_typed_capabilities(self) -> None:
        img, palette = make_test_img()

        class PlainImage:
            def pixel(self, l, w):
                return img.pixel(l, w)

            def length(self):
                return img.length()

            def width(self):
                return img.width()

        class PlainPalette:
            def nearest(self, color):
                return palette.nearest(color)

        self.assertIsInstance(PlainImage(), Image)
        self.assertIsInstance(PlainPalette(), Palette)
        self.assertIsInstance(img, Image)
        self.assertIsInstance(palette, Palette)
        self.assertNotIsInstance(object(), Palette)

        plain = Mosaic.from_image(PlainImage(), PlainPalette(), varied_height, unit_brick)
        direct = Mosaic.from_image(img, palette, varied_height, unit_brick)
        self.assertEqual(list(plain.iter()), list(direct.iter()))

    def test_callbacks_see_quantized_colour(self) -> None:
        img, palette = make_test_img()
        seen: Dict[Tuple[int, int], PaletteColor] = {}

        def height_fn(l, w, color):
            seen[(l, w)] = color
            return 1

        Mosaic.from_image(img, palette, height_fn, unit_brick)

        self.assertEqual(seen[(0, 0)].rgba, COLOR1)
        self.assertEqual(seen[(3, 2)].rgba, COLOR2)
        self.assertEqual(seen[(0, 4)].rgba, COLOR4)

    def test_negative_height_is_empty(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(img, palette, lambda l, w, c: -3, unit_brick)

        self.assertEqual(mosaic.brick_count(), 0)


class TestSections(unittest.TestCase):
    def test_small_sections_cover_image(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(
            img, palette, varied_height, unit_brick, section_size=2
        )

        counts = placed_voxels(mosaic)
        self.assertEqual(set(counts), expected_voxels())
        self.assertTrue(all(n == 1 for n in counts.values()))
        for placed in mosaic.iter():
            self.assertEqual(img.pixel(placed.l, placed.w), placed.color.rgba)

    def test_small_sections_offsets(self) -> None:
        img, palette = make_test_img()

        mosaic = Mosaic.from_image(
            img, palette, lambda l, w, c: 5, unit_brick, section_size=2
        )

        offsets = {(s.l, s.w, s.h) for s in mosaic.sections}
        expected = {
            (l, w, h) for l in (0, 2) for w in (0, 2, 4) for h in (0, 2, 4)
        }
        self.assertEqual(offsets, expected)
        for section, chunk in mosaic.chunks():
            self.assertLessEqual(chunk.l + chunk.length, 2)
            self.assertLessEqual(chunk.w + chunk.width, 2)
            self.assertLessEqual(chunk.h + chunk.height, 2)
        self.assertEqual(mosaic.max_height(), 5)

    def test_brick_fn_gets_global_coordinates(self) -> None:
        img, palette = make_test_img()
        seen: Set[Tuple[int, int, int]] = set()

        def brick_fn(l, w, h, color):
            seen.add((l, w, h))
            self.assertEqual(img.pixel(l, w), color.rgba)
            return UNIT

        Mosaic.from_image(img, palette, varied_height, brick_fn, section_size=2)

        self.assertEqual(seen, expected_voxels())

    def test_section_size_must_be_positive(self) -> None:
        img, palette = make_test_img()
        with self.assertRaises(ValueError):
            Mosaic.from_image(
                img, palette, lambda l, w, c: 1, unit_brick, section_size=0
            )


class TestPointerTooSmall(unittest.TestCase):
    def test_oversized_slab(self) -> None:
        huge = 2**40
        with self.assertRaises(PointerTooSmallError):
            build_chunks(
                huge, huge, huge, lambda l, w: 1, lambda *a: UNIT, lambda l, w: 0
            )


class TestReduceBricks(unittest.TestCase):
    def test_unit_only_catalog_keeps_assignment(self) -> None:
        img, palette = make_test_img()
        mosaic = Mosaic.from_image(img, palette, varied_height, unit_brick)

        reduced = mosaic.reduce_bricks([UNIT])

        before = sorted((p.l, p.w, p.h, p.brick.id, p.color.rgba) for p in mosaic)
        after = sorted((p.l, p.w, p.h, p.brick.id, p.color.rgba) for p in reduced)
        self.assertEqual(before, after)

    def test_reduce_returns_new_mosaic(self) -> None:
        img, palette = make_test_img()
        mosaic = Mosaic.from_image(img, palette, lambda l, w, c: 1, unit_brick)
        two_by_one = Brick("2x1", length=2, unit_type=UNIT)

        reduced = mosaic.reduce_bricks([two_by_one])

        self.assertIsNot(reduced, mosaic)
        self.assertEqual(mosaic.brick_count(), 20)
        self.assertLess(reduced.brick_count(), 20)

    def test_volume_preserved_per_chunk(self) -> None:
        img, palette = make_test_img()
        mosaic = Mosaic.from_image(img, palette, varied_height, unit_brick)
        catalog = [
            Brick("2x1", length=2, unit_type=UNIT),
            Brick("2x2", length=2, width=2, unit_type=UNIT),
            Brick("1x1x2", height=2, unit_type=UNIT),
        ]

        reduced = mosaic.reduce_bricks(catalog)

        before = [c.volume() for _, c in mosaic.chunks()]
        after = [sum(b.brick.volume for b in c.bricks) for _, c in reduced.chunks()]
        self.assertEqual(before, after)
        counts = placed_voxels(reduced)
        self.assertEqual(set(counts), expected_voxels())
        self.assertTrue(all(n == 1 for n in counts.values()))

    def test_unknown_unit_brick_chunks_unchanged(self) -> None:
        img, palette = make_test_img()
        mosaic = Mosaic.from_image(img, palette, lambda l, w, c: 1, unit_brick)
        other_unit = Brick("other")

        reduced = mosaic.reduce_bricks(
            [Brick("2x1", length=2, unit_type=other_unit)]
        )

        self.assertEqual(
            [c for _, c in reduced.chunks()], [c for _, c in mosaic.chunks()]
        )

    def test_exclusions_by_colour(self) -> None:
        img, palette = make_test_img()
        mosaic = Mosaic.from_image(img, palette, varied_height, unit_brick)
        two_by_one = Brick("2x1", length=2, unit_type=UNIT)
        red = palette.nearest(COLOR1)
        green = palette.nearest(COLOR3)

        reduced = mosaic.reduce_bricks(
            [two_by_one], [(two_by_one, red), (two_by_one, green)]
        )

        def is_two_by_one(p) -> bool:
            return (p.length, p.width) == (2, 1)

        placed = list(reduced.iter())
        self.assertFalse(any(is_two_by_one(p) and p.color in (red, green) for p in placed))
        self.assertTrue(
            any(is_two_by_one(p) and p.color not in (red, green) for p in placed)
        )
        self.assertEqual(reduced.volume(), sum(sum(row) for row in HEIGHTS))
        self.assertEqual(
            sum(p.brick.volume for p in placed), sum(sum(row) for row in HEIGHTS)
        )

    def test_reduce_twice(self) -> None:
        img, palette = make_test_img()
        mosaic = Mosaic.from_image(img, palette, varied_height, unit_brick)
        catalog = [Brick("2x1", length=2, unit_type=UNIT)]

        once = mosaic.reduce_bricks(catalog)
        twice = once.reduce_bricks(catalog)

        self.assertEqual(
            sorted((p.l, p.w, p.h, p.brick) for p in once),
            sorted((p.l, p.w, p.h, p.brick) for p in twice),
        )

    def test_iteration_is_repeatable(self) -> None:
        img, palette = make_test_img()
        mosaic = Mosaic.from_image(img, palette, varied_height, unit_brick)

        self.assertEqual(list(mosaic.iter()), list(mosaic.iter()))

    def test_build_and_reduce_are_deterministic(self) -> None:
        def build_and_reduce() -> Mosaic:
            img, palette = make_test_img()
            mosaic = Mosaic.from_image(
                img,
                palette,
                varied_height,
                lambda *a: PLATE_1X1,
                section_size=2,
            )
            plate = find_piece("Plate 1x2")
            return mosaic.reduce_bricks(
                STANDARD_CATALOG, [(plate, palette.nearest(COLOR4))]
            )

        first = build_and_reduce()
        second = build_and_reduce()

        self.assertEqual(list(first.iter()), list(second.iter()))
        self.assertEqual(len(first.sections), len(second.sections))
        for a, b in zip(first.sections, second.sections):
            self.assertEqual((a.l, a.w, a.h), (b.l, b.w, b.h))
            self.assertEqual(a.chunks, b.chunks)


if __name__ == "__main__":
    unittest.main()
