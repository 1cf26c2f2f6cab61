import tempfile
import unittest
from pathlib import Path

from PIL import Image

from patience.field import fill_with_random_cards
from patience.snapshot import CARD_BACK, CARD_FRONT, CARD_H, CARD_W, GAP, ROW_STEP, TABLE, render_field, save_field


class SnapshotTestCase(unittest.TestCase):
    def test_image_fits_every_pile(self):
        field = fill_with_random_cards(2)
        img = render_field(field)
        tableau_y = GAP + CARD_H + 2 * GAP
        self.assertEqual(GAP + 7 * (CARD_W + GAP), img.width)
        self.assertEqual(tableau_y + 6 * ROW_STEP + CARD_H + GAP, img.height)
        self.assertEqual(TABLE, img.getpixel((1, 1)))

    def test_face_down_cards_are_drawn_as_backs(self):
        field = fill_with_random_cards(2)
        img = render_field(field)
        tableau_y = GAP + CARD_H + 2 * GAP
        x = GAP + 6 * (CARD_W + GAP)
        self.assertEqual(CARD_BACK, img.getpixel((x + CARD_W // 2, tableau_y + ROW_STEP // 2)))

    def test_turned_stock_card_is_drawn_face_up(self):
        field = fill_with_random_cards(2).next_card()
        img = render_field(field)
        x = GAP + 4 * (CARD_W + GAP)
        self.assertEqual(CARD_FRONT, img.getpixel((x + CARD_W // 2, GAP + CARD_H - 6)))
        self.assertEqual(CARD_BACK, img.getpixel((GAP + 6 * (CARD_W + GAP) + CARD_W // 2, GAP + CARD_H + 2 * GAP + 5)))

    def test_save_writes_png(self):
        field = fill_with_random_cards(2).next_card().do_trivial_moves()
        with tempfile.TemporaryDirectory() as td:
            path = save_field(field, Path(td) / "out" / "field.png")
            with Image.open(path) as img:
                self.assertEqual(render_field(field).size, img.size)


if __name__ == "__main__":
    unittest.main()
