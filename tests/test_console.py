import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from patience.cards import Card, Rank, Suit
from patience.console import dump_field, dump_rows, main, summary
from patience.field import PatienceField, fill_with_random_cards
from patience.stacks import FinishStack, PlayStack


def up(suit, rank):
    return Card(Suit(suit), Rank(rank), True)


class ConsoleTestCase(unittest.TestCase):
    def test_dump_rows_continues_until_every_pile_is_exhausted(self):
        out = io.StringIO()
        piles = [PlayStack((up(0, 5),)), PlayStack(), PlayStack((up(1, 9), up(0, 8), up(1, 7)))]
        written = dump_rows(piles, out)
        lines = out.getvalue().splitlines()
        self.assertEqual(3, written)
        self.assertEqual(3, len(lines))
        self.assertTrue(lines[0].startswith("♠5"))
        self.assertIn("♥9", lines[0])
        self.assertEqual("♥7", lines[2].strip())

    def test_dump_rows_with_nothing_to_show(self):
        out = io.StringIO()
        self.assertEqual(0, dump_rows([PlayStack(), PlayStack()], out))
        self.assertEqual("", out.getvalue())

    def test_dump_field_layout(self):
        field = fill_with_random_cards(12)
        out = io.StringIO()
        dump_field(field, out)
        lines = out.getvalue().split("\n")
        # header: foundations + stock (playable slot, remaining count)
        self.assertEqual(5, lines[0].count("[ ]"))
        self.assertIn("#24", lines[1])
        self.assertEqual("", lines[2])
        tableau = [line for line in lines[3:] if line]
        self.assertEqual(7, len(tableau))
        self.assertEqual(6, tableau[0].count("---"))
        self.assertNotIn("---", tableau[6])

    def test_dump_field_defaults_to_stdout(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            dump_field(fill_with_random_cards(1))
        self.assertIn("#24", buf.getvalue())

    def test_summary_reports_foundations(self):
        field = fill_with_random_cards(12)
        field = PatienceField(field.stock, field.play_stacks, (FinishStack((up(2, 1),)),) + field.finish_stacks[1:])
        text = summary(field)
        self.assertIn(f"hash={field.state_hash:016x}", text)
        self.assertIn("foundations=[1 0 0 0]", text)
        self.assertIn("done=False", text)

    def test_main_prints_dealt_position(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            main(["--seed", "4", "--draw", "2", "--trivial"])
        out = buf.getvalue()
        self.assertIn("hash=", out)
        self.assertIn("#22", out)

    def test_main_writes_snapshot(self):
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "deal.png"
            buf = io.StringIO()
            with redirect_stdout(buf):
                main(["--seed", "4", "--png", str(target)])
            self.assertTrue(target.exists())
            self.assertIn("snapshot written", buf.getvalue())


if __name__ == "__main__":
    unittest.main()
