# SPDX-License-Identifier: LGPL-3.0-or-later
import unittest

from bulkstatic.cli.prompt import AutoConfirmer, StdinConfirmer


class TestStdinConfirmer(unittest.TestCase):
    def _ask(self, reply):
        seen = []

        def ask(prompt):
            seen.append(prompt)
            if isinstance(reply, BaseException):
                raise reply
            return reply

        return StdinConfirmer(ask), seen

    def test_yes_answers(self):
        for reply in ("y", "Y", "yes", " y \n"):
            confirmer, seen = self._ask(reply)
            self.assertTrue(confirmer.confirm("Continue?"))
            self.assertEqual(seen, ["Continue? [y/N]: "])

    def test_everything_else_is_no(self):
        for reply in ("", "n", "no", "sure"):
            confirmer, _ = self._ask(reply)
            self.assertFalse(confirmer.confirm("Continue?"))

    def test_eof_is_no(self):
        confirmer, _ = self._ask(EOFError())
        self.assertFalse(confirmer.confirm("Continue?"))

    def test_auto(self):
        self.assertTrue(AutoConfirmer().confirm("Continue?"))


if __name__ == "__main__":
    unittest.main()
