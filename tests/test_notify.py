import unittest
from io import StringIO

from rich.console import Console

from claunch.core.notify import ConsoleNotifier


class ConsoleNotifierTests(unittest.TestCase):
    def setUp(self) -> None:
        self.output = StringIO()
        self.notifier = ConsoleNotifier(Console(file=self.output, force_terminal=False, width=200))

    def test_bracketed_path_is_printed_verbatim(self) -> None:
        self.notifier.notify("Opening Claude Code in: notes [draft]")
        self.assertEqual(self.output.getvalue(), "Opening Claude Code in: notes [draft]\n")

    def test_closing_tag_like_text_does_not_raise(self) -> None:
        message = "Failed to open Claude Code: Custom command failed: no such file '[/x]'"
        self.notifier.notify(message, 8.0)
        self.assertEqual(self.output.getvalue(), message + "\n")


if __name__ == "__main__":
    unittest.main()
