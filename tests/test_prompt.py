import os
import unittest
from unittest.mock import patch

import click

from nativebuilder.prompt import confirm, is_interactive


class TestIsInteractive(unittest.TestCase):

    def test_flag_disables_prompts(self):
        self.assertFalse(is_interactive(non_interactive=True))

    @patch.dict(os.environ, {"CI": "true"}, clear=True)
    def test_ci_environment(self):
        self.assertFalse(is_interactive())

    @patch.dict(os.environ, {"NATIVEBUILDER_NON_INTERACTIVE": "1"}, clear=True)
    def test_env_flag(self):
        self.assertFalse(is_interactive())

    @patch.dict(os.environ, {"CI": "false"}, clear=True)
    @patch('nativebuilder.prompt.sys.stdin')
    def test_tty(self, mock_stdin):
        mock_stdin.isatty.return_value = True
        self.assertTrue(is_interactive())

    @patch.dict(os.environ, {}, clear=True)
    @patch('nativebuilder.prompt.sys.stdin')
    def test_no_tty(self, mock_stdin):
        mock_stdin.isatty.return_value = False
        self.assertFalse(is_interactive())


class TestConfirm(unittest.TestCase):

    @patch('nativebuilder.prompt.logger')
    @patch('click.confirm')
    def test_non_interactive_does_not_block(self, mock_confirm, mock_logger):
        confirm("Ready to build", "Platform: Linux", interactive=False)
        mock_confirm.assert_not_called()
        mock_logger.info.assert_called_once_with("Ready to build")
        mock_logger.step_info.assert_called_once_with("- Platform: Linux", indent=2)

    @patch('nativebuilder.prompt.logger')
    @patch('click.confirm')
    def test_interactive_asks(self, mock_confirm, mock_logger):
        confirm("Ready to build", interactive=True)
        mock_confirm.assert_called_once_with("Continue?", default=True, abort=True)

    @patch('nativebuilder.prompt.logger')
    @patch('click.confirm', side_effect=click.Abort)
    def test_interactive_decline_aborts(self, mock_confirm, mock_logger):
        with self.assertRaises(click.Abort):
            confirm("Ready to wipe", interactive=True)


if __name__ == '__main__':
    unittest.main()
