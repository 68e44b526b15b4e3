from __future__ import annotations

import io
import subprocess
import unittest
from unittest import mock

from pagepick.launch import LaunchError, launch_command, submit_selection


class LaunchCommandTests(unittest.TestCase):
    def test_print_mode_builds_no_command(self) -> None:
        self.assertIsNone(launch_command("firefox"))

    def test_exec_detaches_selection(self) -> None:
        self.assertEqual(launch_command("firefox", exec_selection=True), ["nohup", "firefox"])

    def test_exec_with_appends_selection_as_single_argument(self) -> None:
        self.assertEqual(
            launch_command("https://example.com/a b", exec_with="xdg-open --new"),
            ["xdg-open", "--new", "https://example.com/a b"],
        )

    def test_empty_exec_with_raises(self) -> None:
        with self.assertRaises(LaunchError):
            launch_command("x", exec_with="  ")


class SubmitSelectionTests(unittest.TestCase):
    def test_print_mode_writes_value_and_newline(self) -> None:
        stdout = io.StringIO()

        with mock.patch("pagepick.launch.subprocess.Popen") as popen_mock:
            submit_selection("firefox", stdout)

        self.assertEqual(stdout.getvalue(), "firefox\n")
        popen_mock.assert_not_called()

    def test_exec_spawns_detached_process_with_null_stdio(self) -> None:
        stdout = io.StringIO()

        with mock.patch("pagepick.launch.subprocess.Popen") as popen_mock:
            submit_selection("firefox", stdout, exec_with="flatpak run")

        popen_mock.assert_called_once_with(
            ["flatpak", "run", "firefox"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        self.assertEqual(stdout.getvalue(), "")

    def test_spawn_failure_raises_launch_error(self) -> None:
        with mock.patch("pagepick.launch.subprocess.Popen", side_effect=FileNotFoundError("nohup")):
            with self.assertRaises(LaunchError):
                submit_selection("firefox", io.StringIO(), exec_selection=True)


if __name__ == "__main__":
    unittest.main()
