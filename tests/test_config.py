from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from pagepick import config
from pagepick.keybinds import DEFAULT_KEYBINDS, parse_key_pattern
from pagepick.theme import DEFAULT_THEME


def _valid_data() -> dict:
    return {
        "pages": {
            "web": {
                "order": 1,
                "prompt": "url: ",
                "entries": {"Docs": "https://docs.python.org"},
            },
            "Apps": {
                "prompt": "app: ",
                "entries": {"Firefox": "firefox", "Files": "nautilus"},
            },
            "books": {
                "prompt": "read: ",
                "entries": {},
            },
        }
    }


class ParseConfigTests(unittest.TestCase):
    def test_pages_sorted_by_order_then_label(self) -> None:
        parsed = config.parse_config(_valid_data())

        self.assertEqual([page.label for page in parsed.pages], ["Apps", "books", "web"])
        apps = parsed.pages[0]
        self.assertEqual(apps.prompt, "app: ")
        self.assertEqual(apps.entries, (config.Entry("Firefox", "firefox"), config.Entry("Files", "nautilus")))
        self.assertEqual(parsed.pages[2].order, 1)

    def test_defaults_apply_without_theme_or_keybinds(self) -> None:
        parsed = config.parse_config(_valid_data())

        self.assertEqual(parsed.theme, DEFAULT_THEME)
        self.assertEqual(parsed.keybinds, DEFAULT_KEYBINDS)

    def test_theme_and_keybind_overrides_are_merged(self) -> None:
        data = _valid_data()
        data["theme"] = {"prompt": {"fg": "#ffffff"}}
        data["keybinds"] = {"exit": ["ctrl+q"]}

        parsed = config.parse_config(data)

        self.assertEqual(parsed.theme.prompt, "\x1b[38;2;255;255;255m")
        self.assertEqual(parsed.keybinds.exit, (parse_key_pattern("ctrl+q"),))
        self.assertEqual(parsed.keybinds.submit, DEFAULT_KEYBINDS.submit)

    def test_invalid_documents_raise_config_error(self) -> None:
        page = {"prompt": "> ", "entries": {"a": "b"}}
        cases = {
            "not an object": [],
            "no pages": {"pages": {}},
            "unknown top-level key": {"pages": {"p": page}, "colors": {}},
            "page not object": {"pages": {"p": "x"}},
            "unknown page key": {"pages": {"p": {**page, "icon": "x"}}},
            "bool order": {"pages": {"p": {**page, "order": True}}},
            "float order": {"pages": {"p": {**page, "order": 1.5}}},
            "missing prompt": {"pages": {"p": {"entries": {}}}},
            "entries list": {"pages": {"p": {"prompt": "> ", "entries": ["a"]}}},
            "non-string value": {"pages": {"p": {"prompt": "> ", "entries": {"a": 1}}}},
            "theme not object": {"pages": {"p": page}, "theme": []},
            "bad theme": {"pages": {"p": page}, "theme": {"prompt": {"fg": "nope"}}},
            "keybinds not object": {"pages": {"p": page}, "keybinds": "esc"},
            "bad keybind": {"pages": {"p": page}, "keybinds": {"exit": ["ctrl+"]}},
        }
        for label, data in cases.items():
            with self.subTest(label), self.assertRaises(config.ConfigError):
                config.parse_config(data)


class LoadConfigTests(unittest.TestCase):
    def test_loads_json_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps(_valid_data()), encoding="utf-8")

            loaded = config.load_config(path)

        self.assertEqual(len(loaded.pages), 3)

    def test_missing_file_raises_with_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "absent.json"

            with self.assertRaisesRegex(config.ConfigError, "absent.json"):
                config.load_config(path)

    def test_malformed_json_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{pages:", encoding="utf-8")

            with self.assertRaisesRegex(config.ConfigError, "malformed"):
                config.load_config(path)

    def test_validation_errors_are_prefixed_with_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"pages": {}}), encoding="utf-8")

            with self.assertRaises(config.ConfigError) as ctx:
                config.load_config(path)

        self.assertTrue(str(ctx.exception).startswith(str(path)))

    def test_default_path_lives_in_user_config_dir(self) -> None:
        self.assertEqual(config.DEFAULT_CONFIG_PATH.name, "config.json")
        self.assertEqual(config.DEFAULT_CONFIG_PATH.parent.name, "pagepick")


if __name__ == "__main__":
    unittest.main()
