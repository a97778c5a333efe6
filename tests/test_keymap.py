from __future__ import annotations

import unittest

from linepicker.errors import ConfigurationError
from linepicker.keymap import (
    DEFAULT_BINDINGS,
    KeyComboBinding,
    KeyComboRegistry,
    normalize_key_name,
    resolve_bindings,
)


class KeyNameTests(unittest.TestCase):
    def test_short_forms_map_to_tokens(self) -> None:
        self.assertEqual(normalize_key_name("C-n"), "CTRL_N")
        self.assertEqual(normalize_key_name("c-space"), "CTRL_SPACE")
        self.assertEqual(normalize_key_name("PgUp"), "PAGE_UP")
        self.assertEqual(normalize_key_name("Escape"), "ESC")
        self.assertEqual(normalize_key_name("j"), "j")
        self.assertEqual(normalize_key_name("CTRL_K"), "CTRL_K")


class ResolveBindingsTests(unittest.TestCase):
    def test_defaults_cover_confirm_and_cancel(self) -> None:
        bindings = resolve_bindings()
        self.assertEqual(bindings["ENTER"], "finish")
        self.assertEqual(bindings["ESC"], "cancel")
        self.assertEqual(bindings["CTRL_C"], "cancel")

    def test_overrides_replace_defaults(self) -> None:
        bindings = resolve_bindings({"C-j": "select_down", "ENTER": "toggle_selection"})
        self.assertEqual(bindings["CTRL_J"], "select_down")
        self.assertEqual(bindings["ENTER"], "toggle_selection")
        self.assertEqual(DEFAULT_BINDINGS["ENTER"], "finish")

    def test_unknown_action_is_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            resolve_bindings({"C-j": "launch_rockets"})

    def test_single_select_drops_toggle_bindings(self) -> None:
        bindings = resolve_bindings({"C-t": "toggle_selection"}, multi_select=False)
        self.assertNotIn("CTRL_SPACE", bindings)
        self.assertNotIn("CTRL_T", bindings)
        self.assertEqual(bindings["ENTER"], "finish")


class KeyComboRegistryTests(unittest.TestCase):
    def test_dispatch_invokes_bound_handler(self) -> None:
        calls: list[str] = []
        registry = KeyComboRegistry().register_bindings(
            KeyComboBinding(("UP", "CTRL_P"), lambda: calls.append("up")),
            KeyComboBinding(("DOWN",), lambda: calls.append("down")),
        )

        self.assertTrue(registry.dispatch("CTRL_P"))
        self.assertTrue(registry.dispatch("DOWN"))
        self.assertFalse(registry.dispatch("x"))
        self.assertEqual(calls, ["up", "down"])


if __name__ == "__main__":
    unittest.main()
