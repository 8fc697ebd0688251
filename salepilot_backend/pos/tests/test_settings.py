# pos/tests/test_settings.py

import os
import subprocess
import sys
from pathlib import Path

from django.test import SimpleTestCase

PROJECT_DIR = Path(__file__).resolve().parent.parent.parent

SCRIPT = "import backend.settings.base as s; print(s.POS['CURRENCY_SYMBOL'])"


class RegisterEnvSettingsTests(SimpleTestCase):
    """
    settings.POS is built from POS_* env vars at import time.
    Each case imports the settings in a fresh interpreter.
    """

    def _currency_symbol(self, **overrides):
        env = {k: v for k, v in os.environ.items() if not k.startswith("POS_")}
        env.pop("DJANGO_SETTINGS_MODULE", None)
        env["PYTHONIOENCODING"] = "utf-8"
        env.update(overrides)

        proc = subprocess.run(
            [sys.executable, "-c", SCRIPT],
            cwd=PROJECT_DIR,
            env=env,
            capture_output=True,
            encoding="utf-8",
            timeout=60,
        )
        self.assertEqual(proc.returncode, 0, proc.stderr)
        return proc.stdout.strip()

    def test_default_currency_symbol_imports(self):
        self.assertEqual(self._currency_symbol(), "$")

    def test_bare_dollar_from_env(self):
        self.assertEqual(self._currency_symbol(POS_CURRENCY_SYMBOL="$"), "$")

    def test_other_symbols_pass_through(self):
        self.assertEqual(self._currency_symbol(POS_CURRENCY_SYMBOL="€"), "€")
