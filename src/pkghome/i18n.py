from __future__ import annotations  # Python 3.6+ compatibility

# In pkghome/i18n.py - gettext wrapper for user-facing messages

import gettext
import locale
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

LOCALE_DIR = Path(__file__).parent / "locale"
DOMAIN = "pkghome"


def _normalize(lang_code):
    return lang_code.replace("-", "_").split(".")[0]


class Translator:
    """
    A callable holding the active translation function.
    Falls back to the identity function when no catalog is installed.
    """

    def __init__(self):
        self._translator = lambda s: s
        self.current_lang = "en"
        self.set_language()

    def set_language(self, lang_code=None):
        try:
            if lang_code is None:
                lang_env = locale.getlocale()[0] or "en_US"
                lang_code = lang_env
            normalized_code = _normalize(lang_code)

            langs_to_try = [normalized_code]
            if "_" in normalized_code:
                langs_to_try.append(normalized_code.split("_")[0])
            langs_to_try.append("en")

            translation = gettext.translation(
                DOMAIN, localedir=str(LOCALE_DIR), languages=langs_to_try, fallback=True
            )
            self._translator = translation.gettext
            self.current_lang = translation.info().get("language", "en")
        except (ValueError, OSError) as e:
            logger.debug("Translation setup failed for %r: %s", lang_code, e)
            self.current_lang = "en"
            self._translator = lambda s: s

    def __call__(self, text):
        return self._translator(text)

    def get_language_code(self):
        return self.current_lang


# --- The global instance the rest of the package imports ---
_ = Translator()
