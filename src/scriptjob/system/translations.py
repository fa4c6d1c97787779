"""
Locale lookup for guest script translations
"""

import os
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from scriptjob.storage.ports import IGlobalStorage
from scriptjob.utils.loggers import get_logger

logger = get_logger(__name__)


def gettext_languages(storage: IGlobalStorage) -> List[str]:
    """
    Languages to try, most specific first.

    Derived from ``localeConf["LANG"]`` in global storage, so
    ``en_US.UTF-8`` gives ``["en_US.UTF-8", "en_US", "en"]``.
    """
    locale_conf = storage.value("localeConf")
    if not isinstance(locale_conf, dict):
        return []
    lang = locale_conf.get("LANG")
    if not isinstance(lang, str) or not lang:
        return []

    languages = [lang]
    if lang.find(".") > 0:
        lang = lang[: lang.index(".")]
        languages.append(lang)
    if lang.find("_") > 0:
        lang = lang[: lang.index("_")]
        languages.append(lang)
    return languages


def _add_locale_dir(candidates: List[str], directory: Path) -> None:
    # a "lang" subdirectory is searched before its parent
    for path in (directory / "lang", directory):
        text = str(path)
        if path.is_dir() and text not in candidates:
            candidates.append(text)


def candidate_locale_dirs(extra: Iterable[str] = ()) -> List[str]:
    candidates: List[str] = []
    for directory in extra:
        _add_locale_dir(candidates, Path(directory))
    _add_locale_dir(candidates, Path.cwd())
    _add_locale_dir(candidates, Path(sys.prefix) / "share" / "locale")

    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    data_dirs = os.environ.get("XDG_DATA_DIRS") or "/usr/local/share:/usr/share"
    for data_dir in [data_home] + data_dirs.split(":"):
        if data_dir:
            _add_locale_dir(candidates, Path(data_dir) / "locale")
    return candidates


def gettext_path(storage: IGlobalStorage, extra: Iterable[str] = ()) -> Optional[str]:
    """
    The first locale directory that has a translation for one of the
    languages from gettext_languages(), or None.
    """
    languages = gettext_languages(storage)
    candidates = candidate_locale_dirs(extra)
    for lang in languages:
        for directory in candidates:
            if (Path(directory) / lang).is_dir():
                logger.debug("Found translations", language=lang, path=directory)
                return directory

    logger.warning("No translation found", languages=languages, candidates=candidates)
    return None
