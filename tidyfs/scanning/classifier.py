from pathlib import Path
from typing import Dict, Union

from .. import config
from ..models import Category, CategoryKind
from ..settings import Settings, normalize_extension

# Extension to Kind Mapping
# Used to quickly classify files without complex if/else chains
EXT_TO_KIND: Dict[str, CategoryKind] = {}
for ext in config.DOCUMENT_EXTS: EXT_TO_KIND[ext] = CategoryKind.DOCUMENT
for ext in config.IMAGE_EXTS: EXT_TO_KIND[ext] = CategoryKind.IMAGE
for ext in config.VIDEO_EXTS: EXT_TO_KIND[ext] = CategoryKind.VIDEO
for ext in config.AUDIO_EXTS: EXT_TO_KIND[ext] = CategoryKind.AUDIO
for ext in config.ARCHIVE_EXTS: EXT_TO_KIND[ext] = CategoryKind.ARCHIVE
for ext in config.CODE_EXTS: EXT_TO_KIND[ext] = CategoryKind.CODE
for ext in config.EXECUTABLE_EXTS: EXT_TO_KIND[ext] = CategoryKind.EXECUTABLE


def classify(path: Union[str, Path], settings: Settings) -> Category:
    """
    Maps a path to its Category using only the file name.

    Custom categories from the settings are checked first, so they override the
    built-in table. Settings validation guarantees an extension belongs to at
    most one custom category.
    """
    suffix = Path(path).suffix
    if not suffix:
        return Category.other(config.UNKNOWN_LABEL)
    ext = suffix[1:].lower()

    for name, extensions in settings.custom_categories.items():
        if any(normalize_extension(e) == ext for e in extensions):
            return Category.other(name, custom=True)

    kind = EXT_TO_KIND.get(ext)
    if kind is None:
        return Category.other(ext)
    return Category(kind)
