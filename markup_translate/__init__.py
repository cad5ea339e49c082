__version__ = "0.3.0"

from .catalog import Catalog, CatalogEntry, load_catalog
from .exceptions import CatalogLoadError, MissingTranslation, TranslationError
from .translator import TranslatableFile, Translator, TranslatorConfig
