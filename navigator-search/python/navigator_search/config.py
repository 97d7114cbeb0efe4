"""
Settings for the search layer, read from environment variables
"""

import os
import locale
import logging
from typing import List, Optional, Tuple

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .schemas.base import BaseSchema
from .schemas.search import SearchField, default_search_fields
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3

class SearchSettings(BaseSchema):
    debounce_seconds: float = Field(DEFAULT_DEBOUNCE_SECONDS, gt=0)
    search_fields: List[SearchField] = Field(default_factory=default_search_fields)
    attack_id_sources: Tuple[str, ...] = ("mitre-attack", "DISARM")
    database_url: str = "sqlite://"
    request_timeout: float = Field(30.0, gt=0)
    collation_locale: Optional[str] = None

    @field_validator('search_fields')
    @classmethod
    def check_unique_fields(cls, v):
        names = [f.field for f in v]
        if len(names) != len(set(names)):
            raise ValueError("search fields must be unique")
        return v

    def apply_collation_locale(self) -> None:
        """
        Switch LC_COLLATE to ``collation_locale`` so name sorting follows it.
        An empty string selects the user's default locale; None leaves the
        process locale alone.
        """
        if self.collation_locale is None:
            return
        try:
            locale.setlocale(locale.LC_COLLATE, self.collation_locale)
        except locale.Error as e:
            raise ValidationError(f"Unsupported collation locale: {self.collation_locale!r}") from e
        logger.info(f"Collating names with locale {locale.setlocale(locale.LC_COLLATE)!r}")

    @classmethod
    def from_env(cls) -> "SearchSettings":
        """
        Build settings from NAV_SEARCH_* environment variables.
        Unset variables fall back to the defaults.
        """
        values = {}

        debounce_ms = os.getenv('NAV_SEARCH_DEBOUNCE_MS')
        if debounce_ms:
            try:
                values['debounce_seconds'] = int(debounce_ms) / 1000.0
            except ValueError as e:
                raise ValidationError(f"NAV_SEARCH_DEBOUNCE_MS must be an integer: {debounce_ms!r}") from e

        database_url = os.getenv('NAV_SEARCH_DATABASE_URL')
        if database_url:
            values['database_url'] = database_url

        request_timeout = os.getenv('NAV_SEARCH_REQUEST_TIMEOUT')
        if request_timeout:
            values['request_timeout'] = request_timeout

        collation_locale = os.getenv('NAV_SEARCH_COLLATION_LOCALE')
        if collation_locale is not None:
            values['collation_locale'] = collation_locale

        try:
            settings = cls(**values)
        except PydanticValidationError as e:
            logger.error(f"Invalid search settings: {e}")
            raise ValidationError(str(e)) from e

        logger.debug(f"Loaded search settings (debounce={settings.debounce_seconds}s)")
        return settings
