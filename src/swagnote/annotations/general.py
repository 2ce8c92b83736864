"""Document-level annotations read from the main API file.

Every comment line of that file is checked for one of the tags below; the
value is the rest of the line, trimmed. A repeated tag overwrites the
earlier value.

============================  ======================================
Tag                           Target
============================  ======================================
``@version``                  ``info.version``
``@title``                    ``info.title``
``@description``              ``info.description``
``@termsOfServiceUrl``        ``info.termsOfService``
``@contactName``              ``info.contact.name``
``@contactEmail``             ``info.contact.email``
``@contactUrl``               ``info.contact.url``
``@licenseName``              ``info.license.name``
``@licenseUrl``               ``info.license.url``
``@basePath``                 ``basePath``
``@schemes``                  ``schemes`` (comma separated)
``@host``                     ``host``
============================  ======================================
"""

from __future__ import annotations

from typing import Callable

from swagnote.annotations.grammar import split_tag
from swagnote.models import SwaggerDocument


def _set_schemes(document: SwaggerDocument, value: str) -> None:
    document.schemes = [s for s in value.replace(" ", "").split(",") if s]


_SETTERS: dict[str, Callable[[SwaggerDocument, str], None]] = {
    "@version": lambda d, v: setattr(d.info, "version", v),
    "@title": lambda d, v: setattr(d.info, "title", v),
    "@description": lambda d, v: setattr(d.info, "description", v),
    "@termsofserviceurl": lambda d, v: setattr(d.info, "terms_of_service", v),
    "@contactname": lambda d, v: setattr(d.info.contact, "name", v),
    "@contactemail": lambda d, v: setattr(d.info.contact, "email", v),
    "@contacturl": lambda d, v: setattr(d.info.contact, "url", v),
    "@licensename": lambda d, v: setattr(d.info.license, "name", v),
    "@licenseurl": lambda d, v: setattr(d.info.license, "url", v),
    "@basepath": lambda d, v: setattr(d, "base_path", v),
    "@schemes": _set_schemes,
    "@host": lambda d, v: setattr(d, "host", v),
}


class GeneralInfoParser:
    """Apply document-level annotations to a :class:`~swagnote.models.SwaggerDocument`."""

    def __init__(self, document: SwaggerDocument) -> None:
        self.document = document

    def parse_lines(self, lines: list[str]) -> int:
        """Apply every recognised tag in *lines*; return how many were applied."""
        applied = 0
        for line in lines:
            split = split_tag(line)
            if split is None:
                continue
            tag, value = split
            setter = _SETTERS.get(tag)
            if setter is None:
                continue
            setter(self.document, value)
            applied += 1
        return applied
