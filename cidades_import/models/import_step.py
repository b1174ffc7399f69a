from __future__ import annotations

from enum import Enum

"""ImportStep enum for the import dialog lifecycle.

State transitions:
    upload -> preview -> importing -> success
    importing -> preview  (write failure, error surfaced, parse kept)
    any step before importing -> upload  (reset)
"""


class ImportStep(Enum):
    """Status of an import attempt.

    - UPLOAD: waiting for a file (initial; also after a fatal parse error)
    - PREVIEW: file parsed, candidates shown for confirmation
    - IMPORTING: bulk write issued
    - SUCCESS: bulk write committed
    """
    UPLOAD = "upload"
    PREVIEW = "preview"
    IMPORTING = "importing"
    SUCCESS = "success"
