from .sitedesk import SiteDesk
from .document import update_nested, get_nested, flatten_document
from .editor import ContentEditor
from .collection import RecordCollection

__version__ = "0.3.0"
__author__ = "sitedesk"
__url__ = ""

__all__ = [
    "SiteDesk",
    "ContentEditor",
    "RecordCollection",
    "update_nested",
    "get_nested",
    "flatten_document",
]
