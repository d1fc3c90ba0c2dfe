from enum import Enum

from theme_assets.models import CopyStatus, EventKind


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    DIM = "dim"
    WHITE = "white"


EVENT_KIND_STYLE = {
    EventKind.CREATE: UIStyle.GREEN.value,
    EventKind.UPDATE: UIStyle.CYAN.value,
    EventKind.DELETE: UIStyle.RED.value,
    EventKind.DUPLICATE_IGNORED: UIStyle.YELLOW.value,
    EventKind.IGNORED: UIStyle.YELLOW.value,
    EventKind.WARNING: UIStyle.YELLOW.value,
    EventKind.ERROR: UIStyle.RED.value,
    EventKind.INFO: UIStyle.CYAN.value,
}

COPY_STATUS_STYLE = {
    CopyStatus.CREATE: UIStyle.GREEN.value,
    CopyStatus.UPDATE: UIStyle.CYAN.value,
    CopyStatus.SKIP: UIStyle.DIM.value,
    CopyStatus.ERROR: UIStyle.RED.value,
}
